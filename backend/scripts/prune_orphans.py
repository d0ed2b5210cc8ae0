import argparse
import logging
from sqlalchemy.orm import Session
from app.core.config import Settings
from app.core.logging import configure_logging
from app.db.session import build_engine
from app.models import Chapter, Work
from app.services.storage import find_orphan_directories, format_chapter_number, remove_path

logger = logging.getLogger(__name__)


def collect_known(db: Session) -> tuple[set[str], set[tuple[str, str]]]:
    slugs = {slug for (slug,) in db.query(Work.slug).all()}
    chapters = {
        (slug, format_chapter_number(number))
        for slug, number in db.query(Work.slug, Chapter.numero_capitulo).join(Chapter, Chapter.obra_id == Work.id).all()
    }
    return slugs, chapters


def main() -> None:
    parser = argparse.ArgumentParser(description="Remove upload directories with no matching work or chapter")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    settings = Settings()
    configure_logging(settings.log_level)
    engine = build_engine(settings.database_url)
    with Session(engine) as db:
        slugs, chapters = collect_known(db)
    orphans = find_orphan_directories(settings, slugs, chapters)
    for path in orphans:
        logger.info("Orphan directory", extra={"path": path, "dry_run": args.dry_run})
        if not args.dry_run:
            remove_path(path)
    engine.dispose()


if __name__ == "__main__":
    main()

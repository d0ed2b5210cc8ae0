import logging
import os
import secrets
import shutil
import time
from typing import BinaryIO
from app.core.config import Settings

logger = logging.getLogger(__name__)


def stage_upload(settings: Settings, field_name: str, filename: str | None, source: BinaryIO) -> str:
    os.makedirs(settings.staging_dir, exist_ok=True)
    extension = os.path.splitext(filename or "")[1]
    staged_name = f"{field_name}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"
    file_path = os.path.join(settings.staging_dir, staged_name)
    with open(file_path, "wb") as f:
        shutil.copyfileobj(source, f)
    return file_path


def format_chapter_number(number: float) -> str:
    if float(number).is_integer():
        return str(int(number))
    return str(number)


def work_directory(settings: Settings, slug: str) -> str:
    return os.path.join(settings.uploads_dir, slug)


def chapter_directory(settings: Settings, slug: str, chapter_number: float) -> str:
    return os.path.join(work_directory(settings, slug), f"cap-{format_chapter_number(chapter_number)}")


def public_url(settings: Settings, *parts: str) -> str:
    prefix = settings.uploads_url_prefix.rstrip("/")
    return "/".join([prefix, *parts])


def chapter_page_url(settings: Settings, slug: str, chapter_number: float, filename: str) -> str:
    return public_url(settings, slug, f"cap-{format_chapter_number(chapter_number)}", filename)


def remove_path(path: str | None) -> None:
    if not path:
        return
    try:
        if os.path.isdir(path):
            shutil.rmtree(path)
        elif os.path.exists(path):
            os.remove(path)
    except OSError:
        logger.warning("Failed to delete path", extra={"path": path})


def find_orphan_directories(
    settings: Settings, known_slugs: set[str], known_chapters: set[tuple[str, str]]
) -> list[str]:
    """Upload directories whose work or chapter no longer exists in the store.

    ``known_chapters`` holds ``(slug, formatted chapter number)`` pairs.
    """
    if not os.path.isdir(settings.uploads_dir):
        return []
    orphans = []
    for slug in sorted(os.listdir(settings.uploads_dir)):
        work_dir = os.path.join(settings.uploads_dir, slug)
        if not os.path.isdir(work_dir):
            continue
        if slug not in known_slugs:
            orphans.append(work_dir)
            continue
        for name in sorted(os.listdir(work_dir)):
            chapter_dir = os.path.join(work_dir, name)
            if not os.path.isdir(chapter_dir) or not name.startswith("cap-"):
                continue
            if (slug, name[len("cap-"):]) not in known_chapters:
                orphans.append(chapter_dir)
    return orphans

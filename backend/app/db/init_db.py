import logging
from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from app.models import Base, Genre, SiteConfig, Tag, Title

logger = logging.getLogger(__name__)

DEFAULT_GENRES = [
    "Ação",
    "Aventura",
    "Comédia",
    "Drama",
    "Fantasia",
    "Ficção Científica",
    "Mistério",
    "Psicológico",
    "Romance",
    "Slice of Life",
    "Sobrenatural",
    "Terror",
]

DEFAULT_TAGS = [
    "Artes Marciais",
    "Escolar",
    "Isekai",
    "Magia",
    "Monstros",
    "Reencarnação",
    "Sistema",
    "Vingança",
]

DEFAULT_TITLES = [
    ("Leitor", "Título inicial de todo usuário"),
    ("Leitor Assíduo", "Leu mais de 100 capítulos"),
    ("Comentarista", "Publicou mais de 50 comentários"),
    ("VIP", "Assinante VIP"),
    ("Caçador de Bugs", "Reportou bugs confirmados"),
]

DEFAULT_CONFIG = {
    "vip_lock_hours": "24",
    "site_name": "Manga Reader",
}


def init_db(engine: Engine) -> None:
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Schema creation failed")
        raise
    with Session(engine) as db:
        seed_defaults(db)
        db.commit()
    logger.info("Database ready", extra={"url": engine.url.render_as_string(hide_password=True)})


def seed_defaults(db: Session) -> None:
    existing_genres = set(db.scalars(select(Genre.nome)))
    for name in DEFAULT_GENRES:
        if name not in existing_genres:
            db.add(Genre(nome=name))

    existing_tags = set(db.scalars(select(Tag.nome)))
    for name in DEFAULT_TAGS:
        if name not in existing_tags:
            db.add(Tag(nome=name))

    existing_titles = set(db.scalars(select(Title.nome)))
    for name, description in DEFAULT_TITLES:
        if name not in existing_titles:
            db.add(Title(nome=name, descricao=description))

    existing_config = set(db.scalars(select(SiteConfig.chave)))
    for key, value in DEFAULT_CONFIG.items():
        if key not in existing_config:
            db.add(SiteConfig(chave=key, valor=value))

import logging
import os
import shutil
from dataclasses import dataclass, field
from sqlalchemy.orm import Session
from app.core.config import Settings
from app.core.logging import upload_context
from app.models import Chapter, Genre, Page, Tag, Work
from app.services.archive_extraction import extract_pages
from app.services.storage import (
    chapter_directory,
    chapter_page_url,
    format_chapter_number,
    public_url,
    remove_path,
    work_directory,
)

logger = logging.getLogger(__name__)


@dataclass
class WorkDraft:
    titulo: str
    slug: str
    numero_capitulo: float
    status: str = "em_andamento"
    sinopse: str | None = None
    tipo: str | None = None
    titulo_alternativo: str | None = None
    is_vip: bool = False
    genres: list[Genre] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)


@dataclass
class PublishedChapter:
    chapter: Chapter
    pages: list[Page]


def _insert_chapter(
    db: Session,
    settings: Settings,
    work: Work,
    numero_capitulo: float,
    archive_path: str,
    created_paths: list[str],
) -> PublishedChapter:
    chapter = Chapter(obra_id=work.id, numero_capitulo=numero_capitulo)
    db.add(chapter)
    db.flush()

    target_dir = chapter_directory(settings, work.slug, numero_capitulo)
    if os.path.isdir(target_dir):
        # no chapter row owns this directory, so whatever is in it is left over
        logger.warning("Clearing stale chapter directory", extra={"path": target_dir})
        shutil.rmtree(target_dir)
    created_paths.append(target_dir)
    extraction = extract_pages(archive_path, target_dir)

    pages = []
    for extracted in extraction.pages:
        page = Page(
            capitulo_id=chapter.id,
            numero_pagina=extracted.number,
            imagem_url=chapter_page_url(settings, work.slug, numero_capitulo, extracted.filename),
        )
        db.add(page)
        pages.append(page)
    db.flush()
    return PublishedChapter(chapter=chapter, pages=pages)


def _move_image(settings: Settings, staged_path: str, slug: str, created_paths: list[str]) -> str:
    target_dir = work_directory(settings, slug)
    os.makedirs(target_dir, exist_ok=True)
    filename = os.path.basename(staged_path)
    target_path = os.path.join(target_dir, filename)
    shutil.move(staged_path, target_path)
    created_paths.append(target_path)
    return public_url(settings, slug, filename)


def _discard(created_paths: list[str]) -> None:
    for path in reversed(created_paths):
        remove_path(path)


def create_work(
    db: Session,
    settings: Settings,
    draft: WorkDraft,
    cover_path: str,
    banner_path: str | None,
    archive_path: str,
) -> tuple[Work, PublishedChapter]:
    """Insert a work with its first chapter and pages in a single transaction.

    On any failure the transaction is rolled back and every file moved or
    extracted for this work is removed before the error propagates.
    """
    created_paths: list[str] = []
    work_dir = work_directory(settings, draft.slug)
    work_dir_existed = os.path.isdir(work_dir)
    with upload_context(f"obra:{draft.slug}"):
        try:
            work = Work(
                titulo=draft.titulo,
                slug=draft.slug,
                sinopse=draft.sinopse,
                status=draft.status,
                capa_url="",
                tipo=draft.tipo,
                titulo_alternativo=draft.titulo_alternativo,
                is_vip=draft.is_vip,
                genres=draft.genres,
                tags=draft.tags,
            )
            db.add(work)
            db.flush()

            if not work_dir_existed:
                created_paths.append(work_dir)
            work.capa_url = _move_image(settings, cover_path, draft.slug, created_paths)
            if banner_path:
                work.banner_url = _move_image(settings, banner_path, draft.slug, created_paths)

            published = _insert_chapter(db, settings, work, draft.numero_capitulo, archive_path, created_paths)
            db.commit()
        except Exception:
            logger.warning("Rolling back work upload", extra={"removed_paths": len(created_paths)})
            db.rollback()
            _discard(created_paths)
            raise

        remove_path(archive_path)
        logger.info(
            "Work created",
            extra={"obra_id": work.id, "capitulo_id": published.chapter.id, "pages": len(published.pages)},
        )
    return work, published


def add_chapter(
    db: Session,
    settings: Settings,
    work: Work,
    numero_capitulo: float,
    archive_path: str,
) -> PublishedChapter:
    created_paths: list[str] = []
    with upload_context(f"capitulo:{work.id}/{format_chapter_number(numero_capitulo)}"):
        try:
            published = _insert_chapter(db, settings, work, numero_capitulo, archive_path, created_paths)
            db.commit()
        except Exception:
            logger.warning("Rolling back chapter upload", extra={"removed_paths": len(created_paths)})
            db.rollback()
            _discard(created_paths)
            raise

        remove_path(archive_path)
        logger.info("Chapter created", extra={"capitulo_id": published.chapter.id, "pages": len(published.pages)})
    return published


def delete_work(db: Session, settings: Settings, work: Work) -> None:
    slug = work.slug
    db.delete(work)
    db.commit()
    remove_path(work_directory(settings, slug))
    logger.info("Work deleted", extra={"slug": slug})


def delete_chapter(db: Session, settings: Settings, chapter: Chapter) -> None:
    target_dir = chapter_directory(settings, chapter.work.slug, chapter.numero_capitulo)
    chapter_id = chapter.id
    db.delete(chapter)
    db.commit()
    remove_path(target_dir)
    logger.info("Chapter deleted", extra={"capitulo_id": chapter_id})

import logging
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.models import Chapter, Page, Work
from app.schemas.chapter import ChapterCreated, ChapterNavigation, ChapterRef, PageOut
from app.api.works import has_file, parse_chapter_number, parse_work_id, pipeline_error_detail
from app.services import publishing
from app.services.archive_extraction import ArchiveError, PageWriteError
from app.services.storage import remove_path, stage_upload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chapters", response_model=ChapterCreated, status_code=201)
def create_chapter(
    obra_id: str | None = Form(None),
    numero_capitulo: str | None = Form(None),
    capitulo_zip: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not has_file(capitulo_zip):
        raise HTTPException(status_code=400, detail="obra_id, numero_capitulo and capitulo_zip are required")
    work_id = parse_work_id(obra_id)
    chapter_number = parse_chapter_number(numero_capitulo)
    work = db.get(Work, work_id)
    if not work:
        raise HTTPException(status_code=404, detail="Work not found")

    archive_path = None
    try:
        archive_path = stage_upload(settings, "capitulo_zip", capitulo_zip.filename, capitulo_zip.file)
        published = publishing.add_chapter(db, settings, work, chapter_number, archive_path)
    except IntegrityError:
        logger.warning("Duplicate chapter number", extra={"obra_id": work_id, "numero_capitulo": chapter_number})
        raise HTTPException(status_code=409, detail="Chapter number already exists for this work")
    except (ArchiveError, PageWriteError) as exc:
        logger.error("Chapter extraction failed", extra={"obra_id": work_id, "error": str(exc)})
        raise HTTPException(status_code=500, detail=pipeline_error_detail(exc))
    except OSError as exc:
        logger.error("Failed to store upload", extra={"obra_id": work_id, "error": str(exc)})
        raise HTTPException(status_code=500, detail={"error": "Failed to store upload"})
    finally:
        remove_path(archive_path)

    return ChapterCreated(
        capitulo_id=published.chapter.id,
        obra_id=work.id,
        numero_capitulo=published.chapter.numero_capitulo,
        paginas=len(published.pages),
    )


@router.get("/chapters/{chapter_id}/pages", response_model=list[PageOut])
def get_chapter_pages(chapter_id: int, db: Session = Depends(get_db)):
    chapter = db.get(Chapter, chapter_id)
    if not chapter:
        raise HTTPException(status_code=404, detail="Chapter not found")
    pages = db.query(Page).filter(Page.capitulo_id == chapter_id).order_by(Page.numero_pagina).all()
    if not pages:
        raise HTTPException(status_code=404, detail="No pages found for chapter")
    return pages


@router.get("/chapters/{chapter_id}/navigation", response_model=ChapterNavigation)
def get_chapter_navigation(chapter_id: int, db: Session = Depends(get_db)):
    chapter = db.get(Chapter, chapter_id)
    if not chapter:
        raise HTTPException(status_code=404, detail="Chapter not found")
    siblings = (
        db.query(Chapter)
        .filter(Chapter.obra_id == chapter.obra_id)
        .order_by(Chapter.numero_capitulo.asc())
        .all()
    )
    index = next(i for i, sibling in enumerate(siblings) if sibling.id == chapter.id)
    previous = siblings[index - 1] if index > 0 else None
    following = siblings[index + 1] if index + 1 < len(siblings) else None
    return ChapterNavigation(
        previous=ChapterRef.model_validate(previous) if previous else None,
        next=ChapterRef.model_validate(following) if following else None,
        work_slug=chapter.work.slug,
    )


@router.delete("/chapters/{chapter_id}")
def delete_chapter(chapter_id: int, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    chapter = db.get(Chapter, chapter_id)
    if not chapter:
        raise HTTPException(status_code=404, detail="Chapter not found")
    publishing.delete_chapter(db, settings, chapter)
    return {"status": "deleted"}

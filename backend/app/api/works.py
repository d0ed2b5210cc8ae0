import logging
import math
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.models import Genre, Tag, Work, WORK_STATUSES
from app.schemas.chapter import ChapterOut
from app.schemas.work import WorkCreated, WorkDetail, WorkSummary
from app.services import publishing
from app.services.archive_extraction import ArchiveError, PageWriteError
from app.services.slugs import slugify
from app.services.storage import remove_path, stage_upload

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_LIST_PAGE = 100_000
MAX_ROW_ID = 2**63 - 1


def parse_chapter_number(value: str | None) -> float:
    if value is None or not value.strip():
        raise HTTPException(status_code=400, detail="numero_capitulo is required")
    try:
        number = float(value.strip().replace(",", "."))
    except ValueError:
        raise HTTPException(status_code=400, detail="numero_capitulo must be a number")
    if not math.isfinite(number) or number < 0:
        raise HTTPException(status_code=400, detail="numero_capitulo must be a non-negative number")
    return number


def parse_work_id(value: str | None) -> int:
    if value is None or not value.strip():
        raise HTTPException(status_code=400, detail="obra_id is required")
    try:
        work_id = int(value.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail="obra_id must be an integer")
    if not 0 < work_id <= MAX_ROW_ID:
        raise HTTPException(status_code=400, detail="obra_id is out of range")
    return work_id


def optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def has_file(upload: UploadFile | None) -> bool:
    return upload is not None and bool(upload.filename)


def pipeline_error_detail(exc: Exception) -> dict:
    detail = {"error": str(exc)}
    if isinstance(exc, PageWriteError):
        detail["failed_entry"] = exc.entry
        detail["written_pages"] = exc.written_pages
    return detail


def _title_contains(db: Session, needle: str):
    if db.get_bind().dialect.name == "sqlite":
        # casefold() is registered on every SQLite connection in app.db.session
        return func.instr(func.casefold(Work.titulo), needle.casefold()) > 0
    escaped = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return Work.titulo.ilike(f"%{escaped}%", escape="\\")


def _split_names(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def _resolve_named(db: Session, model, raw: str | None, label: str) -> list:
    names = _split_names(raw)
    if not names:
        return []
    rows = db.query(model).filter(model.nome.in_(names)).all()
    found = {row.nome for row in rows}
    missing = [name for name in names if name not in found]
    if missing:
        raise HTTPException(status_code=400, detail=f"Unknown {label}: {', '.join(missing)}")
    return rows


def _work_summary(work: Work) -> dict:
    return {
        "id": work.id,
        "titulo": work.titulo,
        "slug": work.slug,
        "sinopse": work.sinopse,
        "status": work.status,
        "capa_url": work.capa_url,
        "banner_url": work.banner_url,
        "tipo": work.tipo,
        "titulo_alternativo": work.titulo_alternativo,
        "is_vip": work.is_vip,
        "created_at": work.created_at,
        "generos": [genre.nome for genre in work.genres],
        "tags": [tag.nome for tag in work.tags],
    }


@router.get("/works", response_model=list[WorkSummary])
def list_works(
    page: int = Query(1, ge=1, le=MAX_LIST_PAGE),
    limit: int | None = Query(None, ge=1),
    titulo: str | None = None,
    tipo: str | None = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    query = db.query(Work).options(selectinload(Work.genres), selectinload(Work.tags))
    if titulo:
        query = query.filter(_title_contains(db, titulo))
    if tipo:
        query = query.filter(Work.tipo == tipo)
    works = query.order_by(Work.created_at.desc(), Work.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return [WorkSummary(**_work_summary(work)) for work in works]


@router.get("/works/{slug}", response_model=WorkDetail)
def get_work(slug: str, is_vip: bool = Query(False, alias="isVip"), db: Session = Depends(get_db)):
    work = db.query(Work).filter(Work.slug == slug).first()
    if not work:
        raise HTTPException(status_code=404, detail="Work not found")
    # TODO: honour the vip_lock_hours config once the grace-period rule is defined
    locked = work.is_vip and not is_vip
    chapters = [
        ChapterOut(
            id=chapter.id,
            obra_id=chapter.obra_id,
            numero_capitulo=chapter.numero_capitulo,
            created_at=chapter.created_at,
            is_locked=locked,
        )
        for chapter in work.chapters
    ]
    return WorkDetail(**_work_summary(work), capitulos=chapters)


@router.post("/works", response_model=WorkCreated, status_code=201)
def create_work(
    titulo: str | None = Form(None),
    sinopse: str | None = Form(None),
    status: str | None = Form(None),
    tipo: str | None = Form(None),
    titulo_alternativo: str | None = Form(None),
    is_vip: str | None = Form(None),
    numero_capitulo: str | None = Form(None),
    generos: str | None = Form(None),
    tags: str | None = Form(None),
    capa: UploadFile | None = File(None),
    banner: UploadFile | None = File(None),
    capitulo_zip: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    titulo = (titulo or "").strip()
    if not titulo or not has_file(capa) or not has_file(capitulo_zip):
        raise HTTPException(status_code=400, detail="titulo, capa and capitulo_zip are required")
    chapter_number = parse_chapter_number(numero_capitulo)
    status = (status or "em_andamento").strip()
    if status not in WORK_STATUSES:
        raise HTTPException(status_code=400, detail=f"status must be one of: {', '.join(WORK_STATUSES)}")
    slug = slugify(titulo)
    if not slug:
        raise HTTPException(status_code=400, detail="titulo must contain letters or digits")

    draft = publishing.WorkDraft(
        titulo=titulo,
        slug=slug,
        numero_capitulo=chapter_number,
        status=status,
        sinopse=optional_text(sinopse),
        tipo=optional_text(tipo),
        titulo_alternativo=optional_text(titulo_alternativo),
        is_vip=(is_vip or "").strip().lower() in ("true", "1"),
        genres=_resolve_named(db, Genre, generos, "generos"),
        tags=_resolve_named(db, Tag, tags, "tags"),
    )

    staged = []
    try:
        cover_path = stage_upload(settings, "capa", capa.filename, capa.file)
        staged.append(cover_path)
        banner_path = None
        if has_file(banner):
            banner_path = stage_upload(settings, "banner", banner.filename, banner.file)
            staged.append(banner_path)
        archive_path = stage_upload(settings, "capitulo_zip", capitulo_zip.filename, capitulo_zip.file)
        staged.append(archive_path)

        work, published = publishing.create_work(db, settings, draft, cover_path, banner_path, archive_path)
    except IntegrityError:
        logger.warning("Duplicate work slug", extra={"slug": slug})
        raise HTTPException(status_code=409, detail=f"A work with slug '{slug}' already exists")
    except (ArchiveError, PageWriteError) as exc:
        logger.error("Chapter extraction failed", extra={"slug": slug, "error": str(exc)})
        raise HTTPException(status_code=500, detail=pipeline_error_detail(exc))
    except OSError as exc:
        logger.error("Failed to store upload", extra={"slug": slug, "error": str(exc)})
        raise HTTPException(status_code=500, detail={"error": "Failed to store upload"})
    finally:
        for path in staged:
            remove_path(path)

    return WorkCreated(obra_id=work.id, slug=work.slug, capitulo_id=published.chapter.id, paginas=len(published.pages))


@router.delete("/works/{slug}")
def delete_work(slug: str, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    work = db.query(Work).filter(Work.slug == slug).first()
    if not work:
        raise HTTPException(status_code=404, detail="Work not found")
    publishing.delete_work(db, settings, work)
    return {"status": "deleted"}

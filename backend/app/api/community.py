import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.models import BugReport, Chapter, Comment, Title, User
from app.schemas.community import (
    BugReportCreate,
    BugReportOut,
    CommentCreate,
    CommentOut,
    UserCreate,
    UserOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/users", response_model=UserOut, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    nome = payload.nome.strip()
    email = payload.email.strip().lower()
    if not nome or not email:
        raise HTTPException(status_code=400, detail="nome and email are required")
    if payload.titulo_id is not None and not db.get(Title, payload.titulo_id):
        raise HTTPException(status_code=404, detail="Title not found")
    user = User(nome=nome, email=email, is_vip=payload.is_vip, titulo_id=payload.titulo_id)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Email already registered")
    db.refresh(user)
    return user


@router.get("/users/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/chapters/{chapter_id}/comments", response_model=list[CommentOut])
def list_comments(chapter_id: int, db: Session = Depends(get_db)):
    if not db.get(Chapter, chapter_id):
        raise HTTPException(status_code=404, detail="Chapter not found")
    return db.query(Comment).filter(Comment.capitulo_id == chapter_id).order_by(Comment.created_at.asc(), Comment.id.asc()).all()


@router.post("/chapters/{chapter_id}/comments", response_model=CommentOut, status_code=201)
def create_comment(chapter_id: int, payload: CommentCreate, db: Session = Depends(get_db)):
    if not db.get(Chapter, chapter_id):
        raise HTTPException(status_code=404, detail="Chapter not found")
    if not db.get(User, payload.usuario_id):
        raise HTTPException(status_code=404, detail="User not found")
    conteudo = payload.conteudo.strip()
    if not conteudo:
        raise HTTPException(status_code=400, detail="Comment cannot be empty")
    comment = Comment(capitulo_id=chapter_id, usuario_id=payload.usuario_id, conteudo=conteudo)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


@router.post("/bug-reports", response_model=BugReportOut, status_code=201)
def create_bug_report(payload: BugReportCreate, db: Session = Depends(get_db)):
    descricao = payload.descricao.strip()
    if not descricao:
        raise HTTPException(status_code=400, detail="descricao is required")
    if payload.usuario_id is not None and not db.get(User, payload.usuario_id):
        raise HTTPException(status_code=404, detail="User not found")
    if payload.capitulo_id is not None and not db.get(Chapter, payload.capitulo_id):
        raise HTTPException(status_code=404, detail="Chapter not found")
    report = BugReport(descricao=descricao, usuario_id=payload.usuario_id, capitulo_id=payload.capitulo_id)
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info("Bug report received", extra={"report_id": report.id})
    return report

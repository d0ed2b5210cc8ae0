from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.models import Genre, SiteConfig, Tag, Title
from app.schemas.catalog import ConfigItemOut, NamedItemOut, TitleOut

router = APIRouter()


@router.get("/genres", response_model=list[NamedItemOut])
def list_genres(db: Session = Depends(get_db)):
    return db.query(Genre).order_by(Genre.nome).all()


@router.get("/tags", response_model=list[NamedItemOut])
def list_tags(db: Session = Depends(get_db)):
    return db.query(Tag).order_by(Tag.nome).all()


@router.get("/titles", response_model=list[TitleOut])
def list_titles(db: Session = Depends(get_db)):
    return db.query(Title).order_by(Title.nome).all()


@router.get("/config", response_model=list[ConfigItemOut])
def list_config(db: Session = Depends(get_db)):
    return db.query(SiteConfig).order_by(SiteConfig.chave).all()

from datetime import datetime
from pydantic import BaseModel, Field
from app.schemas.chapter import ChapterOut


class WorkSummary(BaseModel):
    id: int
    titulo: str
    slug: str
    sinopse: str | None
    status: str
    capa_url: str
    banner_url: str | None
    tipo: str | None
    titulo_alternativo: str | None
    is_vip: bool
    created_at: datetime
    generos: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    class Config:
        from_attributes = True


class WorkDetail(WorkSummary):
    capitulos: list[ChapterOut] = Field(default_factory=list)


class WorkCreated(BaseModel):
    obra_id: int
    slug: str
    capitulo_id: int
    paginas: int

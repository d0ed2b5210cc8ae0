from datetime import datetime
from pydantic import BaseModel, Field


class ChapterOut(BaseModel):
    id: int
    obra_id: int
    numero_capitulo: float
    created_at: datetime
    is_locked: bool = Field(default=False, alias="isLocked")

    class Config:
        from_attributes = True
        populate_by_name = True


class ChapterCreated(BaseModel):
    capitulo_id: int
    obra_id: int
    numero_capitulo: float
    paginas: int


class ChapterRef(BaseModel):
    id: int
    numero_capitulo: float

    class Config:
        from_attributes = True


class ChapterNavigation(BaseModel):
    previous: ChapterRef | None
    next: ChapterRef | None
    work_slug: str = Field(alias="workSlug")

    class Config:
        populate_by_name = True


class PageOut(BaseModel):
    id: int
    imagem_url: str
    numero_pagina: int

    class Config:
        from_attributes = True

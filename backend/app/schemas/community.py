from datetime import datetime
from pydantic import BaseModel


class UserCreate(BaseModel):
    nome: str
    email: str
    is_vip: bool = False
    titulo_id: int | None = None


class UserOut(BaseModel):
    id: int
    nome: str
    email: str
    is_vip: bool
    titulo_id: int | None
    created_at: datetime

    class Config:
        from_attributes = True


class CommentCreate(BaseModel):
    usuario_id: int
    conteudo: str


class CommentOut(BaseModel):
    id: int
    capitulo_id: int
    usuario_id: int
    conteudo: str
    created_at: datetime

    class Config:
        from_attributes = True


class BugReportCreate(BaseModel):
    descricao: str
    usuario_id: int | None = None
    capitulo_id: int | None = None


class BugReportOut(BaseModel):
    id: int
    descricao: str
    usuario_id: int | None
    capitulo_id: int | None
    created_at: datetime

    class Config:
        from_attributes = True

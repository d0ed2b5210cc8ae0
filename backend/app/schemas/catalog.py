from pydantic import BaseModel


class NamedItemOut(BaseModel):
    id: int
    nome: str

    class Config:
        from_attributes = True


class TitleOut(NamedItemOut):
    descricao: str | None


class ConfigItemOut(BaseModel):
    chave: str
    valor: str

    class Config:
        from_attributes = True

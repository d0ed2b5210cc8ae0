from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base


class Page(Base):
    __tablename__ = "paginas"

    id: Mapped[int] = mapped_column(primary_key=True)
    capitulo_id: Mapped[int] = mapped_column(ForeignKey("capitulos.id", ondelete="CASCADE"), index=True)
    numero_pagina: Mapped[int] = mapped_column(Integer)
    imagem_url: Mapped[str] = mapped_column(String(1024))

    chapter = relationship("Chapter", back_populates="pages")

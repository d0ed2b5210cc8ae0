from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base

WORK_STATUSES = ("em_andamento", "completo", "hiato")

work_genres = Table(
    "obra_generos",
    Base.metadata,
    Column("obra_id", ForeignKey("obras.id", ondelete="CASCADE"), primary_key=True),
    Column("genero_id", ForeignKey("generos.id", ondelete="CASCADE"), primary_key=True),
)

work_tags = Table(
    "obra_tags",
    Base.metadata,
    Column("obra_id", ForeignKey("obras.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Work(Base):
    __tablename__ = "obras"

    id: Mapped[int] = mapped_column(primary_key=True)
    titulo: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    sinopse: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="em_andamento")
    capa_url: Mapped[str] = mapped_column(String(1024))
    banner_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    tipo: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    titulo_alternativo: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_vip: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    chapters = relationship(
        "Chapter",
        back_populates="work",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Chapter.numero_capitulo",
    )
    genres = relationship("Genre", secondary=work_genres, order_by="Genre.nome")
    tags = relationship("Tag", secondary=work_tags, order_by="Tag.nome")

from datetime import datetime
from sqlalchemy import DateTime, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base


class Chapter(Base):
    __tablename__ = "capitulos"
    __table_args__ = (UniqueConstraint("obra_id", "numero_capitulo", name="uq_capitulos_obra_numero"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    obra_id: Mapped[int] = mapped_column(ForeignKey("obras.id", ondelete="CASCADE"), index=True)
    numero_capitulo: Mapped[float] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    work = relationship("Work", back_populates="chapters")
    pages = relationship(
        "Page",
        back_populates="chapter",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Page.numero_pagina",
    )
    comments = relationship("Comment", back_populates="chapter", cascade="all, delete-orphan", passive_deletes=True)

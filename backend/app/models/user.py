from datetime import datetime
from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base


class User(Base):
    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(primary_key=True)
    nome: Mapped[str] = mapped_column(String(128))
    email: Mapped[str] = mapped_column(String(255), unique=True)
    is_vip: Mapped[bool] = mapped_column(Boolean, default=False)
    titulo_id: Mapped[int | None] = mapped_column(ForeignKey("titulos.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    title = relationship("Title")
    comments = relationship("Comment", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

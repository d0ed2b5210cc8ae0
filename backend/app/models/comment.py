from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from app.models.base import Base


class Comment(Base):
    __tablename__ = "comentarios"

    id = Column(Integer, primary_key=True, index=True)
    capitulo_id = Column(Integer, ForeignKey("capitulos.id", ondelete="CASCADE"), nullable=False, index=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True)
    conteudo = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    chapter = relationship("Chapter", back_populates="comments")
    user = relationship("User", back_populates="comments")


class BugReport(Base):
    __tablename__ = "reportes_bug"

    id = Column(Integer, primary_key=True, index=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True)
    capitulo_id = Column(Integer, ForeignKey("capitulos.id", ondelete="CASCADE"), nullable=True)
    descricao = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

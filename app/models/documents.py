# app/models/documents.py
# Documentos localizados con estado dual (draft/published) y revisión por fila
from __future__ import annotations
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String, Integer, ForeignKey, DateTime, Enum, UniqueConstraint, func
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, JSONType

DocState = Enum(
    "draft", "published",
    name="doc_state",
    create_constraint=True,
    validate_strings=True,
    native_enum=False,
)


class LocalizedDocMixin:
    """
    Columnas comunes. draft y published son filas independientes:
    publicar COPIA el draft, no lo mueve.
    """
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    locale: Mapped[str] = mapped_column(String(16))
    state: Mapped[str] = mapped_column(DocState, default="draft")
    revision: Mapped[int] = mapped_column(Integer, default=1)
    content: Mapped[dict] = mapped_column(JSONType, default=dict)

    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ProductDoc(LocalizedDocMixin, Base):
    __tablename__ = "product_docs"

    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), index=True)
    # dotted-path -> bool; true = solo admin puede modificar
    locked_fields: Mapped[dict] = mapped_column(JSONType, default=dict)

    product: Mapped["Product"] = relationship("Product", back_populates="docs")  # noqa: F821

    __table_args__ = (
        UniqueConstraint("product_id", "locale", "state", name="uq_product_doc_key"),
    )


class CollectionDoc(LocalizedDocMixin, Base):
    __tablename__ = "collection_docs"

    collection_id: Mapped[str] = mapped_column(String(160), index=True)
    slug_by_locale: Mapped[dict] = mapped_column(JSONType, default=dict)

    __table_args__ = (
        UniqueConstraint("collection_id", "locale", "state", name="uq_collection_doc_key"),
    )


class LeaderboardDoc(LocalizedDocMixin, Base):
    __tablename__ = "leaderboard_docs"

    board_id: Mapped[str] = mapped_column(String(160), index=True)
    mode: Mapped[str] = mapped_column(String(32), default="manual")

    __table_args__ = (
        UniqueConstraint("board_id", "locale", "state", name="uq_leaderboard_doc_key"),
    )


class HomepageConfig(LocalizedDocMixin, Base):
    # la clave es el propio locale
    __tablename__ = "homepage_configs"

    __table_args__ = (
        UniqueConstraint("locale", "state", name="uq_homepage_config_key"),
    )

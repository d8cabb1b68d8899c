# app/models/catalog.py
# Identidad canónica de productos, registro de slugs, media y redirects
from __future__ import annotations
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String, Integer, ForeignKey, DateTime, Enum, UniqueConstraint, Index, func
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, JSONType

ProductStatus = Enum(
    "active", "archived",
    name="product_status",
    create_constraint=True,
    validate_strings=True,
    native_enum=False,
)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # clave de negocio inmutable; nunca se reutiliza
    canonical_id: Mapped[str] = mapped_column(String(160), unique=True, index=True)

    slug_by_locale: Mapped[dict] = mapped_column(JSONType, default=dict)
    type_taxonomy: Mapped[list] = mapped_column(JSONType, default=list)
    platforms: Mapped[list] = mapped_column(JSONType, default=list)
    store_links: Mapped[dict] = mapped_column(JSONType, default=dict)

    developer: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    publisher: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    brand: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)

    status: Mapped[str] = mapped_column(ProductStatus, default="active")
    archived_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    slugs: Mapped[list["ProductSlug"]] = relationship(
        "ProductSlug", back_populates="product", cascade="all, delete-orphan"
    )
    docs: Mapped[list["ProductDoc"]] = relationship(  # noqa: F821
        "ProductDoc", back_populates="product", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_products_status", "status"),
    )


class ProductSlug(Base):
    """
    Dueño de cada (locale, slug). Un producto archivado conserva sus filas
    hasta que otro producto reclama el slug (purga).
    """
    __tablename__ = "product_slugs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), index=True)
    locale: Mapped[str] = mapped_column(String(16))
    slug: Mapped[str] = mapped_column(String(200))

    product: Mapped["Product"] = relationship("Product", back_populates="slugs")

    __table_args__ = (
        UniqueConstraint("locale", "slug", name="uq_product_slug_locale_slug"),
        UniqueConstraint("product_id", "locale", name="uq_product_slug_product_locale"),
    )


MediaType = Enum(
    "image", "video", "presskit", "icon", "cover",
    name="media_type",
    create_constraint=True,
    validate_strings=True,
    native_enum=False,
)

MediaOwnerType = Enum(
    "product", "collection", "leaderboard", "homepage",
    name="media_owner_type",
    create_constraint=True,
    validate_strings=True,
    native_enum=False,
)


class MediaAsset(Base):
    __tablename__ = "media_assets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_type: Mapped[str] = mapped_column(MediaOwnerType)
    owner_id: Mapped[str] = mapped_column(String(160))
    # None => aplica a todos los locales del owner
    locale: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    type: Mapped[str] = mapped_column(MediaType)
    url: Mapped[str] = mapped_column(String(1024))
    meta: Mapped[dict] = mapped_column(JSONType, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_media_assets_owner", "owner_type", "owner_id"),
    )


class RedirectMap(Base):
    __tablename__ = "redirect_maps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    locale: Mapped[str] = mapped_column(String(16))
    from_path: Mapped[str] = mapped_column(String(512))
    to_path: Mapped[str] = mapped_column(String(512))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("locale", "from_path", name="uq_redirect_locale_from_path"),
        Index("ix_redirect_maps_locale_to_path", "locale", "to_path"),
    )

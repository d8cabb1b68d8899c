# app/services/product_service.py
# Identidad canónica de productos: alta, patch, archivo (soft delete) y listados
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple, Sequence, Mapping

from sqlalchemy import select, func, or_, cast, String
from sqlalchemy.orm import Session

from app.core.locales import supported_locales
from app.models.catalog import Product
from app.schemas.catalog import ProductCreate, ProductPatch
from app.services.audit_service import snapshot, write_audit_log
from app.services.errors import (
    ProductNotFoundError,
    CanonicalIdConflictError,
    SlugRequiredError,
)
from app.services.slug_service import (
    ensure_slug_available,
    sync_product_slugs,
    apply_slug_redirects,
)
from app.utils.slug import product_path

log = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _clean_slugs(slug_by_locale: Mapping[str, str] | None) -> dict[str, str]:
    return {loc: (s or "").strip() for loc, s in (slug_by_locale or {}).items()}


def _require_slugs(slug_by_locale: Mapping[str, str]) -> None:
    missing = [loc for loc in supported_locales() if not slug_by_locale.get(loc)]
    if missing:
        raise SlugRequiredError(missing)


def get_product(db: Session, *, canonical_id: str) -> Optional[Product]:
    return db.scalar(select(Product).where(Product.canonical_id == canonical_id))


def get_product_or_404(db: Session, *, canonical_id: str) -> Product:
    product = get_product(db, canonical_id=canonical_id)
    if product is None:
        raise ProductNotFoundError(canonical_id)
    return product


def list_products(
    db: Session,
    *,
    search: Optional[str] = None,
    type_: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[Sequence[Product], int]:
    stmt = select(Product)
    if search:
        like = f"%{search}%"
        stmt = stmt.where(
            or_(
                Product.canonical_id.ilike(like),
                Product.developer.ilike(like),
                Product.publisher.ilike(like),
                Product.brand.ilike(like),
            )
        )
    if type_:
        # texto del array JSON: portable entre JSONB y SQLite
        stmt = stmt.where(cast(Product.type_taxonomy, String).like(f'%"{type_}"%'))
    if status:
        stmt = stmt.where(Product.status == status)

    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    page = max(1, page)
    page_size = max(1, min(page_size, 100))
    stmt = stmt.order_by(Product.created_at.desc(), Product.id.desc())
    items = db.scalars(stmt.limit(page_size).offset((page - 1) * page_size)).all()
    return items, int(total)


def create_product(db: Session, *, payload: ProductCreate, actor_id: Optional[str]) -> Product:
    slugs = _clean_slugs(payload.slug_by_locale)
    _require_slugs(slugs)

    # canonicalId nunca se reutiliza, ni siquiera el de un archivado
    if get_product(db, canonical_id=payload.canonical_id) is not None:
        raise CanonicalIdConflictError(payload.canonical_id)

    ensure_slug_available(db, canonical_id=payload.canonical_id, slug_by_locale=slugs, actor_id=actor_id)

    product = Product(
        canonical_id=payload.canonical_id,
        slug_by_locale=slugs,
        type_taxonomy=list(payload.type_taxonomy),
        platforms=list(payload.platforms),
        developer=payload.developer,
        publisher=payload.publisher,
        brand=payload.brand,
        store_links=dict(payload.store_links),
        status=payload.status,
        archived_at=_now_utc() if payload.status == "archived" else None,
    )
    db.add(product)
    db.flush()
    sync_product_slugs(db, product=product)

    write_audit_log(
        db,
        actor_id=actor_id,
        action="product.create",
        entity_type="product",
        entity_id=product.canonical_id,
        before=None,
        after=product,
    )
    return product


def patch_product(
    db: Session,
    *,
    canonical_id: str,
    patch: ProductPatch,
    actor_id: Optional[str],
) -> Product:
    product = get_product_or_404(db, canonical_id=canonical_id)
    before = snapshot(product)
    old_slugs = dict(product.slug_by_locale or {})

    data = patch.model_dump(exclude_unset=True, exclude_none=True)

    new_slugs = None
    if "slug_by_locale" in data:
        new_slugs = {**old_slugs, **_clean_slugs(data.pop("slug_by_locale"))}
        _require_slugs(new_slugs)
        if new_slugs != old_slugs:
            ensure_slug_available(db, canonical_id=canonical_id, slug_by_locale=new_slugs, actor_id=actor_id)
            product.slug_by_locale = new_slugs

    for field_name in ("type_taxonomy", "platforms"):
        if field_name in data:
            setattr(product, field_name, list(data[field_name]))
    for field_name in ("developer", "publisher", "brand"):
        if field_name in data:
            setattr(product, field_name, data[field_name])
    if "store_links" in data:
        product.store_links = dict(data["store_links"])

    status = data.get("status")
    if status and status != product.status:
        product.status = status
        product.archived_at = _now_utc() if status == "archived" else None

    db.flush()

    if new_slugs is not None and new_slugs != old_slugs:
        sync_product_slugs(db, product=product)
        apply_slug_redirects(
            db,
            old_slug_by_locale=old_slugs,
            new_slug_by_locale=new_slugs,
            path_builder=product_path,
        )

    write_audit_log(
        db,
        actor_id=actor_id,
        action="product.patch",
        entity_type="product",
        entity_id=canonical_id,
        before=before,
        after=product,
    )
    return product


def delete_product(db: Session, *, canonical_id: str, actor_id: Optional[str]) -> dict:
    """
    Soft delete: pasa a `archived`. Idempotente; el segundo llamado
    no toca el estado ni escribe auditoría.
    """
    product = get_product_or_404(db, canonical_id=canonical_id)
    result = {"deleted": True, "mode": "soft", "status": "archived"}

    if product.status == "archived":
        return {**result, "already_archived": True}

    before = snapshot(product)
    product.status = "archived"
    product.archived_at = _now_utc()
    db.flush()

    write_audit_log(
        db,
        actor_id=actor_id,
        action="product.delete",
        entity_type="product",
        entity_id=canonical_id,
        before=before,
        after=product,
    )
    log.info("Archived product %s", canonical_id)
    return {**result, "already_archived": False}

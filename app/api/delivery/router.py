#  app/api/delivery/router.py
# Lecturas públicas: documentos publicados + resolución de redirects
from __future__ import annotations

import json
from datetime import datetime, date, timezone
from typing import Optional, Dict, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response, Header
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.locales import supported_locales
from app.core.settings import settings
from app.db.session import get_db
from app.models.catalog import Product, ProductSlug
from app.schemas.catalog import RedirectResolveOut
from app.services.audit_service import snapshot
from app.services.content_service import get_published_doc
from app.services.product_service import get_product
from app.services.publish_service import compute_etag, apply_delivery_cache_headers
from app.services.slug_service import resolve_redirect

router = APIRouter(prefix=f"{settings.API_V1_STR}/public", tags=["Delivery"])


# --- Helper para serializar datetimes en JSON ---
def _json_default(o):
    """
    Serializa datetime/date a ISO-8601. Para datetime naive, asume UTC.
    """
    if isinstance(o, datetime):
        if o.tzinfo is None:
            o = o.replace(tzinfo=timezone.utc)
        return o.astimezone(timezone.utc).replace(microsecond=0).isoformat()
    if isinstance(o, date):
        return o.isoformat()
    raise TypeError(f"Type not serializable: {type(o)}")


def _to_utc_seconds(dt: datetime | None) -> datetime | None:
    if not dt:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0)


def _published_response(doc, extra: Dict[str, Any], if_none_match: Optional[str]) -> Response:
    """
    Cuerpo estable (para ETag) con el documento publicado; If-None-Match → 304.
    """
    if doc is None:
        raise HTTPException(status_code=404, detail="Not found or not published")

    published = snapshot(doc)
    body = {
        **extra,
        "locale": published["locale"],
        "revision": published["revision"],
        "published_at": published["published_at"],
        "content": published["content"],
    }
    etag = compute_etag(body)
    last_modified = _to_utc_seconds(doc.published_at)

    if if_none_match and if_none_match == etag:
        resp = Response(status_code=304)
        apply_delivery_cache_headers(resp, etag=etag, last_modified=last_modified)
        return resp

    body_bytes = json.dumps(body, separators=(",", ":"), ensure_ascii=False, default=_json_default).encode("utf-8")
    resp = Response(content=body_bytes, media_type="application/json")
    apply_delivery_cache_headers(resp, etag=etag, last_modified=last_modified)
    return resp


def _active_product_or_404(product: Optional[Product]) -> Product:
    if product is None or product.status != "active":
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/site/config")
def site_config():
    return {
        "locales": supported_locales(),
        "default_locale": settings.DEFAULT_LOCALE,
    }


@router.get("/redirects/resolve", response_model=RedirectResolveOut)
def resolve_redirect_endpoint(
    path: str = Query(..., min_length=1),
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return resolve_redirect(db, path=path, locale=locale)


@router.get("/products/slug/{slug}")
def get_product_by_slug(
    slug: str,
    locale: str = Query(...),
    db: Session = Depends(get_db),
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
):
    product = db.scalar(
        select(Product)
        .join(ProductSlug, ProductSlug.product_id == Product.id)
        .where(ProductSlug.locale == locale, ProductSlug.slug == slug)
    )
    product = _active_product_or_404(product)
    doc = get_published_doc(db, doc_kind="productDoc", key=product.canonical_id, locale=locale)
    return _published_response(
        doc,
        {"canonical_id": product.canonical_id, "slug_by_locale": dict(product.slug_by_locale or {})},
        if_none_match,
    )


@router.get("/products/{canonical_id}/{locale}")
def get_product_published(
    canonical_id: str,
    locale: str,
    db: Session = Depends(get_db),
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
):
    product = _active_product_or_404(get_product(db, canonical_id=canonical_id))
    doc = get_published_doc(db, doc_kind="productDoc", key=canonical_id, locale=locale)
    return _published_response(
        doc,
        {"canonical_id": product.canonical_id, "slug_by_locale": dict(product.slug_by_locale or {})},
        if_none_match,
    )


@router.get("/homepage/{locale}")
def get_homepage_published(
    locale: str,
    db: Session = Depends(get_db),
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
):
    doc = get_published_doc(db, doc_kind="homepage", key=locale, locale=locale)
    return _published_response(doc, {}, if_none_match)


@router.get("/leaderboards/{board_id}/{locale}")
def get_leaderboard_published(
    board_id: str,
    locale: str,
    db: Session = Depends(get_db),
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
):
    doc = get_published_doc(db, doc_kind="leaderboard", key=board_id, locale=locale)
    extra = {"board_id": board_id, "mode": doc.mode} if doc else {}
    return _published_response(doc, extra, if_none_match)


@router.get("/collections/{collection_id}/{locale}")
def get_collection_published(
    collection_id: str,
    locale: str,
    db: Session = Depends(get_db),
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
):
    doc = get_published_doc(db, doc_kind="collection", key=collection_id, locale=locale)
    extra = {"collection_id": collection_id, "slug_by_locale": dict(doc.slug_by_locale or {})} if doc else {}
    return _published_response(doc, extra, if_none_match)

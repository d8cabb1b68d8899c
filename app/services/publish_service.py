# app/services/publish_service.py
# ⟶ Promoción draft → published + ETag y Cache-Control para lecturas públicas
from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Optional, Any

from email.utils import format_datetime
from fastapi import Response
from sqlalchemy.orm import Session

from app.core.locales import get_locale_value
from app.services.audit_service import snapshot, write_audit_log
from app.services.content_service import resolve_doc_key
from app.services.errors import DraftNotFoundError
from app.services.slug_service import upsert_redirect
from app.services.versioning_service import get_doc, get_doc_kind, upsert_doc
from app.utils.slug import collection_path

log = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------------
# Publicación
# -----------------------------
def _publish(db: Session, *, doc_kind: str, key: str, locale: str, actor_id: Optional[str]):
    """
    Copia content (+ columnas extra del tipo) del draft a la fila published.
    - revision publicada: previa + 1, o 1 si no existía.
    - El draft no se toca: draft y published coexisten.
    Devuelve (before_published_snapshot, published_row).
    """
    kind = get_doc_kind(doc_kind)
    row_key = resolve_doc_key(db, doc_kind, key)

    draft = get_doc(db, kind, row_key, locale, "draft")
    if draft is None:
        raise DraftNotFoundError(doc_kind, key, locale)

    before = snapshot(get_doc(db, kind, row_key, locale, "published"))
    extra = {col: getattr(draft, col) for col in kind.extra_columns}
    published, _ = upsert_doc(
        db,
        kind,
        row_key,
        locale,
        "published",
        content=dict(draft.content or {}),
        actor_id=actor_id,
        extra=extra,
        published_at=_now_utc(),
    )
    log.info("Published %s %s/%s at revision %d", doc_kind, key, locale, published.revision)
    return before, published


def _audit_publish(db: Session, *, doc_kind: str, key: str, locale: str, actor_id, before, after) -> None:
    write_audit_log(
        db,
        actor_id=actor_id,
        action=f"{doc_kind}.publish",
        entity_type=doc_kind,
        entity_id=key,
        locale=locale,
        before=before,
        after=after,
    )


def publish_product_draft(db: Session, *, canonical_id: str, locale: str, actor_id: Optional[str]):
    before, published = _publish(db, doc_kind="productDoc", key=canonical_id, locale=locale, actor_id=actor_id)
    _audit_publish(db, doc_kind="productDoc", key=canonical_id, locale=locale,
                   actor_id=actor_id, before=before, after=published)
    return published


def publish_homepage_draft(db: Session, *, locale: str, actor_id: Optional[str]):
    before, published = _publish(db, doc_kind="homepage", key=locale, locale=locale, actor_id=actor_id)
    _audit_publish(db, doc_kind="homepage", key=locale, locale=locale,
                   actor_id=actor_id, before=before, after=published)
    return published


def publish_leaderboard_draft(db: Session, *, board_id: str, locale: str, actor_id: Optional[str]):
    before, published = _publish(db, doc_kind="leaderboard", key=board_id, locale=locale, actor_id=actor_id)
    _audit_publish(db, doc_kind="leaderboard", key=board_id, locale=locale,
                   actor_id=actor_id, before=before, after=published)
    return published


def publish_collection_draft(db: Session, *, collection_id: str, locale: str, actor_id: Optional[str]):
    """
    Además de publicar, si el slug publicado del locale cambió se registra
    el redirect de la ruta vieja a la nueva.
    """
    before, published = _publish(db, doc_kind="collection", key=collection_id, locale=locale, actor_id=actor_id)

    old_slug = get_locale_value(before.get("slug_by_locale"), locale) if before else ""
    new_slug = get_locale_value(published.slug_by_locale, locale)
    if old_slug and new_slug and old_slug != new_slug:
        upsert_redirect(
            db,
            locale=locale,
            from_path=collection_path(locale, old_slug),
            to_path=collection_path(locale, new_slug),
        )

    _audit_publish(db, doc_kind="collection", key=collection_id, locale=locale,
                   actor_id=actor_id, before=before, after=published)
    return published


# -----------------------------
# ETags y Cache-Control básicos
# -----------------------------
def compute_etag(payload: Any) -> str:
    raw = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def _to_utc(dt: datetime) -> datetime:
    """
    Asegura que el datetime sea timezone-aware en UTC.
    - Si viene naive, se asume UTC (no desplaza).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def httpdate(dt: datetime) -> str:
    return format_datetime(_to_utc(dt), usegmt=True)


def apply_delivery_cache_headers(
    resp: Response,
    *,
    etag: str | None,
    last_modified: datetime | None,
) -> None:
    """
    Aplica ETag, Last-Modified y Cache-Control para documentos publicados.
    """
    if etag:
        resp.headers["ETag"] = etag
    if last_modified:
        resp.headers["Last-Modified"] = httpdate(last_modified)
    resp.headers["Cache-Control"] = "public, max-age=300, stale-while-revalidate=600"

# app/services/media_service.py
from __future__ import annotations

from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.catalog import MediaAsset
from app.schemas.catalog import MediaCreate, MediaUpdate
from app.services.audit_service import snapshot, write_audit_log
from app.services.errors import MediaNotFoundError


def get_media_or_404(db: Session, *, media_id: str) -> MediaAsset:
    media = db.get(MediaAsset, media_id)
    if media is None:
        raise MediaNotFoundError(media_id)
    return media


def list_media(
    db: Session,
    *,
    owner_type: Optional[str] = None,
    owner_id: Optional[str] = None,
    locale: Optional[str] = None,
) -> List[MediaAsset]:
    stmt = select(MediaAsset)
    if owner_type:
        stmt = stmt.where(MediaAsset.owner_type == owner_type)
    if owner_id:
        stmt = stmt.where(MediaAsset.owner_id == owner_id)
    if locale:
        # assets sin locale aplican a todos
        stmt = stmt.where((MediaAsset.locale == locale) | (MediaAsset.locale.is_(None)))
    return list(db.scalars(stmt.order_by(MediaAsset.created_at.asc())))


def upsert_media(db: Session, *, payload: MediaCreate, actor_id: Optional[str]) -> MediaAsset:
    media = MediaAsset(
        owner_type=payload.owner_type,
        owner_id=payload.owner_id,
        locale=payload.locale or None,
        type=payload.type,
        url=payload.url,
        meta=dict(payload.meta or {}),
    )
    db.add(media)
    db.flush()
    write_audit_log(
        db,
        actor_id=actor_id,
        action="media.create",
        entity_type="media",
        entity_id=media.id,
        locale=media.locale,
        before=None,
        after=media,
    )
    return media


def update_media(db: Session, *, media_id: str, patch: MediaUpdate, actor_id: Optional[str]) -> MediaAsset:
    """
    Patch parcial. `locale` enviado explícitamente como null lo limpia;
    el resto de campos solo se aplican si vienen con valor.
    """
    media = get_media_or_404(db, media_id=media_id)
    before = snapshot(media)

    data = patch.model_dump(exclude_unset=True)
    if "locale" in data:
        media.locale = data["locale"] or None
    if data.get("type"):
        media.type = data["type"]
    if data.get("url"):
        media.url = data["url"]
    if data.get("meta") is not None:
        media.meta = dict(data["meta"])
    db.flush()

    write_audit_log(
        db,
        actor_id=actor_id,
        action="media.update",
        entity_type="media",
        entity_id=media.id,
        locale=media.locale,
        before=before,
        after=media,
    )
    return media


def delete_media(db: Session, *, media_id: str, actor_id: Optional[str]) -> dict:
    media = get_media_or_404(db, media_id=media_id)
    before = snapshot(media)
    locale = media.locale
    db.delete(media)
    db.flush()

    write_audit_log(
        db,
        actor_id=actor_id,
        action="media.delete",
        entity_type="media",
        entity_id=media_id,
        locale=locale,
        before=before,
        after=None,
    )
    return {"id": media_id, "deleted": True}

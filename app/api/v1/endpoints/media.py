# app/api/v1/endpoints/media.py
from __future__ import annotations

from typing import Optional, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import CurrentActor, require_role
from app.schemas.catalog import MediaCreate, MediaUpdate, MediaOut
from app.services.errors import ContentError
from app.services.media_service import list_media, upsert_media, update_media, delete_media

router = APIRouter(prefix="/media", tags=["media"])


@router.get("", response_model=List[MediaOut])
def list_media_endpoint(
    owner_type: Optional[str] = Query(None, alias="ownerType"),
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("viewer")),
):
    return [MediaOut.model_validate(m) for m in list_media(db, owner_type=owner_type, owner_id=owner_id, locale=locale)]


@router.post("", response_model=MediaOut, status_code=201)
def create_media_endpoint(
    payload: MediaCreate,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    try:
        media = upsert_media(db, payload=payload, actor_id=actor.id)
        db.commit()
        db.refresh(media)
    except ContentError:
        db.rollback()
        raise
    return MediaOut.model_validate(media)


@router.patch("/{media_id}", response_model=MediaOut)
def update_media_endpoint(
    media_id: str,
    patch: MediaUpdate,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    try:
        media = update_media(db, media_id=media_id, patch=patch, actor_id=actor.id)
        db.commit()
        db.refresh(media)
    except ContentError:
        db.rollback()
        raise
    return MediaOut.model_validate(media)


@router.delete("/{media_id}")
def delete_media_endpoint(
    media_id: str,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    try:
        result = delete_media(db, media_id=media_id, actor_id=actor.id)
        db.commit()
    except ContentError:
        db.rollback()
        raise
    return result

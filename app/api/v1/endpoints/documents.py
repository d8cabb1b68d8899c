# =============================================================================
# Documentos localizados: product docs, homepage, leaderboards, collections
# app/api/v1/endpoints/documents.py
# =============================================================================
from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import CurrentActor, require_role
from app.schemas.documents import (
    DocDraftIn, LeaderboardDraftIn, CollectionDraftIn, DocPairOut,
    ProductDocOut, HomepageConfigOut, LeaderboardDocOut, CollectionDocOut,
)
from app.services.content_service import (
    get_doc_pair,
    upsert_product_draft,
    upsert_homepage_draft,
    upsert_leaderboard_draft,
    upsert_collection_draft,
)
from app.services.errors import ContentError
from app.services.publish_service import (
    publish_product_draft,
    publish_homepage_draft,
    publish_leaderboard_draft,
    publish_collection_draft,
)
from app.utils.idempotency import maybe_replay_idempotent, remember_idempotent_success

router = APIRouter(tags=["documents"])


def _write(db: Session, fn: Callable[[], object], out: type[BaseModel]):
    try:
        row = fn()
        db.commit()
        db.refresh(row)
    except ContentError:
        db.rollback()
        raise
    return out.model_validate(row)


def _publish(request: Request, db: Session, fn: Callable[[], object], out: type[BaseModel]):
    """
    Publicación con Idempotency-Key opcional (replay de la respuesta 200).
    """
    replay = maybe_replay_idempotent(request)
    if replay:
        return replay
    body = _write(db, fn, out)
    resp = JSONResponse(content=body.model_dump(mode="json"), status_code=200)
    remember_idempotent_success(request, resp)
    return resp


# ---------- Product docs ----------
@router.get("/products/{canonical_id}/docs/{locale}", response_model=DocPairOut)
def get_product_doc(
    canonical_id: str,
    locale: str,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("viewer")),
):
    return get_doc_pair(db, doc_kind="productDoc", key=canonical_id, locale=locale)


@router.put("/products/{canonical_id}/docs/{locale}/draft", response_model=ProductDocOut)
def put_product_draft(
    canonical_id: str,
    locale: str,
    payload: DocDraftIn,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    return _write(db, lambda: upsert_product_draft(
        db,
        canonical_id=canonical_id,
        locale=locale,
        content=payload.content,
        locked_fields=payload.locked_fields,
        role=actor.role,
        actor_id=actor.id,
        expected_revision=payload.expected_revision,
    ), ProductDocOut)


@router.post("/products/{canonical_id}/docs/{locale}/publish", response_model=ProductDocOut)
def post_product_publish(
    canonical_id: str,
    locale: str,
    request: Request,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    return _publish(request, db, lambda: publish_product_draft(
        db, canonical_id=canonical_id, locale=locale, actor_id=actor.id,
    ), ProductDocOut)


# ---------- Homepage ----------
@router.get("/homepage/{locale}", response_model=DocPairOut)
def get_homepage(
    locale: str,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("viewer")),
):
    return get_doc_pair(db, doc_kind="homepage", key=locale, locale=locale)


@router.put("/homepage/{locale}/draft", response_model=HomepageConfigOut)
def put_homepage_draft(
    locale: str,
    payload: DocDraftIn,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    return _write(db, lambda: upsert_homepage_draft(
        db,
        locale=locale,
        content=payload.content,
        actor_id=actor.id,
        expected_revision=payload.expected_revision,
    ), HomepageConfigOut)


@router.post("/homepage/{locale}/publish", response_model=HomepageConfigOut)
def post_homepage_publish(
    locale: str,
    request: Request,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    return _publish(request, db, lambda: publish_homepage_draft(
        db, locale=locale, actor_id=actor.id,
    ), HomepageConfigOut)


# ---------- Leaderboards ----------
@router.get("/leaderboards/{board_id}/{locale}", response_model=DocPairOut)
def get_leaderboard(
    board_id: str,
    locale: str,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("viewer")),
):
    return get_doc_pair(db, doc_kind="leaderboard", key=board_id, locale=locale)


@router.put("/leaderboards/{board_id}/{locale}/draft", response_model=LeaderboardDocOut)
def put_leaderboard_draft(
    board_id: str,
    locale: str,
    payload: LeaderboardDraftIn,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    return _write(db, lambda: upsert_leaderboard_draft(
        db,
        board_id=board_id,
        locale=locale,
        mode=payload.mode,
        content=payload.content,
        actor_id=actor.id,
        expected_revision=payload.expected_revision,
    ), LeaderboardDocOut)


@router.post("/leaderboards/{board_id}/{locale}/publish", response_model=LeaderboardDocOut)
def post_leaderboard_publish(
    board_id: str,
    locale: str,
    request: Request,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    return _publish(request, db, lambda: publish_leaderboard_draft(
        db, board_id=board_id, locale=locale, actor_id=actor.id,
    ), LeaderboardDocOut)


# ---------- Collections ----------
@router.get("/collections/{collection_id}/{locale}", response_model=DocPairOut)
def get_collection(
    collection_id: str,
    locale: str,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("viewer")),
):
    return get_doc_pair(db, doc_kind="collection", key=collection_id, locale=locale)


@router.put("/collections/{collection_id}/{locale}/draft", response_model=CollectionDocOut)
def put_collection_draft(
    collection_id: str,
    locale: str,
    payload: CollectionDraftIn,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    return _write(db, lambda: upsert_collection_draft(
        db,
        collection_id=collection_id,
        locale=locale,
        slug_by_locale=payload.slug_by_locale,
        content=payload.content,
        actor_id=actor.id,
        expected_revision=payload.expected_revision,
    ), CollectionDocOut)


@router.post("/collections/{collection_id}/{locale}/publish", response_model=CollectionDocOut)
def post_collection_publish(
    collection_id: str,
    locale: str,
    request: Request,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    return _publish(request, db, lambda: publish_collection_draft(
        db, collection_id=collection_id, locale=locale, actor_id=actor.id,
    ), CollectionDocOut)

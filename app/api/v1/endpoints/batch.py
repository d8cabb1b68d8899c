# app/api/v1/endpoints/batch.py
# Ingesta masiva: validate (dry-run) y apply (todo o nada)
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import CurrentActor, require_role
from app.schemas.admin import BatchRequest, BatchValidationOut, BatchUpsertOut
from app.services.batch_service import validate_batch_input, batch_upsert

router = APIRouter(prefix="/batch", tags=["batch"])


@router.post("/validate", response_model=BatchValidationOut)
def validate_batch_endpoint(
    payload: BatchRequest,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    return validate_batch_input(db, entity_type=payload.entity_type, items=payload.items, locale=payload.locale)


@router.post("/apply", response_model=BatchUpsertOut)
def apply_batch_endpoint(
    payload: BatchRequest,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    """
    Con filas inválidas devuelve 200 con valid=false y applied=0.
    Un fallo al aplicar revierte todo el lote (incluido el audit batch.upsert).
    """
    try:
        result = batch_upsert(
            db,
            entity_type=payload.entity_type,
            items=payload.items,
            locale=payload.locale,
            role=actor.role,
            actor_id=actor.id,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return result

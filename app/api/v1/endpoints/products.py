# =============================================================================
# Products (identidad canónica, slugs, soft delete)
# app/api/v1/endpoints/products.py
# =============================================================================
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import CurrentActor, require_role
from app.schemas.catalog import (
    ProductCreate, ProductPatch, ProductOut, ProductListOut, ProductDeleteOut,
)
from app.services.errors import ContentError
from app.services.product_service import (
    create_product, patch_product, delete_product, get_product_or_404, list_products,
)
from app.utils.idempotency import maybe_replay_idempotent, remember_idempotent_success

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListOut)
def list_products_endpoint(
    search: Optional[str] = Query(None),
    type_: Optional[str] = Query(None, alias="type"),
    status: Optional[str] = Query(None, pattern="^(active|archived)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("viewer")),
):
    items, total = list_products(db, search=search, type_=type_, status=status, page=page, page_size=page_size)
    return ProductListOut(
        total=total,
        page=page,
        page_size=page_size,
        items=[ProductOut.model_validate(p) for p in items],
    )


@router.get("/{canonical_id}", response_model=ProductOut)
def get_product_endpoint(
    canonical_id: str,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("viewer")),
):
    return ProductOut.model_validate(get_product_or_404(db, canonical_id=canonical_id))


@router.post("", response_model=ProductOut, status_code=201)
def create_product_endpoint(
    payload: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    """
    Alta de producto. Exige slug en todos los locales soportados.
    Idempotency-Key opcional (replay de la respuesta 201).
    """
    replay = maybe_replay_idempotent(request)
    if replay:
        return replay

    try:
        product = create_product(db, payload=payload, actor_id=actor.id)
        db.commit()
        db.refresh(product)
    except ContentError:
        db.rollback()
        raise

    resp = JSONResponse(
        content=ProductOut.model_validate(product).model_dump(mode="json"),
        status_code=201,
    )
    remember_idempotent_success(request, resp)
    return resp


@router.patch("/{canonical_id}", response_model=ProductOut)
def patch_product_endpoint(
    canonical_id: str,
    patch: ProductPatch,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    try:
        product = patch_product(db, canonical_id=canonical_id, patch=patch, actor_id=actor.id)
        db.commit()
        db.refresh(product)
    except ContentError:
        db.rollback()
        raise
    return ProductOut.model_validate(product)


@router.delete("/{canonical_id}", response_model=ProductDeleteOut)
def delete_product_endpoint(
    canonical_id: str,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    try:
        result = delete_product(db, canonical_id=canonical_id, actor_id=actor.id)
        db.commit()
    except ContentError:
        db.rollback()
        raise
    return ProductDeleteOut(**result)

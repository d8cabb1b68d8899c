# app/services/batch_service.py
# Ingesta batch en dos fases: validar (sin mutar) y aplicar (todo o nada)
from __future__ import annotations

import logging
from typing import Optional, Dict, Any, List, Callable, Set, Tuple

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from app.core.locales import supported_locales
from app.schemas.catalog import ProductCreate, ProductPatch, MediaCreate
from app.services.audit_service import write_audit_log
from app.services.content_service import (
    upsert_product_draft,
    upsert_homepage_draft,
    upsert_leaderboard_draft,
    upsert_collection_draft,
)
from app.services.media_service import upsert_media
from app.services.product_service import get_product, create_product, patch_product
from app.services.versioning_service import DOC_KINDS, get_doc

log = logging.getLogger(__name__)

BATCH_ENTITY_TYPES = ("product", "productDoc", "homepage", "leaderboard", "collection", "media")


class BatchItemInvalid(Exception):
    """Error de una fila concreta: se acumula, no aborta la clasificación."""


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _check_model(model: type[BaseModel], item: Dict[str, Any]) -> None:
    try:
        model.model_validate(item)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ())) or "$"
        raise BatchItemInvalid(f"invalid_payload:{loc}")


def _check_content(item: Dict[str, Any]) -> None:
    if "content" in item and not isinstance(item["content"], dict):
        raise BatchItemInvalid("invalid_payload:content")


def _draft_exists(db: Session, doc_kind: str, key: Any, locale: str) -> bool:
    return get_doc(db, DOC_KINDS[doc_kind], key, locale, "draft") is not None


# -------- Clasificación por tipo (create=False / update=True) --------
def _classify_product(db: Session, item: Dict[str, Any], locale: str) -> bool:
    canonical_id = _str(item.get("canonicalId"))
    if not canonical_id:
        raise BatchItemInvalid("canonicalId_required")
    exists = get_product(db, canonical_id=canonical_id) is not None
    _check_model(ProductPatch if exists else ProductCreate, item)
    return exists


def _classify_product_doc(db: Session, item: Dict[str, Any], locale: str) -> bool:
    canonical_id = _str(item.get("canonicalId"))
    if not canonical_id or not locale:
        raise BatchItemInvalid("canonicalId_and_locale_required")
    product = get_product(db, canonical_id=canonical_id)
    if product is None:
        raise BatchItemInvalid("product_not_found")
    _check_content(item)
    return _draft_exists(db, "productDoc", product.id, locale)


def _classify_homepage(db: Session, item: Dict[str, Any], locale: str) -> bool:
    if not locale:
        raise BatchItemInvalid("locale_required")
    _check_content(item)
    return _draft_exists(db, "homepage", locale, locale)


def _classify_leaderboard(db: Session, item: Dict[str, Any], locale: str) -> bool:
    board_id = _str(item.get("boardId"))
    if not board_id or not locale:
        raise BatchItemInvalid("boardId_and_locale_required")
    _check_content(item)
    return _draft_exists(db, "leaderboard", board_id, locale)


def _classify_collection(db: Session, item: Dict[str, Any], locale: str) -> bool:
    collection_id = _str(item.get("collectionId"))
    if not collection_id or not locale:
        raise BatchItemInvalid("collectionId_and_locale_required")
    _check_content(item)
    return _draft_exists(db, "collection", collection_id, locale)


def _classify_media(db: Session, item: Dict[str, Any], locale: str) -> bool:
    if not (item.get("ownerType") and item.get("ownerId") and item.get("type") and item.get("url")):
        raise BatchItemInvalid("ownerType_ownerId_type_url_required")
    _check_model(MediaCreate, item)
    # media siempre se crea
    return False


_CLASSIFIERS: Dict[str, Callable[[Session, Dict[str, Any], str], bool]] = {
    "product": _classify_product,
    "productDoc": _classify_product_doc,
    "homepage": _classify_homepage,
    "leaderboard": _classify_leaderboard,
    "collection": _classify_collection,
    "media": _classify_media,
}


# Identidad de la fila dentro del lote; dos filas con la misma clave => la segunda es update
_ROW_KEYS: Dict[str, Callable[[Dict[str, Any], str], Optional[Tuple[str, ...]]]] = {
    "product": lambda item, locale: (_str(item.get("canonicalId")),),
    "productDoc": lambda item, locale: (_str(item.get("canonicalId")), locale),
    "homepage": lambda item, locale: (locale,),
    "leaderboard": lambda item, locale: (_str(item.get("boardId")), locale),
    "collection": lambda item, locale: (_str(item.get("collectionId")), locale),
    "media": lambda item, locale: None,
}


def validate_batch_input(
    db: Session,
    *,
    entity_type: str,
    items: List[Dict[str, Any]],
    locale: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Clasifica cada fila como create/update/error SIN mutar nada.
    Devuelve {valid, errors[{index, message}], stats{total, create, update}}.
    """
    stats = {"total": len(items), "create": 0, "update": 0}
    classify = _CLASSIFIERS.get(entity_type)
    if classify is None:
        return {
            "valid": False,
            "errors": [{"index": -1, "message": "invalid_entity_type"}],
            "stats": stats,
        }

    errors: List[Dict[str, Any]] = []
    seen: Set[Tuple[str, ...]] = set()
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            errors.append({"index": index, "message": "item_must_be_object"})
            continue
        item_locale = _str(item.get("locale") or locale)
        try:
            exists = classify(db, item, item_locale)
        except BatchItemInvalid as e:
            errors.append({"index": index, "message": str(e)})
            continue
        row_key = _ROW_KEYS[entity_type](item, item_locale)
        if row_key is not None:
            exists = exists or row_key in seen
            seen.add(row_key)
        stats["update" if exists else "create"] += 1

    return {"valid": not errors, "errors": errors, "stats": stats}


# -------- Aplicación --------
def _apply_item(
    db: Session,
    *,
    entity_type: str,
    item: Dict[str, Any],
    locale: str,
    role: Optional[str],
    actor_id: Optional[str],
) -> None:
    content = item.get("content") or {}

    if entity_type == "product":
        canonical_id = _str(item["canonicalId"])
        if get_product(db, canonical_id=canonical_id) is not None:
            patch_product(db, canonical_id=canonical_id, patch=ProductPatch.model_validate(item), actor_id=actor_id)
        else:
            create_product(db, payload=ProductCreate.model_validate(item), actor_id=actor_id)
    elif entity_type == "productDoc":
        upsert_product_draft(
            db,
            canonical_id=_str(item["canonicalId"]),
            locale=locale,
            content=content,
            locked_fields=item.get("lockedFields"),
            role=role,
            actor_id=actor_id,
        )
    elif entity_type == "homepage":
        upsert_homepage_draft(db, locale=locale, content=content, actor_id=actor_id)
    elif entity_type == "leaderboard":
        upsert_leaderboard_draft(
            db,
            board_id=_str(item["boardId"]),
            locale=locale,
            mode=_str(item.get("mode") or "manual"),
            content=content,
            actor_id=actor_id,
        )
    elif entity_type == "collection":
        slug_by_locale = item.get("slugByLocale") or {
            loc: _str(item.get("slug")) for loc in supported_locales()
        }
        upsert_collection_draft(
            db,
            collection_id=_str(item["collectionId"]),
            locale=locale,
            slug_by_locale=slug_by_locale,
            content=content,
            actor_id=actor_id,
        )
    elif entity_type == "media":
        upsert_media(db, payload=MediaCreate.model_validate(item), actor_id=actor_id)


def batch_upsert(
    db: Session,
    *,
    entity_type: str,
    items: List[Dict[str, Any]],
    role: Optional[str],
    actor_id: Optional[str],
    locale: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Valida primero; con cualquier fila inválida no aplica nada (applied=0).
    Si valida, aplica fila por fila delegando en las operaciones unitarias
    (cada una con su propia auditoría) y cierra con un audit `batch.upsert`.
    Todo corre en la transacción del caller: un fallo al aplicar se propaga
    y el caller hace rollback de lo aplicado.
    """
    validation = validate_batch_input(db, entity_type=entity_type, items=items, locale=locale)
    if not validation["valid"]:
        log.warning("Batch %s rejected: %d invalid item(s)", entity_type, len(validation["errors"]))
        return {**validation, "applied": 0}

    applied = 0
    for item in items:
        _apply_item(
            db,
            entity_type=entity_type,
            item=item,
            locale=_str(item.get("locale") or locale),
            role=role,
            actor_id=actor_id,
        )
        applied += 1

    stats = validation["stats"]
    write_audit_log(
        db,
        actor_id=actor_id,
        action="batch.upsert",
        entity_type="batch",
        entity_id=entity_type,
        locale=locale,
        before=dict(stats),
        after={**stats, "applied": applied},
    )
    log.info("Batch %s applied %d/%d item(s)", entity_type, applied, stats["total"])
    return {**validation, "applied": applied}

# app/services/content_service.py
# Drafts de documentos localizados + validación JSON Schema por sub-ruta
from __future__ import annotations

import logging
from typing import Optional, Dict, Any

from jsonschema import Draft202012Validator
from sqlalchemy.orm import Session

from app.content_registry import get_enforced_schemas
from app.services.audit_service import snapshot, write_audit_log
from app.services.authz import is_admin
from app.services.errors import InvalidContentError, LockedFieldsAdminOnlyError
from app.services.product_service import get_product_or_404
from app.services.versioning_service import DOC_KINDS, get_doc, get_doc_kind, upsert_doc
from app.utils.locked_fields import assert_locked_fields_unchanged
from app.utils.payload_guard import enforce_doc_content_size

log = logging.getLogger(__name__)


# -------- Validación --------
def validate_doc_content(doc_kind: str, content: Dict[str, Any]) -> None:
    """
    El contenido es libre salvo en las sub-rutas registradas, y solo si están presentes.
    """
    if not isinstance(content, dict):
        raise InvalidContentError("$", "content must be an object")
    enforce_doc_content_size(content)

    for key, schema in get_enforced_schemas(doc_kind).items():
        if key not in content:
            continue
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(content[key]), key=lambda e: list(e.path))
        if errors:
            e = errors[0]
            path = ".".join([key] + [str(p) for p in e.path])
            raise InvalidContentError(path, e.message)


def _write_draft(
    db: Session,
    *,
    doc_kind: str,
    key: Any,
    entity_id: str,
    locale: str,
    content: Dict[str, Any],
    actor_id: Optional[str],
    extra: Optional[Dict[str, Any]] = None,
    expected_revision: Optional[int] = None,
):
    kind = get_doc_kind(doc_kind)
    before = snapshot(get_doc(db, kind, key, locale, "draft"))
    row, _ = upsert_doc(
        db,
        kind,
        key,
        locale,
        "draft",
        content=content,
        actor_id=actor_id,
        extra=extra,
        expected_revision=expected_revision,
    )
    write_audit_log(
        db,
        actor_id=actor_id,
        action=f"{doc_kind}.draft.upsert",
        entity_type=doc_kind,
        entity_id=entity_id,
        locale=locale,
        before=before,
        after=row,
    )
    return row


# -------- Product docs --------
def upsert_product_draft(
    db: Session,
    *,
    canonical_id: str,
    locale: str,
    content: Dict[str, Any],
    role: Optional[str],
    actor_id: Optional[str],
    locked_fields: Optional[Dict[str, Any]] = None,
    expected_revision: Optional[int] = None,
):
    """
    Guarda el draft de un producto en un locale.
    - Base de comparación: draft actual, si no el publicado.
    - lockedFields: solo admin puede enviarlos; un no-admin no puede alterar
      el valor de ninguna ruta bloqueada.
    - Al crear el draft se heredan los lockedFields vigentes.
    """
    product = get_product_or_404(db, canonical_id=canonical_id)
    kind = DOC_KINDS["productDoc"]
    draft = get_doc(db, kind, product.id, locale, "draft")
    published = get_doc(db, kind, product.id, locale, "published")

    current = draft or published
    base = dict(current.content or {}) if current else {}
    current_locks = dict(current.locked_fields or {}) if current else {}

    assert_locked_fields_unchanged(
        role=role,
        locked_fields=current_locks,
        previous_content=base,
        next_content=content,
    )
    if locked_fields is not None and not is_admin(role):
        log.warning("Non-admin %s tried to set lockedFields on %s/%s", actor_id, canonical_id, locale)
        raise LockedFieldsAdminOnlyError()
    validate_doc_content("productDoc", content)

    extra: Dict[str, Any] = {}
    if locked_fields is not None:
        extra["locked_fields"] = locked_fields
    elif draft is None:
        extra["locked_fields"] = current_locks

    return _write_draft(
        db,
        doc_kind="productDoc",
        key=product.id,
        entity_id=canonical_id,
        locale=locale,
        content=content,
        actor_id=actor_id,
        extra=extra,
        expected_revision=expected_revision,
    )


# -------- Homepage --------
def upsert_homepage_draft(
    db: Session,
    *,
    locale: str,
    content: Dict[str, Any],
    actor_id: Optional[str],
    expected_revision: Optional[int] = None,
):
    validate_doc_content("homepage", content)
    return _write_draft(
        db,
        doc_kind="homepage",
        key=locale,
        entity_id=locale,
        locale=locale,
        content=content,
        actor_id=actor_id,
        expected_revision=expected_revision,
    )


# -------- Leaderboards --------
def upsert_leaderboard_draft(
    db: Session,
    *,
    board_id: str,
    locale: str,
    content: Dict[str, Any],
    actor_id: Optional[str],
    mode: str = "manual",
    expected_revision: Optional[int] = None,
):
    validate_doc_content("leaderboard", content)
    return _write_draft(
        db,
        doc_kind="leaderboard",
        key=board_id,
        entity_id=board_id,
        locale=locale,
        content=content,
        actor_id=actor_id,
        extra={"mode": mode or "manual"},
        expected_revision=expected_revision,
    )


# -------- Collections --------
def upsert_collection_draft(
    db: Session,
    *,
    collection_id: str,
    locale: str,
    content: Dict[str, Any],
    slug_by_locale: Dict[str, str],
    actor_id: Optional[str],
    expected_revision: Optional[int] = None,
):
    validate_doc_content("collection", content)
    return _write_draft(
        db,
        doc_kind="collection",
        key=collection_id,
        entity_id=collection_id,
        locale=locale,
        content=content,
        actor_id=actor_id,
        extra={"slug_by_locale": {k: (v or "").strip() for k, v in (slug_by_locale or {}).items()}},
        expected_revision=expected_revision,
    )


# -------- Lecturas admin --------
def resolve_doc_key(db: Session, doc_kind: str, key: str) -> Any:
    # productDoc se direcciona por canonicalId, pero la fila guarda product.id
    if doc_kind == "productDoc":
        return get_product_or_404(db, canonical_id=key).id
    return key


def get_doc_pair(db: Session, *, doc_kind: str, key: str, locale: str) -> Dict[str, Any]:
    """
    {draft, published} de un documento, como snapshots JSON (o None).
    """
    kind = get_doc_kind(doc_kind)
    row_key = resolve_doc_key(db, doc_kind, key)
    return {
        "draft": snapshot(get_doc(db, kind, row_key, locale, "draft")),
        "published": snapshot(get_doc(db, kind, row_key, locale, "published")),
    }


def get_published_doc(db: Session, *, doc_kind: str, key: str, locale: str):
    kind = get_doc_kind(doc_kind)
    return get_doc(db, kind, resolve_doc_key(db, doc_kind, key), locale, "published")

# app/services/versioning_service.py
# Document store: filas (key, locale, state) con revisión monótona por fila
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.documents import ProductDoc, CollectionDoc, LeaderboardDoc, HomepageConfig
from app.services.errors import StaleWriteError


@dataclass(frozen=True)
class DocKind:
    name: str
    model: type
    key_column: str
    # columnas extra que viajan con el documento (y que publish copia)
    extra_columns: Tuple[str, ...] = field(default_factory=tuple)


DOC_KINDS: Dict[str, DocKind] = {
    "productDoc": DocKind("productDoc", ProductDoc, "product_id", ("locked_fields",)),
    "collection": DocKind("collection", CollectionDoc, "collection_id", ("slug_by_locale",)),
    "leaderboard": DocKind("leaderboard", LeaderboardDoc, "board_id", ("mode",)),
    # la clave del homepage es el propio locale
    "homepage": DocKind("homepage", HomepageConfig, "locale"),
}


def get_doc_kind(name: str) -> DocKind:
    kind = DOC_KINDS.get(name)
    if kind is None:
        raise ValueError(f"Unknown doc kind: {name}")
    return kind


def get_doc(db: Session, kind: DocKind, key: Any, locale: str, state: str):
    """
    Fila única (key, locale, state) o None.
    """
    model = kind.model
    stmt = select(model).where(
        getattr(model, kind.key_column) == key,
        model.locale == locale,
        model.state == state,
    )
    return db.scalar(stmt)


def next_revision(row) -> int:
    return 1 if row is None else int(row.revision or 0) + 1


def upsert_doc(
    db: Session,
    kind: DocKind,
    key: Any,
    locale: str,
    state: str,
    *,
    content: Dict[str, Any],
    actor_id: Optional[str],
    extra: Optional[Dict[str, Any]] = None,
    expected_revision: Optional[int] = None,
    published_at: Optional[datetime] = None,
):
    """
    Crea o reemplaza la fila (key, locale, state).
    - revision: 1 al crear; +1 en cada escritura posterior (nunca se reinicia).
    - expected_revision (opcional): compare-and-swap; 0 => la fila no debe existir.
    - No hace commit; el caller debe hacer db.commit().
    Devuelve (row, created).
    """
    row = get_doc(db, kind, key, locale, state)
    actual = 0 if row is None else int(row.revision or 0)
    if expected_revision is not None and expected_revision != actual:
        raise StaleWriteError(
            doc_kind=kind.name,
            key=str(key),
            locale=locale,
            expected=expected_revision,
            actual=actual,
        )

    extra = extra or {}
    created = row is None
    if created:
        row = kind.model(locale=locale, state=state, created_by=actor_id)
        if kind.key_column != "locale":
            setattr(row, kind.key_column, key)
        db.add(row)

    row.revision = next_revision(None if created else row)
    # siempre dicts nuevos: JSON no rastrea mutaciones in-place
    row.content = dict(content or {})
    row.updated_by = actor_id
    for col in kind.extra_columns:
        if col in extra:
            value = extra[col]
            setattr(row, col, dict(value) if isinstance(value, dict) else value)
    if published_at is not None:
        row.published_at = published_at

    db.flush()
    return row, created

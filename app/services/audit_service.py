# app/services/audit_service.py

from __future__ import annotations
from typing import Optional, Dict, Any, List

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.audit import AuditLog
from app.models.catalog import Product, MediaAsset
from app.models.documents import ProductDoc, CollectionDoc, LeaderboardDoc, HomepageConfig
from app.schemas.catalog import ProductOut, MediaOut
from app.schemas.documents import ProductDocOut, CollectionDocOut, LeaderboardDocOut, HomepageConfigOut
from app.utils.diff import build_diff

_SNAPSHOT_SCHEMAS: Dict[type, type[BaseModel]] = {
    Product: ProductOut,
    MediaAsset: MediaOut,
    ProductDoc: ProductDocOut,
    CollectionDoc: CollectionDocOut,
    LeaderboardDoc: LeaderboardDocOut,
    HomepageConfig: HomepageConfigOut,
}


def snapshot(row: Any) -> Optional[Dict[str, Any]]:
    """
    Foto JSON-serializable de una fila ORM (o dict ya serializado).
    Debe tomarse ANTES de mutar la fila: la sesión comparte la instancia.
    """
    if row is None:
        return None
    if isinstance(row, dict):
        return dict(row)
    schema = _SNAPSHOT_SCHEMAS.get(type(row))
    if schema is None:
        raise TypeError(f"No snapshot schema for {type(row).__name__}")
    return schema.model_validate(row).model_dump(mode="json")


def write_audit_log(
    db: Session,
    *,
    actor_id: Optional[str],
    action: str,
    entity_type: str,
    entity_id: str,
    locale: Optional[str] = None,
    before: Any = None,
    after: Any = None,
) -> AuditLog:
    """
    Append de una fila inmutable con el diff estructural before/after.
    No hace commit; el caller debe hacer db.commit().
    """
    log = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        locale=locale,
        diff=build_diff(snapshot(before), snapshot(after)),
    )
    db.add(log)
    db.flush()
    return log


def list_audit_logs(
    db: Session,
    *,
    limit: int = 50,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    action: Optional[str] = None,
) -> List[AuditLog]:
    stmt = select(AuditLog)
    if entity_type:
        stmt = stmt.where(AuditLog.entity_type == entity_type)
    if entity_id:
        stmt = stmt.where(AuditLog.entity_id == entity_id)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    # id desc como desempate: created_at tiene precisión de segundos en SQLite
    stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    return list(db.scalars(stmt))

# app/models/audit.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, Dict, Any

from sqlalchemy import BigInteger, Integer, String, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, JSONType


class AuditLog(Base):
    """
    Append-only: una fila por mutación lógica. Nunca se actualiza ni se borra.
    """
    __tablename__ = "audit_logs"

    # BigInteger en Postgres; INTEGER en SQLite para que autoincremente
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )

    # None para procesos del sistema
    actor_id: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    action: Mapped[str] = mapped_column(String(80))          # p.ej. "productDoc.publish"
    entity_type: Mapped[str] = mapped_column(String(40))
    entity_id: Mapped[str] = mapped_column(String(160))
    locale: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    # {"changed_keys": [...], "changes": {"a.b": {"before": .., "after": ..}}}
    diff: Mapped[Dict[str, Any]] = mapped_column(JSONType, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
        Index("ix_audit_logs_action", "action"),
    )

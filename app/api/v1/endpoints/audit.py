# app/api/v1/endpoints/audit.py
from __future__ import annotations

from typing import Optional, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import CurrentActor, require_role
from app.schemas.admin import AuditLogOut
from app.services.audit_service import list_audit_logs

router = APIRouter(prefix="/audit-logs", tags=["audit"])


@router.get("", response_model=List[AuditLogOut])
def list_audit_logs_endpoint(
    limit: int = Query(50, ge=1, le=500),
    entity_type: Optional[str] = Query(None, alias="entityType"),
    entity_id: Optional[str] = Query(None, alias="entityId"),
    action: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_role("editor")),
):
    logs = list_audit_logs(db, limit=limit, entity_type=entity_type, entity_id=entity_id, action=action)
    return [AuditLogOut.model_validate(x) for x in logs]

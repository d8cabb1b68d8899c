# app/schemas/admin.py
from __future__ import annotations
from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, ConfigDict

# ===== Batch =====
class BatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entity_type: str = Field(..., alias="entityType")
    locale: Optional[str] = None
    items: List[Dict[str, Any]] = Field(default_factory=list)

class BatchItemError(BaseModel):
    index: int
    message: str

class BatchStats(BaseModel):
    total: int
    create: int
    update: int

class BatchValidationOut(BaseModel):
    valid: bool
    errors: List[BatchItemError]
    stats: BatchStats

class BatchUpsertOut(BatchValidationOut):
    applied: int

# ===== Audit =====
class AuditLogOut(BaseModel):
    id: int
    actor_id: Optional[str] = None
    action: str
    entity_type: str
    entity_id: str
    locale: Optional[str] = None
    diff: Dict[str, Any]
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

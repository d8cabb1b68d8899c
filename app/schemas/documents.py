# app/schemas/documents.py
# Pydantic — drafts/publicados de documentos localizados
from __future__ import annotations
from datetime import datetime
from typing import Optional, Literal, Dict, Any

from pydantic import BaseModel, Field, ConfigDict

DocState = Literal["draft", "published"]


class DocDraftIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    content: Dict[str, Any]
    # Solo admin puede enviarlo (productDoc)
    locked_fields: Optional[Dict[str, Any]] = Field(None, alias="lockedFields")
    # Precondición opcional (compare-and-swap); None => last-write-wins
    expected_revision: Optional[int] = Field(None, alias="expectedRevision", ge=0)


class LeaderboardDraftIn(DocDraftIn):
    mode: str = Field("manual", max_length=32)


class CollectionDraftIn(DocDraftIn):
    slug_by_locale: Dict[str, str] = Field(default_factory=dict, alias="slugByLocale")


class DocBaseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    locale: str
    state: DocState
    revision: int
    content: Dict[str, Any]
    published_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductDocOut(DocBaseOut):
    product_id: int
    locked_fields: Dict[str, Any]


class CollectionDocOut(DocBaseOut):
    collection_id: str
    slug_by_locale: Dict[str, str]


class LeaderboardDocOut(DocBaseOut):
    board_id: str
    mode: str


class HomepageConfigOut(DocBaseOut):
    pass


class DocPairOut(BaseModel):
    draft: Optional[Dict[str, Any]] = None
    published: Optional[Dict[str, Any]] = None

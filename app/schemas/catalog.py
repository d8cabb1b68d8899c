# app/schemas/catalog.py
# Pydantic — requests/responses para Products, Media y Redirects
from __future__ import annotations
from datetime import datetime
from typing import Optional, Literal, Dict, Any, List

from pydantic import BaseModel, Field, ConfigDict

ProductStatus = Literal["active", "archived"]
Platform = Literal["ios", "android", "web", "pc", "mac"]
MediaType = Literal["image", "video", "presskit", "icon", "cover"]
MediaOwnerType = Literal["product", "collection", "leaderboard", "homepage"]


# ---------- Product ----------
class ProductCreate(BaseModel):
    # Acepta camelCase (UI / archivos batch) o snake_case
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    canonical_id: str = Field(..., alias="canonicalId", min_length=1, max_length=160)
    slug_by_locale: Dict[str, str] = Field(default_factory=dict, alias="slugByLocale")
    type_taxonomy: List[str] = Field(default_factory=list, alias="typeTaxonomy")
    platforms: List[Platform] = Field(default_factory=list)
    developer: Optional[str] = Field(None, max_length=160)
    publisher: Optional[str] = Field(None, max_length=160)
    brand: Optional[str] = Field(None, max_length=160)
    store_links: Dict[str, Any] = Field(default_factory=dict, alias="storeLinks")
    status: ProductStatus = "active"


class ProductPatch(BaseModel):
    # canonicalId nunca se parchea: se ignora si viene en el payload
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    slug_by_locale: Optional[Dict[str, str]] = Field(None, alias="slugByLocale")
    type_taxonomy: Optional[List[str]] = Field(None, alias="typeTaxonomy")
    platforms: Optional[List[Platform]] = None
    developer: Optional[str] = Field(None, max_length=160)
    publisher: Optional[str] = Field(None, max_length=160)
    brand: Optional[str] = Field(None, max_length=160)
    store_links: Optional[Dict[str, Any]] = Field(None, alias="storeLinks")
    status: Optional[ProductStatus] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    canonical_id: str
    slug_by_locale: Dict[str, str]
    type_taxonomy: List[str]
    platforms: List[str]
    developer: Optional[str] = None
    publisher: Optional[str] = None
    brand: Optional[str] = None
    store_links: Dict[str, Any]
    status: ProductStatus
    archived_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductListOut(BaseModel):
    total: int
    page: int
    page_size: int
    items: List[ProductOut]


class ProductDeleteOut(BaseModel):
    deleted: bool = True
    mode: Literal["soft"] = "soft"
    status: ProductStatus = "archived"
    already_archived: bool


# ---------- Media ----------
class MediaCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    owner_type: MediaOwnerType = Field(..., alias="ownerType")
    owner_id: str = Field(..., alias="ownerId", min_length=1)
    locale: Optional[str] = None
    type: MediaType
    url: str = Field(..., min_length=1, max_length=1024)
    meta: Dict[str, Any] = Field(default_factory=dict)


class MediaUpdate(BaseModel):
    # locale=None explícito => el asset pasa a aplicar a todos los locales
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    locale: Optional[str] = None
    type: Optional[MediaType] = None
    url: Optional[str] = Field(None, min_length=1, max_length=1024)
    meta: Optional[Dict[str, Any]] = None


class MediaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_type: MediaOwnerType
    owner_id: str
    locale: Optional[str] = None
    type: MediaType
    url: str
    meta: Dict[str, Any]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------- Redirects ----------
class RedirectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    locale: str
    from_path: str
    to_path: str


class RedirectResolveOut(BaseModel):
    found: bool
    status_code: Optional[int] = None
    to_path: Optional[str] = None

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Any

# El contenido de los documentos es JSON libre: el schema es orientativo y solo
# se exige en sub-rutas concretas, y únicamente cuando la clave está presente.

_LEADERBOARD_ITEM = {
    "type": "object",
    "properties": {
        "canonicalId": {"type": "string", "minLength": 1},
        "rank": {"type": "number"},
        "score": {"type": "number"},
        "badges": {"type": "array", "items": {"type": "string"}},
        "reason": {"type": "string"},
    },
    "required": ["canonicalId", "rank"],
}

_FEATURED_ITEM = {
    "type": "object",
    "properties": {
        "canonicalId": {"type": "string", "minLength": 1},
        "badge": {"type": "string"},
        "reason": {"type": "string"},
        "priority": {"type": "number"},
        "startAt": {"type": "string"},
        "endAt": {"type": "string"},
    },
    "required": ["canonicalId"],
}


def _ref_item(id_key: str) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            id_key: {"type": "string", "minLength": 1},
            "placement": {"type": "string"},
            "maxItems": {"type": "number"},
        },
        "required": [id_key],
    }


@dataclass
class DocKindMeta:
    key: str
    label: str
    # sub-ruta top-level -> JSON Schema (Draft 2020-12)
    enforced: Dict[str, Dict[str, Any]] = field(default_factory=dict)


CONTENT_REGISTRY: Dict[str, DocKindMeta] = {
    "productDoc": DocKindMeta(key="productDoc", label="Product document"),
    "collection": DocKindMeta(
        key="collection",
        label="Collection document",
        enforced={
            "includedProducts": {"type": "array", "items": {"type": "string"}},
        },
    ),
    "leaderboard": DocKindMeta(
        key="leaderboard",
        label="Leaderboard document",
        enforced={
            "items": {"type": "array", "items": _LEADERBOARD_ITEM},
        },
    ),
    "homepage": DocKindMeta(
        key="homepage",
        label="Homepage configuration",
        enforced={
            "featured": {"type": "array", "items": _FEATURED_ITEM},
            "leaderboardRefs": {"type": "array", "items": _ref_item("boardId")},
            "collectionRefs": {"type": "array", "items": _ref_item("collectionId")},
        },
    ),
}


def get_enforced_schemas(doc_kind: str) -> Dict[str, Dict[str, Any]]:
    meta = CONTENT_REGISTRY.get(doc_kind)
    return dict(meta.enforced) if meta else {}

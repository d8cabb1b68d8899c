# Constructores de rutas públicas (base de los redirects)
from __future__ import annotations

from app.core.locales import locale_to_path


def product_path(locale: str, slug: str) -> str:
    return f"/{locale_to_path(locale)}/products/{slug}"


def collection_path(locale: str, slug: str) -> str:
    return f"/{locale_to_path(locale)}/collections/{slug}"

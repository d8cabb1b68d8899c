# app/core/locales.py
# Locales soportados y su segmento en rutas públicas
from __future__ import annotations

from typing import Any, Mapping

from app.core.settings import settings


def supported_locales() -> list[str]:
    return list(settings.SUPPORTED_LOCALES)


def locale_to_path(locale: str) -> str:
    """Segmento público para un locale ('zh-CN' -> 'zh' si hay mapa; si no, el propio locale)."""
    return settings.LOCALE_PATH_MAP.get(locale, locale)


def path_to_locale(segment: str) -> str:
    for locale, seg in settings.LOCALE_PATH_MAP.items():
        if seg == segment:
            return locale
    if segment in settings.SUPPORTED_LOCALES:
        return segment
    return settings.DEFAULT_LOCALE


def locale_tag(locale: str) -> str:
    # 'zh-CN' -> 'zh' (usado en códigos de error slug_<tag>_conflict)
    return locale.split("-", 1)[0].lower()


def get_locale_value(value: Mapping[str, Any] | None, locale: str) -> str:
    """
    Valor del locale pedido; cae a 'en', luego al primer valor, luego "".
    """
    mapping = dict(value or {})
    if mapping.get(locale):
        return str(mapping[locale])
    if mapping.get("en"):
        return str(mapping["en"])
    for v in mapping.values():
        return str(v or "")
    return ""

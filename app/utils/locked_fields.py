from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

from app.services.authz import is_admin
from app.services.errors import LockedFieldModifiedError, UnsupportedLockPathError


class _Missing:
    """Marker for a dotted path that does not resolve (JS `undefined`)."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def _resolve(value: Any, path: str) -> Tuple[Any, Optional[str]]:
    """
    (valor, prefijo) donde prefijo es la ruta hasta la lista atravesada, o None.
    """
    current: Any = value
    parts = path.split(".")
    for i, part in enumerate(parts):
        if isinstance(current, list):
            return MISSING, ".".join(parts[:i])
        if not isinstance(current, Mapping) or part not in current:
            return MISSING, None
        current = current[part]
    return current, None


def get_value_by_path(value: Any, path: str) -> Any:
    """
    Resolves a dotted path over nested JSON objects.

    - Segments are always object keys ("2024" included).
    - Absent keys, non-object intermediates and traversal into a list resolve to MISSING.
    """
    return _resolve(value, path)[0]


def json_equal(a: Any, b: Any) -> bool:
    """Deep structural equality with JSON semantics (true != 1, key order ignored)."""
    if a is MISSING or b is MISSING:
        return a is b
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if set(a.keys()) != set(b.keys()):
            return False
        return all(json_equal(a[k], b[k]) for k in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(json_equal(x, y) for x, y in zip(a, b))
    return type(a) is type(b) and a == b


def assert_locked_fields_unchanged(
    *,
    role: Optional[str],
    locked_fields: Optional[Mapping[str, Any]],
    previous_content: Optional[Mapping[str, Any]],
    next_content: Mapping[str, Any],
) -> None:
    """
    Veto gate run before any write: a non-admin may not change the value
    at any path flagged true in `locked_fields`.

    A lock path that runs through a list can't be judged item by item: it
    passes while the list itself is unchanged, otherwise it is rejected
    with UnsupportedLockPathError.
    """
    if is_admin(role):
        return

    previous = previous_content or {}
    for path, is_locked in (locked_fields or {}).items():
        if not is_locked:
            continue
        before, before_list = _resolve(previous, path)
        after, after_list = _resolve(next_content, path)
        if before_list is not None or after_list is not None:
            prefixes = {p for p in (before_list, after_list) if p is not None}
            if all(json_equal(get_value_by_path(previous, p), get_value_by_path(next_content, p)) for p in prefixes):
                continue
            raise UnsupportedLockPathError(path)
        if not json_equal(before, after):
            raise LockedFieldModifiedError(path)

from __future__ import annotations

from typing import Any, Dict, List


def compute_changed_keys(before: Dict[str, Any] | None, after: Dict[str, Any] | None) -> List[str]:
    """
    Top-level keys whose value changed (shallow). None is treated as {}.
    """
    b = before or {}
    a = after or {}
    keys = set(b.keys()) | set(a.keys())
    changed = [k for k in keys if b.get(k) != a.get(k)]
    changed.sort()
    return changed


def _walk(before: Any, after: Any, prefix: str, out: Dict[str, Dict[str, Any]]) -> None:
    if isinstance(before, dict) and isinstance(after, dict):
        for key in sorted(set(before) | set(after)):
            path = f"{prefix}.{key}" if prefix else str(key)
            _walk(before.get(key), after.get(key), path, out)
        return
    if before != after:
        out[prefix or "$"] = {"before": before, "after": after}


def build_diff(before: Dict[str, Any] | None, after: Dict[str, Any] | None) -> Dict[str, Any]:
    """
    Structural diff of two JSON snapshots.
    Nested objects are recursed; lists and scalars are compared as a whole.
    """
    changes: Dict[str, Dict[str, Any]] = {}
    _walk(before or {}, after or {}, "", changes)
    return {
        "changed_keys": compute_changed_keys(before, after),
        "changes": changes,
    }

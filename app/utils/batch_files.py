# Carga de archivos para ingesta batch (JSON / YAML / CSV)
from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List

import yaml


def _maybe_json(value: Any) -> Any:
    """
    Celdas CSV con pinta de objeto/array JSON se decodifican; si fallan, quedan como texto.
    """
    if not isinstance(value, str):
        return value
    trimmed = value.strip()
    if (trimmed.startswith("{") and trimmed.endswith("}")) or (trimmed.startswith("[") and trimmed.endswith("]")):
        try:
            return json.loads(trimmed)
        except ValueError:
            return value
    return value


def _items_from(parsed: Any) -> List[Dict[str, Any]]:
    # lista de items o {"items": [...]}
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        return list(parsed.get("items") or [])
    return []


def load_batch_items(path: str | Path) -> List[Dict[str, Any]]:
    """
    - .json / .yaml / .yml: lista de items o {"items": [...]}
    - .csv: una fila por item, con encabezados
    """
    p = Path(path)
    ext = p.suffix.lower()

    if ext == ".json":
        with p.open("r", encoding="utf-8") as f:
            return _items_from(json.load(f))

    if ext in (".yaml", ".yml"):
        with p.open("r", encoding="utf-8") as f:
            return _items_from(yaml.safe_load(f))

    if ext == ".csv":
        with p.open("r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            return [
                {k: _maybe_json(v) for k, v in row.items() if k}
                for row in reader
                if any((v or "").strip() for v in row.values() if isinstance(v, str))
            ]

    raise ValueError(f"unsupported_file_type:{ext}")

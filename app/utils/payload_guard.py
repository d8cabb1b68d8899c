from __future__ import annotations

import json

from app.core.settings import settings
from app.services.errors import ContentTooLargeError, InvalidContentError


def enforce_doc_content_size(content: dict) -> None:
    """
    Enforces a maximum serialized JSON size (in KB) for a document's content.
    Raises ContentTooLargeError on overflow, InvalidContentError if not serializable.
    """
    limit_kb = float(getattr(settings, "MAX_DOC_CONTENT_KB", 0) or 0)
    if limit_kb <= 0:
        return
    try:
        # compact JSON to measure true wire-size
        b = json.dumps(content, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidContentError("$", f"content is not JSON serializable: {e}")
    kb = len(b) / 1024.0
    if kb > limit_kb:
        raise ContentTooLargeError(kb, limit_kb)

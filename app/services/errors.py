# app/services/errors.py
# Errores tipados del core. El código string (p.ej. "slug_zh_conflict:<slug>:<owner>:<status>")
# es solo presentación: los campos estructurados viajan en el error.
from __future__ import annotations

from typing import Any, Dict, Iterable, Literal

from app.core.locales import locale_tag

ErrorKind = Literal["not_found", "conflict", "authorization", "validation", "invariant", "stale_write"]


class ContentError(ValueError):
    """
    Base de todos los errores del core. Hereda de ValueError para que los
    callers que ya hacen `except ValueError` sigan funcionando.
    """
    kind: ErrorKind = "validation"

    def __init__(self, code: str, **fields: Any) -> None:
        super().__init__(code)
        self.code = code
        self.fields = fields

    def __str__(self) -> str:
        return self.code

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "kind": self.kind, **self.fields}


# -------- NotFound --------
class NotFoundError(ContentError):
    kind = "not_found"


class ProductNotFoundError(NotFoundError):
    def __init__(self, canonical_id: str) -> None:
        super().__init__("product_not_found", canonical_id=canonical_id)


class DraftNotFoundError(NotFoundError):
    def __init__(self, doc_kind: str, key: str, locale: str) -> None:
        super().__init__("draft_not_found", doc_kind=doc_kind, key=key, locale=locale)


class MediaNotFoundError(NotFoundError):
    def __init__(self, media_id: str) -> None:
        super().__init__("media_not_found", media_id=media_id)


# -------- Conflict --------
class ConflictError(ContentError):
    kind = "conflict"


class CanonicalIdConflictError(ConflictError):
    def __init__(self, canonical_id: str) -> None:
        super().__init__(f"canonical_id_conflict:{canonical_id}", canonical_id=canonical_id)


class SlugConflictError(ConflictError):
    def __init__(self, *, locale: str, slug: str, owner_id: str, owner_status: str) -> None:
        super().__init__(
            f"slug_{locale_tag(locale)}_conflict:{slug}:{owner_id}:{owner_status}",
            locale=locale,
            slug=slug,
            owner_id=owner_id,
            owner_status=owner_status,
        )


class StaleWriteError(ContentError):
    kind = "stale_write"

    def __init__(self, *, doc_kind: str, key: str, locale: str, expected: int, actual: int) -> None:
        super().__init__(
            f"stale_write:{doc_kind}:{key}:{locale}:{expected}:{actual}",
            doc_kind=doc_kind,
            key=key,
            locale=locale,
            expected_revision=expected,
            actual_revision=actual,
        )


# -------- Authorization --------
class AuthorizationError(ContentError):
    kind = "authorization"


class LockedFieldsAdminOnlyError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__("locked_fields_admin_only")


class LockedFieldModifiedError(AuthorizationError):
    def __init__(self, path: str) -> None:
        super().__init__(f"locked_field_modified:{path}", path=path)


# -------- Validation --------
class ContentValidationError(ContentError):
    kind = "validation"


class InvalidContentError(ContentValidationError):
    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"invalid_content:{path}", path=path, message=message)


class ContentTooLargeError(ContentValidationError):
    def __init__(self, size_kb: float, limit_kb: float) -> None:
        super().__init__("content_too_large", size_kb=round(size_kb, 1), limit_kb=limit_kb)


class UnsupportedLockPathError(ContentValidationError):
    def __init__(self, path: str) -> None:
        super().__init__(f"unsupported_lock_path:{path}", path=path)


# -------- Invariant --------
class InvariantError(ContentError):
    kind = "invariant"


class SlugRequiredError(InvariantError):
    def __init__(self, missing_locales: Iterable[str]) -> None:
        super().__init__("slug_required_both_locales", missing_locales=sorted(missing_locales))


class InvalidEntityTypeError(InvariantError):
    def __init__(self, entity_type: str) -> None:
        super().__init__("invalid_entity_type", entity_type=entity_type)

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.audit import AuditLog
from app.models.catalog import MediaAsset
from app.schemas.catalog import MediaCreate, MediaUpdate, ProductPatch
from app.services.audit_service import list_audit_logs
from app.services.errors import MediaNotFoundError
from app.services.media_service import delete_media, list_media, update_media, upsert_media
from app.services.product_service import patch_product
from app.utils.diff import build_diff


def _media(db: Session, **kw) -> MediaAsset:
    data = {"owner_type": "product", "owner_id": "g1", "type": "image", "url": "https://cdn/x.png", **kw}
    return upsert_media(db, payload=MediaCreate(**data), actor_id="u")


def test_media_lifecycle_is_audited(db: Session):
    media = _media(db, locale="en")
    assert len(media.id) == 36

    updated = update_media(db, media_id=media.id, patch=MediaUpdate(url="https://cdn/y.png"), actor_id="u")
    assert updated.url == "https://cdn/y.png"
    assert updated.locale == "en"

    cleared = update_media(db, media_id=media.id, patch=MediaUpdate(locale=None), actor_id="u")
    assert cleared.locale is None

    assert delete_media(db, media_id=media.id, actor_id="u") == {"id": media.id, "deleted": True}
    assert db.get(MediaAsset, media.id) is None

    actions = [a.action for a in db.scalars(select(AuditLog).order_by(AuditLog.id))]
    assert actions == ["media.create", "media.update", "media.update", "media.delete"]


def test_missing_media(db: Session):
    with pytest.raises(MediaNotFoundError):
        update_media(db, media_id="missing", patch=MediaUpdate(url="https://x"), actor_id="u")
    with pytest.raises(MediaNotFoundError):
        delete_media(db, media_id="missing", actor_id="u")


def test_list_media_includes_locale_agnostic_assets(db: Session):
    _media(db, locale="en")
    _media(db, locale="zh-CN")
    _media(db)
    assert len(list_media(db, owner_type="product", owner_id="g1", locale="en")) == 2


def test_build_diff_recurses_objects():
    diff = build_diff(
        {"a": 1, "seo": {"title": "x", "tags": [1]}},
        {"a": 1, "seo": {"title": "y", "tags": [1, 2]}, "b": True},
    )
    assert diff["changed_keys"] == ["b", "seo"]
    assert diff["changes"] == {
        "b": {"before": None, "after": True},
        "seo.tags": {"before": [1], "after": [1, 2]},
        "seo.title": {"before": "x", "after": "y"},
    }


def test_product_patch_audit_and_listing(db: Session, make_product):
    make_product("g1")
    patch_product(db, canonical_id="g1", patch=ProductPatch(developer="Studio"), actor_id="editor-7")

    logs = list_audit_logs(db, entity_type="product", entity_id="g1")
    assert [l.action for l in logs] == ["product.patch", "product.create"]
    patch_log = logs[0]
    assert patch_log.actor_id == "editor-7"
    assert patch_log.diff["changes"]["developer"] == {"before": None, "after": "Studio"}

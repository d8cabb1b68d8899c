import pytest
from sqlalchemy.orm import Session

from app.services.content_service import (
    upsert_homepage_draft,
    upsert_leaderboard_draft,
    upsert_product_draft,
    get_doc_pair,
)
from app.services.publish_service import publish_homepage_draft
from app.services.errors import (
    StaleWriteError,
    LockedFieldsAdminOnlyError,
    LockedFieldModifiedError,
    ProductNotFoundError,
    InvalidContentError,
)


def test_draft_revision_increments_per_write(db: Session):
    first = upsert_homepage_draft(db, locale="en", content={"hero": 1}, actor_id="u1")
    assert first.revision == 1
    second = upsert_homepage_draft(db, locale="en", content={"hero": 2}, actor_id="u2")
    assert second.id == first.id
    assert second.revision == 2
    assert second.created_by == "u1"
    assert second.updated_by == "u2"

    # otra clave (locale) tiene su propio contador
    other = upsert_homepage_draft(db, locale="zh-CN", content={}, actor_id="u1")
    assert other.revision == 1


def test_expected_revision_rejects_stale_write(db: Session):
    upsert_homepage_draft(db, locale="en", content={"v": 1}, actor_id="u1", expected_revision=0)
    with pytest.raises(StaleWriteError) as exc:
        upsert_homepage_draft(db, locale="en", content={"v": 2}, actor_id="u2", expected_revision=0)
    assert exc.value.kind == "stale_write"
    assert exc.value.fields["actual_revision"] == 1

    ok = upsert_homepage_draft(db, locale="en", content={"v": 2}, actor_id="u2", expected_revision=1)
    assert ok.revision == 2


def test_product_draft_requires_product(db: Session):
    with pytest.raises(ProductNotFoundError):
        upsert_product_draft(db, canonical_id="nope", locale="en", content={}, role="editor", actor_id="u")


def test_locked_fields_are_admin_only(db: Session, make_product):
    make_product("game-1")
    with pytest.raises(LockedFieldsAdminOnlyError):
        upsert_product_draft(
            db,
            canonical_id="game-1",
            locale="en",
            content={"title": "A"},
            locked_fields={"title": True},
            role="editor",
            actor_id="ed",
        )


def test_editor_blocked_by_admin_locks(db: Session, make_product):
    make_product("game-1")
    draft = upsert_product_draft(
        db,
        canonical_id="game-1",
        locale="en",
        content={"title": "A", "body": "x"},
        locked_fields={"title": True},
        role="admin",
        actor_id="root",
    )
    assert draft.locked_fields == {"title": True}

    with pytest.raises(LockedFieldModifiedError):
        upsert_product_draft(
            db, canonical_id="game-1", locale="en",
            content={"title": "B", "body": "x"}, role="editor", actor_id="ed",
        )

    updated = upsert_product_draft(
        db, canonical_id="game-1", locale="en",
        content={"title": "A", "body": "y"}, role="editor", actor_id="ed",
    )
    assert updated.revision == 2
    # los locks no cambian si el editor no los envía
    assert updated.locked_fields == {"title": True}


def test_leaderboard_items_schema_is_enforced_when_present(db: Session):
    with pytest.raises(InvalidContentError) as exc:
        upsert_leaderboard_draft(
            db, board_id="top", locale="en",
            content={"items": [{"canonicalId": "g1"}]}, actor_id="u",
        )
    assert exc.value.code.startswith("invalid_content:items")

    row = upsert_leaderboard_draft(db, board_id="top", locale="en", content={"intro": "free"}, actor_id="u")
    assert row.mode == "manual"


def test_get_doc_pair_returns_both_states(db: Session):
    upsert_homepage_draft(db, locale="en", content={"a": 1}, actor_id="u")
    pair = get_doc_pair(db, doc_kind="homepage", key="en", locale="en")
    assert pair["draft"]["content"] == {"a": 1}
    assert pair["published"] is None


def test_locked_change_reported_before_admin_only_locks(db: Session, make_product):
    make_product("game-1")
    upsert_product_draft(
        db, canonical_id="game-1", locale="en", content={"title": "A"},
        locked_fields={"title": True}, role="admin", actor_id="root",
    )
    with pytest.raises(LockedFieldModifiedError) as exc:
        upsert_product_draft(
            db, canonical_id="game-1", locale="en", content={"title": "B"},
            locked_fields={}, role="editor", actor_id="ed",
        )
    assert exc.value.code == "locked_field_modified:title"


def test_draft_writes_leave_published_row_alone(db: Session):
    upsert_homepage_draft(db, locale="en", content={"hero": "v1"}, actor_id="u")
    published = publish_homepage_draft(db, locale="en", actor_id="u")
    assert published.revision == 1

    for n in range(2, 5):
        draft = upsert_homepage_draft(db, locale="en", content={"hero": f"v{n}"}, actor_id="u")
    assert draft.revision == 4

    db.refresh(published)
    assert published.revision == 1
    assert published.content == {"hero": "v1"}

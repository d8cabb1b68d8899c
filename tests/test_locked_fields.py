import pytest

from app.services.errors import LockedFieldModifiedError, UnsupportedLockPathError
from app.utils.locked_fields import (
    MISSING,
    assert_locked_fields_unchanged,
    get_value_by_path,
    json_equal,
)


def test_get_value_by_path_nested_and_missing():
    content = {"hero": {"title": "Hi", "meta": None}}
    assert get_value_by_path(content, "hero.title") == "Hi"
    assert get_value_by_path(content, "hero.meta") is None
    assert get_value_by_path(content, "hero.subtitle") is MISSING
    assert get_value_by_path(content, "hero.title.x") is MISSING


def test_digit_segments_are_object_keys_and_lists_resolve_missing():
    assert get_value_by_path({"scores": {"2024": 9}}, "scores.2024") == 9
    assert get_value_by_path({"items": [{"a": 1}]}, "items.a") is MISSING
    assert get_value_by_path({"items": [1, 2]}, "items.0") is MISSING


def test_numeric_key_lock_does_not_block_other_edits():
    assert_locked_fields_unchanged(
        role="editor",
        locked_fields={"scores.2024": True},
        previous_content={"scores": {"2024": 9}, "title": "a"},
        next_content={"scores": {"2024": 9}, "title": "b"},
    )
    with pytest.raises(LockedFieldModifiedError) as exc:
        assert_locked_fields_unchanged(
            role="editor",
            locked_fields={"scores.2024": True},
            previous_content={"scores": {"2024": 9}},
            next_content={"scores": {"2024": 10}},
        )
    assert exc.value.code == "locked_field_modified:scores.2024"


def test_lock_through_list_only_rejects_list_changes():
    media = [{"cover": "a.png"}, {"cover": "b.png"}]
    assert_locked_fields_unchanged(
        role="editor",
        locked_fields={"media.cover": True},
        previous_content={"media": media, "title": "a"},
        next_content={"media": [dict(m) for m in media], "title": "b"},
    )
    with pytest.raises(UnsupportedLockPathError) as exc:
        assert_locked_fields_unchanged(
            role="editor",
            locked_fields={"media.cover": True},
            previous_content={"media": media},
            next_content={"media": media[:1]},
        )
    assert exc.value.code == "unsupported_lock_path:media.cover"


def test_json_equal_is_strict_about_types():
    assert json_equal({"a": [1, {"b": 2}]}, {"a": [1, {"b": 2}]})
    assert json_equal(1, 1.0)
    assert not json_equal(True, 1)
    assert not json_equal(None, MISSING)
    assert json_equal(MISSING, MISSING)


def test_editor_cannot_change_locked_path():
    with pytest.raises(LockedFieldModifiedError) as exc:
        assert_locked_fields_unchanged(
            role="editor",
            locked_fields={"title": True},
            previous_content={"title": "A"},
            next_content={"title": "B"},
        )
    assert exc.value.code == "locked_field_modified:title"
    assert exc.value.fields["path"] == "title"


def test_editor_can_change_unlocked_paths():
    assert_locked_fields_unchanged(
        role="editor",
        locked_fields={"title": True, "body": False},
        previous_content={"title": "A", "body": "x"},
        next_content={"title": "A", "body": "y", "extra": 1},
    )


def test_removing_locked_key_counts_as_change():
    with pytest.raises(LockedFieldModifiedError):
        assert_locked_fields_unchanged(
            role="editor",
            locked_fields={"seo.title": True},
            previous_content={"seo": {"title": "T"}},
            next_content={"seo": {}},
        )


def test_admin_bypasses_guard():
    assert_locked_fields_unchanged(
        role="admin",
        locked_fields={"title": True},
        previous_content={"title": "A"},
        next_content={"title": "B"},
    )

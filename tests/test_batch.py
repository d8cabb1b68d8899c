import json

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.audit import AuditLog
from app.models.catalog import Product
from app.models.documents import LeaderboardDoc
from app.services.batch_service import batch_upsert, validate_batch_input
from app.services.errors import SlugConflictError
from app.utils.batch_files import load_batch_items


def test_invalid_row_blocks_whole_batch(db: Session):
    result = batch_upsert(
        db,
        entity_type="product",
        items=[{"canonicalId": "a"}, {}],
        role="editor",
        actor_id="cli",
    )
    assert result["valid"] is False
    assert result["errors"] == [{"index": 1, "message": "canonicalId_required"}]
    assert result["applied"] == 0
    assert db.scalars(select(Product)).all() == []


def test_unknown_entity_type(db: Session):
    result = validate_batch_input(db, entity_type="widgets", items=[{}, {}])
    assert result == {
        "valid": False,
        "errors": [{"index": -1, "message": "invalid_entity_type"}],
        "stats": {"total": 2, "create": 0, "update": 0},
    }


def test_validation_classifies_create_and_update(db: Session, make_product):
    make_product("existing")
    result = validate_batch_input(
        db,
        entity_type="product",
        items=[{"canonicalId": "existing"}, {"canonicalId": "new-one"}],
    )
    assert result["valid"] is True
    assert result["stats"] == {"total": 2, "create": 1, "update": 1}


def test_doc_rows_fall_back_to_batch_locale(db: Session):
    result = validate_batch_input(
        db,
        entity_type="leaderboard",
        items=[{"boardId": "top"}, {"boardId": "top", "locale": "en"}, {"locale": "en"}],
        locale="zh-CN",
    )
    assert result["stats"]["create"] == 2
    assert result["errors"] == [{"index": 2, "message": "boardId_and_locale_required"}]

    no_locale = validate_batch_input(db, entity_type="homepage", items=[{}])
    assert no_locale["errors"] == [{"index": 0, "message": "locale_required"}]


def test_media_rows_require_core_fields(db: Session):
    result = validate_batch_input(
        db,
        entity_type="media",
        items=[
            {"ownerType": "product", "ownerId": "g", "type": "image", "url": "https://x"},
            {"ownerType": "product", "ownerId": "g", "type": "gif", "url": "https://x"},
            {"ownerType": "product"},
        ],
    )
    assert [e["index"] for e in result["errors"]] == [1, 2]
    assert result["errors"][0]["message"] == "invalid_payload:type"
    assert result["errors"][1]["message"] == "ownerType_ownerId_type_url_required"


def test_apply_delegates_and_writes_summary_audit(db: Session):
    items = [
        {"boardId": "top", "content": {"intro": "a"}},
        {"boardId": "new", "mode": "auto"},
    ]
    result = batch_upsert(db, entity_type="leaderboard", items=items, locale="en", role="editor", actor_id="cli")
    assert result["applied"] == 2
    assert result["stats"] == {"total": 2, "create": 2, "update": 0}

    docs = db.scalars(select(LeaderboardDoc).order_by(LeaderboardDoc.board_id)).all()
    assert [(d.board_id, d.mode) for d in docs] == [("new", "auto"), ("top", "manual")]

    upserts = db.scalars(select(AuditLog).where(AuditLog.action == "leaderboard.draft.upsert")).all()
    assert len(upserts) == 2
    summary = db.scalar(select(AuditLog).where(AuditLog.action == "batch.upsert"))
    assert summary.entity_type == "batch"
    assert summary.entity_id == "leaderboard"
    assert summary.diff["changes"] == {"applied": {"before": None, "after": 2}}


def test_apply_failure_propagates_for_caller_rollback(db: Session, make_product):
    make_product("taken", zh="t-zh", en="t-en")
    items = [
        {"canonicalId": "ok", "slugByLocale": {"zh-CN": "ok-zh", "en": "ok-en"}},
        {"canonicalId": "clash", "slugByLocale": {"zh-CN": "t-zh", "en": "clash-en"}},
    ]
    with pytest.raises(SlugConflictError):
        batch_upsert(db, entity_type="product", items=items, role="editor", actor_id="cli")
    db.rollback()

    ids = {p.canonical_id for p in db.scalars(select(Product))}
    assert ids == {"taken"}
    assert db.scalar(select(AuditLog).where(AuditLog.action == "batch.upsert")) is None


def test_load_items_from_json_and_csv(tmp_path):
    as_json = tmp_path / "items.json"
    as_json.write_text(json.dumps({"items": [{"canonicalId": "a"}]}), encoding="utf-8")
    assert load_batch_items(as_json) == [{"canonicalId": "a"}]

    as_csv = tmp_path / "items.csv"
    as_csv.write_text(
        'boardId,locale,content\ntop,en,"{""intro"": ""hi""}"\n',
        encoding="utf-8",
    )
    assert load_batch_items(as_csv) == [{"boardId": "top", "locale": "en", "content": {"intro": "hi"}}]

    with pytest.raises(ValueError):
        load_batch_items(tmp_path / "items.txt")


def test_load_items_from_yaml(tmp_path):
    as_list = tmp_path / "items.yaml"
    as_list.write_text("- boardId: top\n  content:\n    intro: hi\n", encoding="utf-8")
    assert load_batch_items(as_list) == [{"boardId": "top", "content": {"intro": "hi"}}]

    wrapped = tmp_path / "items.yml"
    wrapped.write_text("items:\n  - canonicalId: a\n  - canonicalId: b\n", encoding="utf-8")
    assert load_batch_items(wrapped) == [{"canonicalId": "a"}, {"canonicalId": "b"}]


def test_repeated_key_in_batch_counts_as_update(db: Session):
    items = [
        {"canonicalId": "dup", "slugByLocale": {"zh-CN": "d-zh", "en": "d-en"}},
        {"canonicalId": "dup", "brand": "Acme"},
    ]
    assert validate_batch_input(db, entity_type="product", items=items)["stats"] == {
        "total": 2, "create": 1, "update": 1,
    }

    boards = validate_batch_input(
        db, entity_type="leaderboard", locale="en",
        items=[{"boardId": "top"}, {"boardId": "top"}, {"boardId": "top", "locale": "zh-CN"}],
    )
    assert boards["stats"] == {"total": 3, "create": 2, "update": 1}

    result = batch_upsert(db, entity_type="product", items=items, role="editor", actor_id="cli")
    assert result["applied"] == 2
    assert result["stats"]["update"] == 1
    assert db.scalar(select(Product).where(Product.canonical_id == "dup")).brand == "Acme"


def test_cli_dry_run_then_apply(tmp_path, db: Session, monkeypatch, capsys):
    from scripts import batch_upsert as cli

    monkeypatch.setattr(cli, "SessionLocal", lambda: db)
    data = tmp_path / "products.json"
    data.write_text(
        json.dumps([{"canonicalId": "cli-1", "slugByLocale": {"zh-CN": "c-zh", "en": "c-en"}}]),
        encoding="utf-8",
    )
    args = ["--file", str(data), "--entity-type", "product"]

    assert cli.main(args) == 0
    assert '"step": "validate"' in capsys.readouterr().out
    assert db.scalars(select(Product)).all() == []

    with pytest.raises(SystemExit):
        cli.main(args + ["--mode", "apply", "--role", "viewer"])

    assert cli.main(args + ["--mode", "apply"]) == 0
    out = capsys.readouterr().out
    assert '"step": "apply"' in out and '"step": "diff"' in out
    assert [p.canonical_id for p in db.scalars(select(Product))] == ["cli-1"]

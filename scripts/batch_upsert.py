# scripts/batch_upsert.py
# Uso: python -m scripts.batch_upsert --file ./data.json --entity-type productDoc --locale zh-CN --mode dry-run
from __future__ import annotations

import argparse
import json
import logging
import sys

from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.services.authz import can_edit
from app.services.batch_service import BATCH_ENTITY_TYPES, validate_batch_input, batch_upsert
from app.utils.batch_files import load_batch_items

log = logging.getLogger("scripts.batch_upsert")


def _print_step(step: str, payload: dict) -> None:
    print(json.dumps({"step": step, **payload}, indent=2, ensure_ascii=False))


def run(*, file: str, entity_type: str, locale: str | None, mode: str, role: str, actor: str) -> int:
    items = load_batch_items(file)
    db = SessionLocal()
    try:
        validation = validate_batch_input(db, entity_type=entity_type, items=items, locale=locale)
        _print_step("validate", validation)

        if mode == "dry-run":
            return 0
        if not validation["valid"]:
            print("validation failed; apply skipped", file=sys.stderr)
            return 1

        result = batch_upsert(db, entity_type=entity_type, items=items, locale=locale, role=role, actor_id=actor)
        db.commit()

        _print_step("apply", {"result": result})
        _print_step("diff", {
            "before": validation["stats"],
            "after": {**validation["stats"], "applied": result["applied"]},
        })
        return 0
    except Exception:
        db.rollback()
        log.exception("Batch %s failed; nothing was applied", entity_type)
        raise
    finally:
        db.close()


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Validate (dry-run) or apply a batch of content items")
    p.add_argument("--file", required=True, help="Path to .json, .yaml/.yml or .csv file")
    p.add_argument("--entity-type", required=True, choices=BATCH_ENTITY_TYPES)
    p.add_argument("--locale", default=None, help="Default locale for items without one")
    p.add_argument("--mode", choices=("dry-run", "apply"), default="dry-run")
    p.add_argument("--role", choices=("viewer", "editor", "admin"), default="editor")
    p.add_argument("--actor", default="cli-batch")
    args = p.parse_args(argv)
    if args.mode == "apply" and not can_edit(args.role):
        p.error(f"role {args.role!r} cannot apply batches")

    configure_logging()
    return run(
        file=args.file,
        entity_type=args.entity_type,
        locale=args.locale,
        mode=args.mode,
        role=args.role,
        actor=args.actor,
    )


if __name__ == "__main__":
    sys.exit(main())

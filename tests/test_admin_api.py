from fastapi.testclient import TestClient

from app.core.settings import settings

API = f"{settings.API_V1_STR}/admin"
PUBLIC = f"{settings.API_V1_STR}/public"


def _product_payload(cid: str, zh: str, en: str) -> dict:
    return {"canonicalId": cid, "slugByLocale": {"zh-CN": zh, "en": en}, "platforms": ["ios"]}


def test_ping(client: TestClient):
    r = client.get(f"{settings.API_V1_STR}/health/ping")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_requires_token_and_role(client: TestClient, auth_headers):
    assert client.get(f"{API}/products").status_code == 401
    assert client.get(f"{API}/products", headers={"Authorization": "Bearer nope"}).status_code == 401

    r = client.post(f"{API}/products", json=_product_payload("g1", "g1-zh", "g1-en"), headers=auth_headers("viewer"))
    assert r.status_code == 403

    assert client.get(f"{API}/products", headers=auth_headers("viewer")).status_code == 200


def test_create_and_conflict_mapping(client: TestClient, auth_headers):
    editor = auth_headers("editor")
    r = client.post(f"{API}/products", json=_product_payload("g1", "g1-zh", "g1-en"), headers=editor)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["canonical_id"] == "g1"
    assert body["status"] == "active"

    r = client.post(f"{API}/products", json=_product_payload("g2", "g1-zh", "g2-en"), headers=editor)
    assert r.status_code == 409
    detail = r.json()["detail"]
    assert detail["code"] == "slug_zh_conflict:g1-zh:g1:active"
    assert detail["kind"] == "conflict"
    assert detail["owner_id"] == "g1"

    r = client.post(f"{API}/products", json={"canonicalId": "g3", "slugByLocale": {"en": "x"}}, headers=editor)
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "slug_required_both_locales"

    r = client.get(f"{API}/products/unknown", headers=editor)
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "product_not_found"


def test_idempotent_create_replays(client: TestClient, auth_headers):
    headers = {**auth_headers("editor"), "Idempotency-Key": "k-1"}
    first = client.post(f"{API}/products", json=_product_payload("g1", "g1-zh", "g1-en"), headers=headers)
    second = client.post(f"{API}/products", json=_product_payload("g1", "g1-zh", "g1-en"), headers=headers)
    assert first.status_code == second.status_code == 201
    assert second.headers.get("Idempotent-Replay") == "true"
    assert second.json() == first.json()


def test_draft_publish_and_public_read(client: TestClient, auth_headers):
    editor = auth_headers("editor")
    client.post(f"{API}/products", json=_product_payload("g1", "g1-zh", "g1-en"), headers=editor)

    r = client.put(f"{API}/products/g1/docs/en/draft", json={"content": {"title": "Hello"}}, headers=editor)
    assert r.status_code == 200, r.text
    assert r.json()["revision"] == 1

    r = client.put(
        f"{API}/products/g1/docs/en/draft",
        json={"content": {"title": "Hello"}, "expectedRevision": 0},
        headers=editor,
    )
    assert r.status_code == 409
    assert r.json()["detail"]["kind"] == "stale_write"

    assert client.get(f"{PUBLIC}/products/g1/en").status_code == 404

    r = client.post(f"{API}/products/g1/docs/en/publish", headers=editor)
    assert r.status_code == 200
    assert r.json()["state"] == "published"

    r = client.get(f"{PUBLIC}/products/g1/en")
    assert r.status_code == 200
    assert r.json()["content"] == {"title": "Hello"}
    etag = r.headers["ETag"]
    assert client.get(f"{PUBLIC}/products/g1/en", headers={"If-None-Match": etag}).status_code == 304

    r = client.get(f"{PUBLIC}/products/slug/g1-en", params={"locale": "en"})
    assert r.status_code == 200
    assert r.json()["canonical_id"] == "g1"

    pair = client.get(f"{API}/products/g1/docs/en", headers=editor).json()
    assert pair["draft"]["revision"] == 1
    assert pair["published"]["revision"] == 1


def test_locked_field_violation_is_forbidden(client: TestClient, auth_headers):
    admin, editor = auth_headers("admin"), auth_headers("editor")
    client.post(f"{API}/products", json=_product_payload("g1", "g1-zh", "g1-en"), headers=admin)
    r = client.put(
        f"{API}/products/g1/docs/zh-CN/draft",
        json={"content": {"price": 10}, "lockedFields": {"price": True}},
        headers=admin,
    )
    assert r.status_code == 200
    assert r.json()["locked_fields"] == {"price": True}

    r = client.put(f"{API}/products/g1/docs/zh-CN/draft", json={"content": {"price": 0}}, headers=editor)
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "locked_field_modified:price"


def test_delete_patch_and_redirect_resolution(client: TestClient, auth_headers):
    editor = auth_headers("editor")
    client.post(f"{API}/products", json=_product_payload("g1", "old-zh", "g1-en"), headers=editor)

    r = client.patch(f"{API}/products/g1", json={"slugByLocale": {"zh-CN": "new-zh"}}, headers=editor)
    assert r.status_code == 200
    assert r.json()["slug_by_locale"]["zh-CN"] == "new-zh"

    r = client.get(f"{PUBLIC}/redirects/resolve", params={"path": "/zh-CN/products/old-zh"})
    assert r.json() == {"found": True, "status_code": 301, "to_path": "/zh-CN/products/new-zh"}
    r = client.get(f"{PUBLIC}/redirects/resolve", params={"path": "/en/products/g1-en"})
    assert r.json()["found"] is False

    first = client.delete(f"{API}/products/g1", headers=editor).json()
    second = client.delete(f"{API}/products/g1", headers=editor).json()
    assert first["already_archived"] is False
    assert second["already_archived"] is True


def test_batch_endpoints(client: TestClient, auth_headers):
    editor = auth_headers("editor")
    payload = {"entityType": "product", "items": [{"canonicalId": "a"}, {}]}

    r = client.post(f"{API}/batch/validate", json=payload, headers=editor)
    assert r.status_code == 200
    assert r.json()["valid"] is False

    r = client.post(f"{API}/batch/apply", json=payload, headers=editor)
    assert r.json()["applied"] == 0
    assert r.json()["errors"] == [{"index": 1, "message": "canonicalId_required"}]

    ok = {"entityType": "homepage", "locale": "en", "items": [{"content": {"featured": []}}]}
    r = client.post(f"{API}/batch/apply", json=ok, headers=editor)
    assert r.json()["applied"] == 1

    logs = client.get(f"{API}/audit-logs", params={"entityType": "batch"}, headers=editor).json()
    assert [l["action"] for l in logs] == ["batch.upsert"]

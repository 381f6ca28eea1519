"""HTTP routes — envelopes, status codes and error mapping."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from foodmap.api.deps import store_service, user_service
from foodmap.core.errors import (
    FieldViolation,
    NotFoundError,
    ShapeError,
    UnknownFieldsError,
    ValidationFailed,
)
from foodmap.core.privilege import resolve_privilege
from foodmap.db import mongo
from foodmap.domain.services.store_svc import StoreService
from foodmap.domain.services.user_svc import UserService
from foodmap.main import app

STORE_ID = "5f1d7f3e9b1e8a3c4d2b6a11"
COMMENT_ID = "5f1d7f3e9b1e8a3c4d2b6a12"


@pytest.fixture
def stores():
    return AsyncMock(spec=StoreService)


@pytest.fixture
def users():
    return AsyncMock(spec=UserService)


@pytest.fixture
def client(stores, users):
    # no context manager: the lifespan (Mongo, Redis) is not started
    app.dependency_overrides[store_service] = lambda: stores
    app.dependency_overrides[user_service] = lambda: users
    yield TestClient(app)
    app.dependency_overrides.clear()


# ─── stores ──────────────────────────────────────────────────────

def test_search_stores(client, stores):
    stores.find.return_value = [{"id": STORE_ID, "name": "Test Store"}]

    res = client.get("/api/stores", params={"query": "tea", "categories": "drink", "fields": "name"})

    assert res.status_code == 200
    assert res.json() == {"data": {"stores": [{"id": STORE_ID, "name": "Test Store"}]}}
    stores.find.assert_awaited_once_with("tea", "drink", "name", 0, 0)


def test_negative_paging_is_rejected(client, stores):
    res = client.get("/api/stores", params={"limit": -1})

    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "invalid request"
    assert body["errors"] == [{"field": "query.limit", "rule": "greater_than_equal"}]
    stores.find.assert_not_awaited()


def test_create_store(client, stores, store_doc):
    stores.create_one.return_value = STORE_ID

    res = client.post("/api/stores", json=store_doc)

    assert res.status_code == 200
    assert res.json() == {"id": STORE_ID}
    stores.create_one.assert_awaited_once_with(store_doc)


def test_create_store_body_must_be_an_object(client, stores):
    res = client.post("/api/stores", json=["not", "an", "object"])
    assert res.status_code == 400
    stores.create_one.assert_not_awaited()


def test_validation_failure_is_400(client, stores, store_doc):
    stores.create_one.side_effect = ValidationFailed([FieldViolation("name", "required")])

    res = client.post("/api/stores", json=store_doc)

    assert res.status_code == 400
    assert res.json() == {"code": "validation failed", "errors": [{"field": "name", "rule": "required"}]}


def test_shape_error_is_400(client, stores):
    stores.find_one_by_id.side_effect = ShapeError("id", "invalid")

    res = client.get("/api/stores/not-an-id")

    assert res.status_code == 400
    assert res.json() == {"code": "invalid query", "fields": "id", "type": "invalid"}


def test_unknown_fields_are_400(client, stores):
    stores.find_one_by_id.side_effect = UnknownFieldsError(["bogus"])

    res = client.get(f"/api/stores/{STORE_ID}", params={"fields": "name,bogus"})

    assert res.status_code == 400
    assert res.json()["code"] == "invalid fields"
    assert res.json()["fields"] == ["bogus"]
    stores.find_one_by_id.assert_awaited_once_with(STORE_ID, "name,bogus")


def test_get_store(client, stores):
    stores.find_one_by_id.return_value = {"id": STORE_ID, "name": "Test Store", "is_open": True}

    res = client.get(f"/api/stores/{STORE_ID}")

    assert res.status_code == 200
    assert res.json() == {"data": {"store": {"id": STORE_ID, "name": "Test Store", "is_open": True}}}


def test_missing_store_is_404(client, stores):
    stores.find_one_by_id.side_effect = NotFoundError("store", STORE_ID)

    res = client.get(f"/api/stores/{STORE_ID}")

    assert res.status_code == 404
    assert res.json()["code"] == "not found"


def test_update_store_takes_id_from_path(client, stores):
    res = client.put(f"/api/stores/{STORE_ID}", json={"id": "ignored", "description": "new"})

    assert res.status_code == 200
    assert res.json() == {"id": STORE_ID}
    stores.update_one.assert_awaited_once_with({"id": STORE_ID, "description": "new"})


def test_delete_store(client, stores):
    res = client.delete(f"/api/stores/{STORE_ID}")

    assert res.json() == {"deleted_id": STORE_ID}
    stores.delete_one.assert_awaited_once_with(STORE_ID)


def test_unexpected_error_is_500(stores, users):
    app.dependency_overrides[store_service] = lambda: stores
    stores.delete_one.side_effect = RuntimeError("boom")
    try:
        res = TestClient(app, raise_server_exceptions=False).delete(f"/api/stores/{STORE_ID}")
    finally:
        app.dependency_overrides.clear()

    assert res.status_code == 500
    assert res.json()["code"] == "internal"
    assert "boom" not in res.text


# ─── comments ────────────────────────────────────────────────────

def test_comment_defaults_to_callers_address_and_agent(client, stores):
    stores.create_comment.return_value = COMMENT_ID

    res = client.post(
        f"/api/stores/{STORE_ID}/comments",
        json={"user_id": "5f1d7f3e9b1e8a3c4d2b6a10", "stars": 5},
        headers={"User-Agent": "pytest-agent"},
    )

    assert res.json() == {"id": COMMENT_ID}
    store_id, payload = stores.create_comment.await_args.args
    assert store_id == STORE_ID
    assert payload["ip_addr"] == "testclient"
    assert payload["user_agent"] == "pytest-agent"


def test_comment_keeps_supplied_address(client, stores):
    stores.create_comment.return_value = COMMENT_ID

    client.post(f"/api/stores/{STORE_ID}/comments", json={"ip_addr": "192.0.2.7", "user_agent": "ua"})

    payload = stores.create_comment.await_args.args[1]
    assert payload["ip_addr"] == "192.0.2.7"
    assert payload["user_agent"] == "ua"


def test_list_comments(client, stores):
    stores.find_comments.return_value = [{"stars": 4}]

    res = client.get(f"/api/stores/{STORE_ID}/comments", params={"limit": 5, "skip": 10})

    assert res.json() == {"data": {"store": {"comments": [{"stars": 4}]}}}
    stores.find_comments.assert_awaited_once_with(STORE_ID, False, 5, 10)


def test_list_comments_privileged(client, stores):
    app.dependency_overrides[resolve_privilege] = lambda: True
    stores.find_comments.return_value = []

    client.get(f"/api/stores/{STORE_ID}/comments")

    stores.find_comments.assert_awaited_once_with(STORE_ID, True, 0, 0)


def test_delete_comment(client, stores):
    res = client.delete(f"/api/stores/{STORE_ID}/comments/{COMMENT_ID}")

    assert res.json() == {"deleted_id": COMMENT_ID}
    stores.delete_comment.assert_awaited_once_with(STORE_ID, COMMENT_ID)


# ─── users ───────────────────────────────────────────────────────

def test_search_users(client, users):
    users.find.return_value = [{"id": STORE_ID, "name": "Alice"}]

    res = client.get("/api/users", params={"query": "alice", "fields": "name", "limit": 1})

    assert res.json() == {"data": {"users": [{"id": STORE_ID, "name": "Alice"}]}}
    users.find.assert_awaited_once_with("alice", "name", 1, 0)


def test_create_user(client, users):
    users.create_one.return_value = STORE_ID

    res = client.post("/api/users", json={"name": "Alice", "email": "alice@example.com"})

    assert res.json() == {"id": STORE_ID}


def test_get_user(client, users):
    users.find_one_by_id.return_value = {"id": STORE_ID, "email": "alice@example.com"}

    res = client.get(f"/api/users/{STORE_ID}", params={"fields": "email"})

    assert res.json() == {"data": {"user": {"id": STORE_ID, "email": "alice@example.com"}}}
    users.find_one_by_id.assert_awaited_once_with(STORE_ID, "email")


def test_update_and_delete_user(client, users):
    assert client.put(f"/api/users/{STORE_ID}", json={"name": "Bob"}).json() == {"id": STORE_ID}
    users.update_one.assert_awaited_once_with({"name": "Bob", "id": STORE_ID})

    assert client.delete(f"/api/users/{STORE_ID}").json() == {"deleted_id": STORE_ID}
    users.delete_one.assert_awaited_once_with(STORE_ID)


# ─── health ──────────────────────────────────────────────────────

def test_health_without_database(client):
    body = client.get("/health").json()

    assert body["status"] == "error"
    assert body["checks"]["mongodb"].startswith("error")
    assert body["checks"]["redis"] == "skipped"


def test_health_with_database(client, monkeypatch):
    db = AsyncMock()
    monkeypatch.setattr(mongo, "_db", db)

    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["checks"]["mongodb"] == "ok"
    assert body["checks"]["version"] == "unknown"
    db.command.assert_awaited_once_with("ping")

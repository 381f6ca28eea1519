"""UserService — usecase flow against a mocked repository."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from bson import ObjectId

from foodmap.core.errors import ShapeError, UnknownFieldsError, ValidationFailed
from foodmap.domain.models.user import User
from foodmap.domain.services.user_svc import UserService
from foodmap.domain.services.validator import Validator


@pytest.fixture
def repo():
    return AsyncMock()


@pytest.fixture
def service(repo):
    return UserService(repo, Validator())


@pytest.fixture
def stored_user():
    return User.model_validate({
        "_id": ObjectId(),
        "name": "Alice",
        "email": "alice@example.com",
        "cre": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "upd": datetime(2024, 1, 1, tzinfo=timezone.utc),
    })


@pytest.mark.asyncio
async def test_create_one(service, repo):
    new_id = ObjectId()
    repo.insert_one.return_value = new_id

    assert await service.create_one({"name": "Alice", "email": "alice@example.com"}) == str(new_id)
    assert repo.insert_one.await_args.args[0].email == "alice@example.com"


@pytest.mark.asyncio
async def test_create_stores_normalised_email(service, repo):
    repo.insert_one.return_value = ObjectId()

    await service.create_one({"name": "Alice", "email": "Alice@EXAMPLE.com"})

    assert repo.insert_one.await_args.args[0].email == "Alice@example.com"


@pytest.mark.asyncio
async def test_update_stores_normalised_email(service, repo, stored_user):
    repo.find_one_by_id.return_value = stored_user

    await service.update_one({"id": stored_user.id, "email": "Bob@EXAMPLE.org"})

    patch = repo.update_one.await_args.args[0]
    assert patch.email == "Bob@example.org"
    assert patch.model_fields_set == {"id", "email"}


@pytest.mark.asyncio
async def test_create_rejects_bad_email(service, repo):
    with pytest.raises(ValidationFailed) as exc:
        await service.create_one({"name": "Alice", "email": "alice"})
    assert [v.field for v in exc.value.violations] == ["email"]
    repo.insert_one.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_rejects_wrong_type(service, repo):
    with pytest.raises(ShapeError) as exc:
        await service.create_one({"name": ["Alice"], "email": "alice@example.com"})
    assert (exc.value.field, exc.value.reason) == ("name", "type")


@pytest.mark.asyncio
async def test_find_one_by_id(service, repo, stored_user):
    repo.find_one_by_id.return_value = stored_user

    doc = await service.find_one_by_id(stored_user.id, "email")

    assert repo.find_one_by_id.await_args.args == (ObjectId(stored_user.id), {"email": True})
    assert doc == {"id": stored_user.id, "email": "alice@example.com"}


@pytest.mark.asyncio
async def test_find_one_full_document(service, repo, stored_user):
    repo.find_one_by_id.return_value = stored_user

    doc = await service.find_one_by_id(stored_user.id)

    assert repo.find_one_by_id.await_args.args[1] == {}
    assert doc["name"] == "Alice"
    assert doc["created_at"].startswith("2024-01-01")


@pytest.mark.asyncio
async def test_user_fields_are_not_store_fields(service, repo):
    with pytest.raises(UnknownFieldsError) as exc:
        await service.find(fields="name,menu")
    assert exc.value.fields == ["menu"]


@pytest.mark.asyncio
async def test_find(service, repo, stored_user):
    repo.find.return_value = [stored_user]

    docs = await service.find("alice", "name", limit=5)

    repo.find.assert_awaited_once_with("alice", {"name": True}, 5, 0)
    assert docs == [{"id": stored_user.id, "name": "Alice"}]


@pytest.mark.asyncio
async def test_update_one(service, repo, stored_user):
    repo.find_one_by_id.return_value = stored_user

    await service.update_one({"id": stored_user.id, "email": "alice@example.org"})

    patch = repo.update_one.await_args.args[0]
    assert patch.model_fields_set == {"id", "email"}
    assert patch.email == "alice@example.org"


@pytest.mark.asyncio
async def test_delete_one(service, repo):
    oid = ObjectId()
    await service.delete_one(str(oid))
    repo.delete_one.assert_awaited_once_with(oid)

"""Root conftest — shared fixtures for codec, service and API tests."""

import os
from datetime import datetime, timezone

import pytest
from bson import ObjectId

# Keep tests away from any real database or cache
os.environ.setdefault("APP_ENV", "development")
os.environ.pop("REDIS_URL", None)

from foodmap.domain.models.store import Comment, Store  # noqa: E402

USER_ID = "5f1d7f3e9b1e8a3c4d2b6a10"


@pytest.fixture
def store_doc():
    """A complete, valid inbound store document."""
    return {
        "name": "Test Store",
        "description": "noodles and dumplings",
        "business_hours": [
            {"day": [1, 5], "time": ["08:00", "22:00"]},
        ],
        "categories": ["food"],
        "price_level": "cheap",
        "menu": [
            {
                "name": "Beef Noodles",
                "description": "house special",
                "category": "Main",
                "variants": [
                    {"name": "L", "price": 50},
                    {"name": "S", "price": 40},
                ],
            },
            {"name": "Tea", "category": "Drink", "price": 20},
        ],
    }


@pytest.fixture
def stored_store():
    """A store as read back from Mongo with a full projection."""
    return Store.model_validate({
        "_id": ObjectId(),
        "name": "Test Store",
        "desc": "noodles and dumplings",
        "bh": [{"fd": 1, "td": 5, "ft": "08:00", "tt": "22:00"}],
        "cat": ["food"],
        "pl": "c",
        "menu": [{"name": "Tea", "desc": "", "cat": "Drink", "price": 20, "var": []}],
        "cmnt": [],
        "cre": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "upd": datetime(2024, 1, 1, tzinfo=timezone.utc),
    })


def make_comment(stars=4, ip="192.0.2.1", ua="pytest-agent"):
    return Comment.model_validate({
        "_id": ObjectId(),
        "uid": ObjectId(USER_ID),
        "star": stars,
        "msg": "good",
        "ip": ip,
        "ua": ua,
        "cre": datetime(2024, 1, 2, 12, 0, tzinfo=timezone.utc),
    })


@pytest.fixture
def comment_factory():
    return make_comment

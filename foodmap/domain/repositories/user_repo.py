# foodmap/domain/repositories/user_repo.py

from __future__ import annotations
from typing import Dict, List, Optional
from datetime import datetime, timezone
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import TEXT
from foodmap.core.errors import NotFoundError
from foodmap.domain.models.user import User


class UserRepo:
    """User repository backed by the 'users' collection."""

    TEXT_INDEX = "user_text"

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "users"):
        self.col = db[collection_name]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("name", TEXT), ("email", TEXT)], name=self.TEXT_INDEX)

    async def insert_one(self, user: User) -> ObjectId:
        user_id = ObjectId()
        now = datetime.now(timezone.utc)
        doc = user.model_dump(by_alias=True, exclude={"id", "created_at", "updated_at"})
        doc.update({"_id": user_id, "cre": now, "upd": now})
        await self.col.insert_one(doc)
        return user_id

    async def find_one_by_id(self, user_id: ObjectId, projection: Optional[Dict[str, bool]] = None) -> User:
        doc = await self.col.find_one({"_id": user_id}, projection or None)
        if not doc:
            raise NotFoundError("user", user_id)
        return User.model_validate(doc)

    async def find(
        self,
        query: str,
        projection: Optional[Dict[str, bool]] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> List[User]:
        filt = {"$text": {"$search": query}} if query else {}
        cursor = self.col.find(filt, projection or None, skip=skip, limit=limit)
        return [User.model_validate(doc) async for doc in cursor]

    async def update_one(self, user: User) -> None:
        fields = set(user.model_fields_set) - {"id", "created_at", "updated_at"}
        update = user.model_dump(by_alias=True, include=fields)
        update["upd"] = datetime.now(timezone.utc)
        res = await self.col.update_one({"_id": ObjectId(user.id)}, {"$set": update})
        if res.matched_count == 0:
            raise NotFoundError("user", user.id)

    async def delete_one(self, user_id: ObjectId) -> None:
        res = await self.col.delete_one({"_id": user_id})
        if res.deleted_count == 0:
            raise NotFoundError("user", user_id)

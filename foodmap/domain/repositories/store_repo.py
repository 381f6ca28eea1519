# foodmap/domain/repositories/store_repo.py

from __future__ import annotations
from typing import Dict, List, Optional
from datetime import datetime, timezone
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import TEXT
from foodmap.core.errors import NotFoundError
from foodmap.domain.models.store import Comment, Store

# $slice needs a count; this stands for "to the end of the array"
_SLICE_ALL = 2**31 - 1


class StoreRepo:
    """
    Store repository backed by the 'stores' collection.
    Comments live inside their store document under 'cmnt':
      cmnt = [ { _id, uid, star, msg, ip, ua, cre }, ... ]
    """

    TEXT_INDEX = "store_text"

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "stores"):
        self.col = db[collection_name]

    async def ensure_indexes(self) -> None:
        await self.col.create_index(
            [
                ("name", TEXT),
                ("desc", TEXT),
                ("cat", TEXT),
                ("menu.name", TEXT),
                ("menu.desc", TEXT),
                ("menu.cat", TEXT),
            ],
            name=self.TEXT_INDEX,
        )

    async def insert_one(self, store: Store) -> ObjectId:
        store_id = ObjectId()
        now = datetime.now(timezone.utc)
        doc = store.model_dump(by_alias=True, exclude={"id", "comments", "created_at", "updated_at"})
        doc.update({"_id": store_id, "cmnt": [], "cre": now, "upd": now})
        await self.col.insert_one(doc)
        return store_id

    async def find_one_by_id(self, store_id: ObjectId, projection: Optional[Dict[str, bool]] = None) -> Store:
        doc = await self.col.find_one({"_id": store_id}, projection or None)
        if not doc:
            raise NotFoundError("store", store_id)
        return Store.model_validate(doc)

    async def find(
        self,
        query: str,
        categories: List[str],
        projection: Optional[Dict[str, bool]] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> List[Store]:
        """
        Full-text search over the store text index, optionally restricted to
        stores carrying *all* of `categories`. limit=0 means no limit.
        """
        filt: Dict[str, object] = {}
        if query:
            filt["$text"] = {"$search": query}
        if categories:
            filt["cat"] = {"$all": categories}
        cursor = self.col.find(filt, projection or None, skip=skip, limit=limit)
        return [Store.model_validate(doc) async for doc in cursor]

    async def update_one(self, store: Store) -> None:
        """
        $set the fields supplied on `store` (its model_fields_set) plus 'upd'.
        """
        fields = set(store.model_fields_set) - {"id", "comments", "created_at", "updated_at"}
        update = store.model_dump(by_alias=True, include=fields)
        update["upd"] = datetime.now(timezone.utc)
        res = await self.col.update_one({"_id": ObjectId(store.id)}, {"$set": update})
        if res.matched_count == 0:
            raise NotFoundError("store", store.id)

    async def delete_one(self, store_id: ObjectId) -> None:
        res = await self.col.delete_one({"_id": store_id})
        if res.deleted_count == 0:
            raise NotFoundError("store", store_id)

    # ----- Comments -----------------------------------------------------------

    async def insert_comment(self, store_id: ObjectId, comment: Comment) -> ObjectId:
        comment_id = ObjectId()
        doc = comment.model_dump(by_alias=True, exclude={"id"})
        doc["_id"] = comment_id
        doc["uid"] = ObjectId(comment.user_id)
        doc["cre"] = comment.created_at or datetime.now(timezone.utc)
        res = await self.col.update_one({"_id": store_id}, {"$push": {"cmnt": doc}})
        if res.matched_count == 0:
            raise NotFoundError("store", store_id)
        return comment_id

    async def find_comments(self, store_id: ObjectId, limit: int = 0, skip: int = 0) -> List[Comment]:
        if limit or skip:
            proj = {"cmnt": {"$slice": [skip, limit or _SLICE_ALL]}}
        else:
            proj = {"cmnt": 1}
        doc = await self.col.find_one({"_id": store_id}, proj)
        if not doc:
            raise NotFoundError("store", store_id)
        return [Comment.model_validate(c) for c in doc.get("cmnt") or []]

    async def delete_comment(self, store_id: ObjectId, comment_id: ObjectId) -> None:
        res = await self.col.update_one({"_id": store_id}, {"$pull": {"cmnt": {"_id": comment_id}}})
        if res.matched_count == 0:
            raise NotFoundError("store", store_id)
        if res.modified_count == 0:
            raise NotFoundError("comment", comment_id)

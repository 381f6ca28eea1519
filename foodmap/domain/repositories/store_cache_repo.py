import hashlib
import json
import logging
from typing import Dict, List, Optional

from bson import ObjectId
from redis.asyncio import Redis

from foodmap.domain.models.store import Comment, Store
from foodmap.domain.repositories.store_repo import StoreRepo

logger = logging.getLogger(__name__)


def _h(projection: Optional[Dict[str, bool]]) -> str:
    """Short, order-independent hash of a projection, used in cache keys."""
    s = json.dumps(projection or {}, sort_keys=True, separators=(",", ":"))
    return hashlib.sha1(s.encode()).hexdigest()[:10]


class CachedStoreRepo:
    """
    Cache-aside wrapper around StoreRepo for reads by id.

    Entries are stored in their storage form under
      <prefix>:<store_id>:<projection hash>
    and every write touching a store drops all of that store's entries.
    Redis errors are logged and the call falls through to Mongo.
    """

    def __init__(self, repo: StoreRepo, redis: Redis, ttl: int, key_prefix: str = "store"):
        self.repo = repo
        self.cache = redis
        self.ttl = ttl
        self.prefix = key_prefix

    def key(self, store_id: ObjectId, projection: Optional[Dict[str, bool]]) -> str:
        return f"{self.prefix}:{store_id}:{_h(projection)}"

    async def _invalidate(self, store_id: ObjectId) -> None:
        try:
            keys = [k async for k in self.cache.scan_iter(match=f"{self.prefix}:{store_id}:*")]
            if keys:
                await self.cache.delete(*keys)
        except Exception as e:
            logger.warning("store cache invalidate error store_id=%s err=%s", store_id, e)

    async def find_one_by_id(self, store_id: ObjectId, projection: Optional[Dict[str, bool]] = None) -> Store:
        key = self.key(store_id, projection)
        try:
            raw = await self.cache.get(key)
        except Exception as e:
            logger.warning("store cache get error key=%s err=%s", key, e)
            raw = None
        if raw:
            logger.debug("store cache_hit key=%s", key)
            return Store.model_validate_json(raw)

        store = await self.repo.find_one_by_id(store_id, projection)
        try:
            await self.cache.set(key, store.model_dump_json(by_alias=True, exclude_unset=True), ex=self.ttl)
        except Exception as e:
            logger.warning("store cache set error key=%s err=%s", key, e)
        return store

    async def find(self, query, categories, projection=None, limit: int = 0, skip: int = 0) -> List[Store]:
        return await self.repo.find(query, categories, projection, limit, skip)

    async def insert_one(self, store: Store) -> ObjectId:
        return await self.repo.insert_one(store)

    async def update_one(self, store: Store) -> None:
        await self.repo.update_one(store)
        await self._invalidate(ObjectId(store.id))

    async def delete_one(self, store_id: ObjectId) -> None:
        await self.repo.delete_one(store_id)
        await self._invalidate(store_id)

    async def insert_comment(self, store_id: ObjectId, comment: Comment) -> ObjectId:
        comment_id = await self.repo.insert_comment(store_id, comment)
        await self._invalidate(store_id)
        return comment_id

    async def find_comments(self, store_id: ObjectId, limit: int = 0, skip: int = 0) -> List[Comment]:
        return await self.repo.find_comments(store_id, limit, skip)

    async def delete_comment(self, store_id: ObjectId, comment_id: ObjectId) -> None:
        await self.repo.delete_comment(store_id, comment_id)
        await self._invalidate(store_id)

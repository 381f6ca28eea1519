import logging
import time
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from foodmap.core.errors import ShapeError, UnknownFieldsError
from foodmap.domain.models.store import STORE_FIELDS
from foodmap.domain.services import document_codec as codec
from foodmap.domain.services.field_selector import split_fields, to_projection, validate_fields
from foodmap.domain.services.validator import Validator

logger = logging.getLogger(__name__)

# comment keys only privileged callers may see
PRIVILEGED_COMMENT_KEYS = ("ip_addr", "user_agent")


def parse_object_id(value: Any, field: str = "id") -> ObjectId:
    if not isinstance(value, str):
        raise ShapeError(field, "required" if value is None else "invalid")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ShapeError(field, "invalid") from None


def check_fields(fields: Optional[str], whitelist: List[str]) -> None:
    unknown = validate_fields(fields, whitelist)
    if unknown:
        raise UnknownFieldsError(unknown)


class StoreService:
    """
    Store operations for the API layer.

    Writes go received -> decoded -> merged (update only) -> validated ->
    persisted; the repository call is always last, so a failure at any
    earlier step leaves the database untouched.
    """

    def __init__(self, repo, validator: Validator, tz: Optional[tzinfo] = None):
        self.repo = repo
        self.validator = validator
        self.tz = tz or timezone.utc

    def _now(self) -> datetime:
        return datetime.now(self.tz)

    async def create_one(self, document: Dict[str, Any]) -> str:
        record = codec.decode_store(document)
        record = self.validator.check(record)
        store_id = await self.repo.insert_one(record)
        logger.info("store created id=%s name=%s", store_id, record.name)
        return str(store_id)

    async def find_one_by_id(self, id: str, fields: Optional[str] = None) -> Dict[str, Any]:
        store_id = parse_object_id(id)
        check_fields(fields, STORE_FIELDS.whitelist())
        projection = to_projection(fields, STORE_FIELDS)
        record = await self.repo.find_one_by_id(store_id, projection)
        return codec.encode_store(record, projection, split_fields(fields), now=self._now())

    async def find(
        self,
        query: str = "",
        categories: Optional[str] = None,
        fields: Optional[str] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> List[Dict[str, Any]]:
        t0 = time.perf_counter()
        check_fields(fields, STORE_FIELDS.whitelist())
        projection = to_projection(fields, STORE_FIELDS)
        logger.info("store find start query=%r categories=%r limit=%s skip=%s", query, categories, limit, skip)

        records = await self.repo.find(query, split_fields(categories), projection, limit, skip)
        now = self._now()
        result = [codec.encode_store(r, projection, split_fields(fields), now=now) for r in records]

        logger.info("store find done items=%s total_time=%.3fs", len(result), time.perf_counter() - t0)
        return result

    async def update_one(self, document: Dict[str, Any]) -> None:
        store_id = parse_object_id(document.get("id"))
        patch = codec.decode_store(document)
        current = await self.repo.find_one_by_id(store_id, None)
        merged = self.validator.check(codec.merge(current, patch))
        update = {name: getattr(merged, name) for name in patch.model_fields_set}
        update["id"] = str(store_id)
        await self.repo.update_one(patch.model_copy(update=update))
        logger.info("store updated id=%s fields=%s", store_id, sorted(patch.model_fields_set))

    async def delete_one(self, id: str) -> None:
        store_id = parse_object_id(id)
        await self.repo.delete_one(store_id)
        logger.info("store deleted id=%s", store_id)

    # ----- Comments -------------------------------------------------------------

    async def create_comment(self, store_id: str, document: Dict[str, Any]) -> str:
        sid = parse_object_id(store_id, "store_id")
        record = codec.decode_comment(document, created_at=datetime.now(timezone.utc))
        record = self.validator.check(record)
        comment_id = await self.repo.insert_comment(sid, record)
        logger.info("comment created store_id=%s comment_id=%s stars=%s", sid, comment_id, record.stars)
        return str(comment_id)

    async def find_comments(
        self,
        store_id: str,
        is_privileged: bool = False,
        limit: int = 0,
        skip: int = 0,
    ) -> List[Dict[str, Any]]:
        sid = parse_object_id(store_id, "store_id")
        records = await self.repo.find_comments(sid, limit, skip)
        result = []
        for record in records:
            doc = codec.encode_comment(record)
            if not is_privileged:
                for key in PRIVILEGED_COMMENT_KEYS:
                    doc.pop(key, None)
            result.append(doc)
        return result

    async def delete_comment(self, store_id: str, comment_id: str) -> None:
        sid = parse_object_id(store_id, "store_id")
        cid = parse_object_id(comment_id, "comment_id")
        await self.repo.delete_comment(sid, cid)
        logger.info("comment deleted store_id=%s comment_id=%s", sid, cid)

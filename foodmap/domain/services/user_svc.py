import logging
from typing import Any, Dict, List, Optional

from foodmap.domain.models.user import USER_FIELDS
from foodmap.domain.services import document_codec as codec
from foodmap.domain.services.field_selector import split_fields, to_projection
from foodmap.domain.services.store_svc import check_fields, parse_object_id
from foodmap.domain.services.validator import Validator

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, repo, validator: Validator):
        self.repo = repo
        self.validator = validator

    async def create_one(self, document: Dict[str, Any]) -> str:
        record = codec.decode_user(document)
        record = self.validator.check(record)
        user_id = await self.repo.insert_one(record)
        logger.info("user created id=%s", user_id)
        return str(user_id)

    async def find_one_by_id(self, id: str, fields: Optional[str] = None) -> Dict[str, Any]:
        user_id = parse_object_id(id)
        check_fields(fields, USER_FIELDS.whitelist())
        record = await self.repo.find_one_by_id(user_id, to_projection(fields, USER_FIELDS))
        return codec.encode_user(record, split_fields(fields))

    async def find(
        self,
        query: str = "",
        fields: Optional[str] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> List[Dict[str, Any]]:
        check_fields(fields, USER_FIELDS.whitelist())
        records = await self.repo.find(query, to_projection(fields, USER_FIELDS), limit, skip)
        logger.info("user find query=%r items=%s", query, len(records))
        return [codec.encode_user(r, split_fields(fields)) for r in records]

    async def update_one(self, document: Dict[str, Any]) -> None:
        user_id = parse_object_id(document.get("id"))
        patch = codec.decode_user(document)
        current = await self.repo.find_one_by_id(user_id, None)
        merged = self.validator.check(codec.merge(current, patch))
        update = {name: getattr(merged, name) for name in patch.model_fields_set}
        update["id"] = str(user_id)
        await self.repo.update_one(patch.model_copy(update=update))
        logger.info("user updated id=%s fields=%s", user_id, sorted(patch.model_fields_set))

    async def delete_one(self, id: str) -> None:
        user_id = parse_object_id(id)
        await self.repo.delete_one(user_id)
        logger.info("user deleted id=%s", user_id)

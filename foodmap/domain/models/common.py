from datetime import datetime
from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic_core import PydanticCustomError

OBJECT_ID_PATTERN = r"^[0-9a-fA-F]{24}$"


def _required(value: Any) -> Any:
    """Zero values (None, "", 0, []) are treated as missing."""
    if value is None or value == "" or value == 0 or value == []:
        raise PydanticCustomError("required", "field is required")
    return value


def _object_id_to_str(value: Any) -> Any:
    return str(value) if isinstance(value, ObjectId) else value


Required = BeforeValidator(_required)
ObjectIdStr = Annotated[str, BeforeValidator(_object_id_to_str)]
ObjectIdRef = Annotated[str, Field(pattern=OBJECT_ID_PATTERN), BeforeValidator(_object_id_to_str), Required]


class StorageModel(BaseModel):
    """
    Field names are the wire (API) names, aliases are the storage (Mongo) names.
    Documents read from Mongo validate by alias; the codec builds entities by name.
    """
    model_config = ConfigDict(populate_by_name=True, loc_by_alias=False)


class Entity(StorageModel):
    id: Optional[ObjectIdStr] = Field(default=None, alias="_id")
    updated_at: Optional[datetime] = Field(default=None, alias="upd")
    created_at: Optional[datetime] = Field(default=None, alias="cre")

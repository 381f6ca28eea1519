from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import Field, IPvAnyAddress, field_serializer, model_validator
from pydantic_core import PydanticCustomError

from foodmap.domain.models.common import Entity, ObjectIdRef, ObjectIdStr, Required, StorageModel
from foodmap.domain.models.fields import FieldSpec, FieldTable

HH_MM_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"


class PriceLevel(str, Enum):
    CHEAP = "c"
    MEDIUM = "m"
    EXPENSIVE = "e"


Weekday = Annotated[int, Field(ge=1, le=7), Required]          # Monday=1 .. Sunday=7
WallClock = Annotated[str, Field(pattern=HH_MM_PATTERN), Required]


class BusinessHoursRule(StorageModel):
    """
    Open on every day of [min(from_day, to_day), max(from_day, to_day)]
    during [from_time, to_time). Several rules may cover the same day.
    """
    from_day: Weekday = Field(default=0, alias="fd")
    to_day: Weekday = Field(default=0, alias="td")
    from_time: WallClock = Field(default="", alias="ft")
    to_time: WallClock = Field(default="", alias="tt")


class Variant(StorageModel):
    name: Annotated[str, Field(max_length=5), Required] = Field(default="", alias="name")
    price: Annotated[int, Field(ge=0), Required] = Field(default=0, alias="price")


class Product(StorageModel):
    name: Annotated[str, Field(max_length=50), Required] = Field(default="", alias="name")
    description: str = Field(default="", max_length=1000, alias="desc")
    category: Annotated[str, Field(max_length=50), Required] = Field(default="", alias="cat")
    price: int = Field(default=0, ge=0, alias="price")
    variants: List[Variant] = Field(default_factory=list, alias="var")

    @model_validator(mode="after")
    def _price_or_variants(self):
        if not self.price and not self.variants:
            raise PydanticCustomError("required_without", "price is required when there are no variants")
        return self


class Comment(StorageModel):
    id: Optional[ObjectIdStr] = Field(default=None, alias="_id")
    user_id: ObjectIdRef = Field(default="", alias="uid")
    stars: int = Field(default=0, ge=0, le=5, alias="star")
    message: str = Field(default="", max_length=200, alias="msg")
    ip_addr: Annotated[Optional[IPvAnyAddress], Required] = Field(default=None, alias="ip")
    user_agent: Annotated[str, Required] = Field(default="", alias="ua")
    created_at: Annotated[Optional[datetime], Required] = Field(default=None, alias="cre")

    @field_serializer("ip_addr")
    def _ip_to_str(self, value):
        return str(value) if value is not None else None


class Store(Entity):
    name: Annotated[str, Field(max_length=50), Required] = Field(default="", alias="name")
    description: str = Field(default="", max_length=1000, alias="desc")
    business_hours: Annotated[List[BusinessHoursRule], Required] = Field(default_factory=list, alias="bh")
    categories: List[str] = Field(default_factory=list, alias="cat")
    price_level: Annotated[Optional[PriceLevel], Required] = Field(default=None, alias="pl")
    menu: List[Product] = Field(default_factory=list, alias="menu")
    comments: List[Comment] = Field(default_factory=list, alias="cmnt")


STORE_FIELDS = FieldTable("store", [
    FieldSpec("id", "_id"),
    FieldSpec("name", "name"),
    FieldSpec("description", "desc"),
    FieldSpec("is_open", derived_from=("bh",)),
    FieldSpec("business_hours", "bh"),
    FieldSpec("categories", "cat"),
    FieldSpec("price_level", "pl"),
    FieldSpec("menu", "menu"),
    FieldSpec("average_stars", derived_from=("cmnt",), default_visible=False),
    FieldSpec("comments", "cmnt", default_visible=False, selectable=False),
    FieldSpec("updated_at", "upd"),
    FieldSpec("created_at", "cre"),
])

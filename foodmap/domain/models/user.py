from typing import Annotated

from pydantic import EmailStr, Field

from foodmap.domain.models.common import Entity, Required
from foodmap.domain.models.fields import FieldSpec, FieldTable


class User(Entity):
    name: Annotated[str, Field(max_length=50), Required] = Field(default="", alias="name")
    email: Annotated[EmailStr, Required] = Field(default="", alias="email")


USER_FIELDS = FieldTable("user", [
    FieldSpec("id", "_id"),
    FieldSpec("name", "name"),
    FieldSpec("email", "email"),
    FieldSpec("updated_at", "upd"),
    FieldSpec("created_at", "cre"),
])

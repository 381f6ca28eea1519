# foodmap/domain/services/document_codec.py
"""
Conversion between sparse API documents and typed entities.

Inbound documents are plain JSON values (str, int, float, bool, list, dict,
None). Each declared field is checked against the JSON type it must have and
a mismatch raises ShapeError naming the field; unknown keys are ignored and
keys that are absent (or null) leave the entity field at its zero value.
Entities remember which fields were supplied (`model_fields_set`), which is
what an update writes.

Outbound documents are built from whatever the repository fetched: fields the
projection left out are simply not there.
"""
from __future__ import annotations

import ipaddress
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel, IPvAnyAddress, TypeAdapter, ValidationError

from foodmap.core.errors import ShapeError
from foodmap.domain.models.store import BusinessHoursRule, Comment, Product, Store, Variant
from foodmap.domain.models.user import User
from foodmap.domain.services import business_hours, price_level
from foodmap.domain.services.field_selector import Projection, is_projected

Document = Dict[str, Any]
M = TypeVar("M", bound=BaseModel)


# ----- JSON type checks ---------------------------------------------------

def _mapping(path: str, value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ShapeError(path, "type")
    return value


def _list(path: str, value: Any) -> list:
    if not isinstance(value, list):
        raise ShapeError(path, "type")
    return value


def _string(path: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ShapeError(path, "type")
    return value


def _integer(path: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ShapeError(path, "type")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ShapeError(path, "type")


def _strings(path: str, value: Any) -> List[str]:
    return [_string(f"{path}.{i}", v) for i, v in enumerate(_list(path, value))]


def _objects(path: str, value: Any, decode_item: Callable[[str, Mapping[str, Any]], M]) -> List[M]:
    return [decode_item(f"{path}.{i}", _mapping(f"{path}.{i}", v)) for i, v in enumerate(_list(path, value))]


def _convert(prefix: str, doc: Mapping[str, Any], fields: Mapping[str, Callable[[str, Any], Any]]) -> Dict[str, Any]:
    """Run the converter of every declared field present (and not null) in doc."""
    values: Dict[str, Any] = {}
    for name, convert in fields.items():
        if doc.get(name) is not None:
            values[name] = convert(f"{prefix}{name}", doc[name])
    return values


# ----- business hours -----------------------------------------------------

def decode_business_hours(value: Any) -> List[BusinessHoursRule]:
    """
    [{"day": [from, to], "time": ["HH:MM", "HH:MM"]}, ...] -> rules.
    The whole list is rejected on the first malformed rule, named by its
    position: business_hours.<i>, business_hours.<i>.day or business_hours.<i>.time.
    """
    if not isinstance(value, list):
        raise ShapeError("business_hours", "invalid")

    rules: List[BusinessHoursRule] = []
    for i, item in enumerate(value):
        path = f"business_hours.{i}"
        if not isinstance(item, Mapping):
            raise ShapeError(path, "invalid")
        day, time = item.get("day"), item.get("time")
        if not isinstance(day, list) or len(day) != 2:
            raise ShapeError(f"{path}.day", "invalid")
        if not isinstance(time, list) or len(time) != 2:
            raise ShapeError(f"{path}.time", "invalid")
        try:
            from_day, to_day = (_integer(f"{path}.day", d) for d in day)
            from_time, to_time = (_string(f"{path}.time", t) for t in time)
        except ShapeError:
            raise ShapeError(path, "invalid") from None
        if not from_day or not to_day or not from_time or not to_time:
            raise ShapeError(path, "invalid")
        rules.append(BusinessHoursRule.model_construct(
            from_day=from_day, to_day=to_day, from_time=from_time, to_time=to_time,
        ))
    return rules


# ----- menu -----------------------------------------------------------------

_VARIANT_FIELDS = {"name": _string, "price": _integer}


def _decode_variant(path: str, doc: Mapping[str, Any]) -> Variant:
    return Variant.model_construct(**_convert(f"{path}.", doc, _VARIANT_FIELDS))


def _decode_product(path: str, doc: Mapping[str, Any]) -> Product:
    fields = {
        "name": _string,
        "description": _string,
        "category": _string,
        "price": _integer,
        "variants": lambda p, v: _objects(p, v, _decode_variant),
    }
    return Product.model_construct(**_convert(f"{path}.", doc, fields))


# ----- inbound --------------------------------------------------------------

_STORE_FIELDS = {
    "name": _string,
    "description": _string,
    "categories": _strings,
    "menu": lambda p, v: _objects(p, v, _decode_product),
}

_USER_FIELDS = {
    "name": _string,
    "email": _string,
}


def decode_store(doc: Any) -> Store:
    doc = _mapping("store", doc)
    values = _convert("", doc, _STORE_FIELDS)

    if doc.get("business_hours") is not None:
        values["business_hours"] = decode_business_hours(doc["business_hours"])

    if "price_level" in doc:
        level = price_level.encode(doc["price_level"])
        if level is not None:
            values["price_level"] = level

    return Store.model_construct(**values)


def decode_user(doc: Any) -> User:
    doc = _mapping("user", doc)
    return User.model_construct(**_convert("", doc, _USER_FIELDS))


_IP_ADDRESS = TypeAdapter(IPvAnyAddress)


def parse_ip_address(value: Any) -> Optional[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]]:
    """Canonical address for a textual IP; None when it cannot be parsed."""
    if isinstance(value, str):
        try:
            return _IP_ADDRESS.validate_python(value.strip())
        except ValidationError:
            return None
    return None


def decode_comment(doc: Any, created_at: datetime) -> Comment:
    doc = _mapping("comment", doc)
    values = _convert("", doc, {
        "user_id": _string,
        "stars": _integer,
        "message": _string,
        "user_agent": _string,
    })
    values["ip_addr"] = parse_ip_address(doc.get("ip_addr"))
    values["created_at"] = created_at
    return Comment.model_construct(**values)


def merge(current: M, patch: M) -> M:
    """Overwrite the fields supplied in patch; everything else keeps its persisted value."""
    update = {name: getattr(patch, name) for name in patch.model_fields_set}
    return current.model_copy(update=update)


# ----- outbound -------------------------------------------------------------

def _select(doc: Document, fields: Sequence[str]) -> Document:
    if not fields:
        return doc
    keep = set(fields) | {"id"}
    return {k: v for k, v in doc.items() if k in keep}


def encode_store(
    store: Store,
    projection: Optional[Projection] = None,
    fields: Sequence[str] = (),
    now: Optional[datetime] = None,
) -> Document:
    doc = store.model_dump(mode="json", exclude_unset=True, exclude_none=True, exclude={"comments"})

    if "business_hours" in store.model_fields_set and is_projected(projection, "bh"):
        table = business_hours.resolve(store.business_hours)
        doc["business_hours"] = [[list(interval) for interval in day] for day in table]
        if now is not None:
            doc["is_open"] = business_hours.is_open(table, now)

    if "price_level" in doc:
        doc["price_level"] = price_level.decode(doc["price_level"])

    for product in doc.get("menu", []):
        if product.get("variants"):
            product.pop("price", None)

    if "comments" in store.model_fields_set and is_projected(projection, "cmnt") and store.comments:
        doc["average_stars"] = round(sum(c.stars for c in store.comments) / len(store.comments), 2)

    return _select(doc, fields)


def encode_user(user: User, fields: Sequence[str] = ()) -> Document:
    return _select(user.model_dump(mode="json", exclude_unset=True, exclude_none=True), fields)


def encode_comment(comment: Comment) -> Document:
    return comment.model_dump(mode="json", exclude_none=True)

from typing import Any, Optional

from foodmap.core.errors import ShapeError
from foodmap.domain.models.store import PriceLevel

LABELS = {
    "cheap": PriceLevel.CHEAP,
    "medium": PriceLevel.MEDIUM,
    "expensive": PriceLevel.EXPENSIVE,
}
_BY_CODE = {code: label for label, code in LABELS.items()}


def encode(value: Any) -> Optional[PriceLevel]:
    """
    Map a label to its code. Anything that is not a string counts as
    "not supplied" and returns None; an unknown label is a ShapeError.
    """
    if not isinstance(value, str):
        return None
    try:
        return LABELS[value]
    except KeyError:
        raise ShapeError("price_level", "invalid") from None


def decode(code: Any) -> str:
    return _BY_CODE[PriceLevel(code)]

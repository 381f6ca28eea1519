from typing import Dict, List, Optional, Sequence

from foodmap.domain.models.fields import FieldTable

Projection = Dict[str, bool]


def split_fields(csv: Optional[str]) -> List[str]:
    """Split a comma-separated list, dropping empty tokens."""
    if not csv:
        return []
    return [token for token in csv.split(",") if token != ""]


def validate_fields(csv: Optional[str], whitelist: Sequence[str]) -> List[str]:
    """
    Return the requested names that are not in `whitelist`, in request order
    (duplicates kept). An empty list means the request is valid.
    """
    allowed = set(whitelist)
    return [token for token in split_fields(csv) if token not in allowed]


def to_projection(csv: Optional[str], table: FieldTable) -> Projection:
    """
    Build a Mongo projection from the requested wire names.

    No explicit fields -> the default projection, which excludes every field
    the table hides by default (a store's comment list is only ever fetched
    through the comment endpoints).
    """
    tokens = split_fields(csv)
    if not tokens:
        return {name: False for name in table.hidden_by_default()}

    projection: Projection = {}
    for token in tokens:
        for storage in table.storage_names(token):
            projection[storage] = True
    return projection


def is_projected(projection: Optional[Projection], storage_name: str) -> bool:
    """Whether `storage_name` is fetched under `projection` (None fetches everything)."""
    if not projection:
        return True
    if any(projection.values()):
        return projection.get(storage_name, False) or storage_name == "_id"
    return projection.get(storage_name, True)

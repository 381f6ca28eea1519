"""
Error types raised by the codec, the validator and the usecases.

Every error carries a stable `code` and an HTTP status so the API layer can
translate it without knowing where it came from. Repository errors other than
NotFoundError are propagated as raised by the driver.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence


class FoodMapError(Exception):
    code: str = "error"
    http_status: int = 400

    def to_response(self) -> Dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class ShapeError(FoodMapError):
    """A nested field or identifier does not have the expected shape."""

    code = "invalid query"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f'Validation failed on field "{field}" with tag "{reason}"')

    def to_response(self) -> Dict[str, Any]:
        return {"code": self.code, "fields": self.field, "type": self.reason}


@dataclass(frozen=True)
class FieldViolation:
    field: str
    rule: str


class ValidationFailed(FoodMapError):
    """One or more typed-field rules failed (reported by Validator)."""

    code = "validation failed"

    def __init__(self, violations: Sequence[FieldViolation]):
        self.violations = list(violations)
        super().__init__("; ".join(f"{v.field}: {v.rule}" for v in self.violations))

    def to_response(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "errors": [{"field": v.field, "rule": v.rule} for v in self.violations],
        }


class UnknownFieldsError(FoodMapError):
    """The client asked for fields that are not in the whitelist."""

    code = "invalid fields"

    def __init__(self, fields: List[str]):
        self.fields = list(fields)
        super().__init__(",".join(self.fields))

    def to_response(self) -> Dict[str, Any]:
        return {"code": self.code, "message": str(self), "fields": self.fields}


class NotFoundError(FoodMapError):
    code = "not found"
    http_status = 404

    def __init__(self, kind: str, id: Any):
        self.kind = kind
        self.id = str(id)
        super().__init__(f"{kind} {self.id} not found")

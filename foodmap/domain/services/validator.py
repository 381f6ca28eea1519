import logging
from typing import List, Optional, Sequence, Tuple, TypeVar, Union

from pydantic import BaseModel, ValidationError

from foodmap.core.errors import FieldViolation, ValidationFailed

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _field_path(loc: Sequence[Union[str, int]]) -> str:
    return ".".join(str(part) for part in loc) or "__root__"


class Validator:
    """
    Checks an entity against the constraints declared on its model.

    Entities coming out of the codec are built without validation; this
    re-runs the model's validators on a dump of the entity and reports every
    failure as (field, rule), e.g. ("name", "required") or
    ("business_hours.0.from_time", "string_pattern_mismatch").
    """

    def _run(self, entity: M) -> Tuple[Optional[M], List[FieldViolation]]:
        try:
            return type(entity).model_validate(entity.model_dump()), []
        except ValidationError as exc:
            return None, [FieldViolation(_field_path(err["loc"]), err["type"]) for err in exc.errors()]

    def validate(self, entity: BaseModel) -> List[FieldViolation]:
        return self._run(entity)[1]

    def check(self, entity: M) -> M:
        """
        Raise ValidationFailed, or return `entity` with the supplied fields
        replaced by their validated values (e.g. a normalised e-mail).
        """
        validated, violations = self._run(entity)
        if violations:
            logger.info("validation failed entity=%s violations=%s", type(entity).__name__, violations)
            raise ValidationFailed(violations)
        return entity.model_copy(update={name: getattr(validated, name) for name in entity.model_fields_set})

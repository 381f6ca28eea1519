from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class FieldSpec:
    """
    One row of an entity's field table.

    wire            name used in API documents and in the `fields` query
    storage         Mongo field name, None for fields computed at encode time
    derived_from    storage fields a computed field is built from
    default_visible fetched when the client does not ask for specific fields
    selectable      accepted in the `fields` query
    """
    wire: str
    storage: Optional[str] = None
    derived_from: Tuple[str, ...] = ()
    default_visible: bool = True
    selectable: bool = True


class FieldTable:
    def __init__(self, kind: str, specs: Iterable[FieldSpec]):
        self.kind = kind
        self.specs: Tuple[FieldSpec, ...] = tuple(specs)
        self._by_wire: Dict[str, FieldSpec] = {s.wire: s for s in self.specs}

    def whitelist(self) -> List[str]:
        return [s.wire for s in self.specs if s.selectable]

    def get(self, wire: str) -> Optional[FieldSpec]:
        return self._by_wire.get(wire)

    def storage_names(self, wire: str) -> Tuple[str, ...]:
        spec = self._by_wire.get(wire)
        if spec is None:
            return ()
        if spec.storage is not None:
            return (spec.storage,)
        return spec.derived_from

    def hidden_by_default(self) -> List[str]:
        return [s.storage for s in self.specs if s.storage and not s.default_visible]

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple, Union


class MalformedSchemaError(ValueError):
    """Raised when the schema graph violates its structural contract."""


class FieldKind(str, Enum):
    SCALAR = "scalar"
    OBJECT = "object"
    ENUM = "enum"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class LiteralDefault:
    value: Any


@dataclass(frozen=True)
class NowDefault:
    pass


@dataclass(frozen=True)
class AutoincrementDefault:
    pass


@dataclass(frozen=True)
class FunctionDefault:
    """Database-generated default other than ``now()`` and ``autoincrement()``."""

    name: str
    args: Tuple[Any, ...] = ()


DefaultValue = Union[LiteralDefault, NowDefault, AutoincrementDefault, FunctionDefault, None]


def parse_default(raw: Any) -> DefaultValue:
    """
    Converts a DMMF ``default`` payload into a DefaultValue.

    DMMF encodes function defaults as ``{"name": "now", "args": []}``; older
    exports use ``{"kind": "now"}`` or ``{"kind": "literal", "value": ...}``,
    and a few emit the rendered string (``"now()"``). Anything else is a literal.
    """

    if raw is None:
        return None
    if isinstance(raw, (LiteralDefault, NowDefault, AutoincrementDefault, FunctionDefault)):
        return raw
    if isinstance(raw, dict):
        kind = raw.get("kind")
        if kind == "literal":
            return LiteralDefault(raw.get("value"))
        name = kind or raw.get("name")
        if not name:
            raise MalformedSchemaError(
                f"Default value {raw!r} has neither a 'name' nor a 'kind'"
            )
        return _function_default(str(name), raw.get("args") or ())
    if isinstance(raw, str) and raw.endswith("()") and raw[:-2].isidentifier():
        return _function_default(raw[:-2], ())
    return LiteralDefault(raw)


def _function_default(name: str, args: Any) -> DefaultValue:
    if name == "now":
        return NowDefault()
    if name == "autoincrement":
        return AutoincrementDefault()
    return FunctionDefault(name=name, args=tuple(args))


@dataclass(frozen=True)
class Field:
    name: str
    kind: FieldKind
    type: str
    is_list: bool = False
    is_required: bool = False
    is_id: bool = False
    is_unique: bool = False
    relation_name: Optional[str] = None
    relation_from_fields: Optional[Tuple[str, ...]] = None
    references: Optional[Tuple[str, ...]] = None
    has_default_value: bool = False
    default: DefaultValue = None
    is_updated_at: bool = False

    @property
    def is_object(self) -> bool:
        return self.kind is FieldKind.OBJECT

    @property
    def is_scalar(self) -> bool:
        return self.kind is FieldKind.SCALAR


@dataclass(frozen=True)
class Entity:
    name: str
    fields: Tuple[Field, ...] = ()
    db_name: Optional[str] = None

    def object_fields(self) -> Tuple[Field, ...]:
        return tuple(f for f in self.fields if f.is_object)

    def scalar_fields(self) -> Tuple[Field, ...]:
        return tuple(f for f in self.fields if f.is_scalar)


@dataclass(frozen=True)
class SchemaGraph:
    """Ordered, name-addressable collection of entities."""

    entities: Tuple[Entity, ...] = ()
    _by_name: Dict[str, Entity] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        lookup: Dict[str, Entity] = {}
        for entity in self.entities:
            if entity.name in lookup:
                raise MalformedSchemaError(
                    f"Entity name '{entity.name}' is declared more than once"
                )
            lookup[entity.name] = entity
        object.__setattr__(self, "_by_name", lookup)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities)

    def __len__(self) -> int:
        return len(self.entities)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Optional[Entity]:
        return self._by_name.get(name)

    @property
    def total_fields(self) -> int:
        return sum(len(entity.fields) for entity in self.entities)

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from relationship_spec_generator.data_processing.data_types import Entity, Field


class RelationshipKind(str, Enum):
    """Directional relationship kinds, valued by their Markdown symbol."""

    MANY_TO_MANY = ">--<"
    ONE_TO_MANY = "---<"
    MANY_TO_ONE = ">---"
    ONE_TO_ONE = "----"


@dataclass(frozen=True)
class RelationEnd:
    entity: str
    field: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.entity, "field": self.field}


@dataclass(frozen=True)
class JunctionTable:
    """An entity that only realizes a many-to-many link between two others."""

    entity: Entity
    side_a: Entity
    side_b: Entity
    reciprocal_a: Field
    reciprocal_b: Field

    @property
    def name(self) -> str:
        return self.entity.name


@dataclass(frozen=True)
class ManyToManyRelationship:
    entity_a: RelationEnd
    entity_b: RelationEnd
    junction: str
    junction_field_a: str
    junction_field_b: str

    def mirrored(self) -> "ManyToManyRelationship":
        return ManyToManyRelationship(
            entity_a=self.entity_b,
            entity_b=self.entity_a,
            junction=self.junction,
            junction_field_a=self.junction_field_b,
            junction_field_b=self.junction_field_a,
        )


@dataclass(frozen=True)
class OneToManyRelationship:
    one: RelationEnd
    many: RelationEnd

    @property
    def key(self) -> Tuple[str, str, str, str]:
        return (self.one.entity, self.one.field, self.many.entity, self.many.field)


@dataclass(frozen=True)
class OneToOneRelationship:
    table_one: RelationEnd
    table_two: RelationEnd

    @property
    def key(self) -> Tuple[Tuple[str, str], Tuple[str, str]]:
        ends = sorted(
            [
                (self.table_one.entity, self.table_one.field),
                (self.table_two.entity, self.table_two.field),
            ]
        )
        return ends[0], ends[1]


@dataclass(frozen=True)
class RelationshipDescriptor:
    """One outgoing edge of an entity in the assembled registry."""

    entity: str
    kind: RelationshipKind
    related_entity: str
    field: str
    related_field: str
    via: Optional[str] = None

    @property
    def key(self) -> Tuple[str, RelationshipKind, str, str]:
        return (self.entity, self.kind, self.related_entity, self.field)

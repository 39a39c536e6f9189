from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from loguru import logger

from relationship_spec_generator.data_processing.data_types import (
    Entity,
    Field,
    SchemaGraph,
)
from relationship_spec_generator.relationships.models import JunctionTable

# (junction entity, related entity, fallback position) -> scalar field name or None
JunctionFieldMatcher = Callable[[Entity, Entity, int], Optional[str]]


def relation_names_match(origin: Field, candidate: Field) -> bool:
    """Without a relation name on the origin, pairing is structural only."""

    if origin.relation_name is None:
        return True
    return candidate.relation_name == origin.relation_name


def find_reciprocal_field(
    origin_entity: Entity,
    origin_field: Field,
    related_entity: Entity,
    *,
    is_list: bool,
) -> Optional[Field]:
    """
    Returns the first object field of ``related_entity`` pointing back at
    ``origin_entity`` with the requested list-ness, never the origin field itself.
    """

    for candidate in related_entity.fields:
        if not candidate.is_object or candidate.is_list != is_list:
            continue
        if candidate.type != origin_entity.name:
            continue
        if related_entity.name == origin_entity.name and candidate.name == origin_field.name:
            continue
        if relation_names_match(origin_field, candidate):
            return candidate
    return None


def _resolve_junction(graph: SchemaGraph, entity: Entity) -> Optional[JunctionTable]:
    object_fields = entity.object_fields()
    if len(object_fields) != 2:
        return None

    field_a, field_b = object_fields
    if field_a.type == field_b.type or entity.name in (field_a.type, field_b.type):
        logger.debug(
            "{} links {} and {}; not a junction between two distinct entities",
            entity.name,
            field_a.type,
            field_b.type,
        )
        return None

    side_a = graph.get(field_a.type)
    side_b = graph.get(field_b.type)
    if side_a is None or side_b is None:
        logger.debug(
            "{} references unknown entity ({}, {}); not a junction",
            entity.name,
            field_a.type,
            field_b.type,
        )
        return None

    reciprocal_a = find_reciprocal_field(entity, field_a, side_a, is_list=True)
    reciprocal_b = find_reciprocal_field(entity, field_b, side_b, is_list=True)
    if reciprocal_a is None or reciprocal_b is None:
        logger.debug(
            "{} lacks reciprocal list fields on {} / {}; not a junction",
            entity.name,
            side_a.name,
            side_b.name,
        )
        return None

    return JunctionTable(
        entity=entity,
        side_a=side_a,
        side_b=side_b,
        reciprocal_a=reciprocal_a,
        reciprocal_b=reciprocal_b,
    )


def detect_junction_tables(graph: SchemaGraph) -> Tuple[JunctionTable, ...]:
    """
    Finds entities shaped like pure join tables.

    A junction has exactly two object fields referencing two distinct other
    entities, and each of those exposes a list field typed as the junction.
    Entities failing either check are left out without error.
    """

    junctions: List[JunctionTable] = []
    for entity in graph:
        junction = _resolve_junction(graph, entity)
        if junction is not None:
            junctions.append(junction)
    return tuple(junctions)


def match_junction_field(
    junction: Entity, related: Entity, fallback_index: int
) -> Optional[str]:
    """
    Picks the junction scalar field that holds the key of ``related``.

    Prefers the first scalar whose name contains the related entity's name,
    case-insensitively. Otherwise falls back to the scalar at
    ``fallback_index`` in declaration order, or None when there is none.
    """

    scalar_fields: Sequence[Field] = junction.scalar_fields()
    needle = related.name.lower()
    for scalar in scalar_fields:
        if needle in scalar.name.lower():
            return scalar.name
    if fallback_index < len(scalar_fields):
        return scalar_fields[fallback_index].name
    return None

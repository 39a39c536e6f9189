from __future__ import annotations

from typing import AbstractSet, List, NamedTuple, Set, Tuple

from loguru import logger

from relationship_spec_generator.data_processing.data_types import SchemaGraph
from relationship_spec_generator.relationships.junction import (
    JunctionFieldMatcher,
    find_reciprocal_field,
    match_junction_field,
)
from relationship_spec_generator.relationships.models import (
    JunctionTable,
    ManyToManyRelationship,
    OneToManyRelationship,
    OneToOneRelationship,
    RelationEnd,
)


class ManyToManyOutcome(NamedTuple):
    relationships: Tuple[ManyToManyRelationship, ...]
    skipped: Tuple[str, ...]


def classify_many_to_many(
    junctions: Tuple[JunctionTable, ...],
    *,
    field_matcher: JunctionFieldMatcher = match_junction_field,
) -> ManyToManyOutcome:
    """
    Turns detected junction tables into many-to-many relationships.

    Returns one relationship per junction, oriented A -> B in the junction's
    field declaration order; the mirror is derived with ``mirrored()``.
    Junctions whose key fields cannot be resolved are skipped.
    """

    relationships: List[ManyToManyRelationship] = []
    skipped: List[str] = []
    for junction in junctions:
        field_a = field_matcher(junction.entity, junction.side_a, 0)
        field_b = field_matcher(junction.entity, junction.side_b, 1)
        if field_a is None or field_b is None:
            logger.warning(
                "Junction table {} has too few scalar fields to identify keys for {} and {}; skipping",
                junction.name,
                junction.side_a.name,
                junction.side_b.name,
            )
            skipped.append(junction.name)
            continue

        relationships.append(
            ManyToManyRelationship(
                entity_a=RelationEnd(junction.side_a.name, junction.reciprocal_a.name),
                entity_b=RelationEnd(junction.side_b.name, junction.reciprocal_b.name),
                junction=junction.name,
                junction_field_a=field_a,
                junction_field_b=field_b,
            )
        )
    return ManyToManyOutcome(tuple(relationships), tuple(skipped))


def classify_one_to_many(
    graph: SchemaGraph, junction_names: AbstractSet[str]
) -> Tuple[OneToManyRelationship, ...]:
    """
    Pairs list object fields with their singular reciprocal.

    The entity declaring the list is the "one" side.
    """

    relationships: List[OneToManyRelationship] = []
    seen: Set[Tuple[str, str, str, str]] = set()
    for entity in graph:
        for field in entity.fields:
            if not field.is_object or not field.is_list:
                continue
            related = graph.get(field.type)
            if related is None:
                logger.debug(
                    "{}.{} references unknown entity {}; ignored",
                    entity.name,
                    field.name,
                    field.type,
                )
                continue

            reciprocal = find_reciprocal_field(entity, field, related, is_list=False)
            if reciprocal is None:
                logger.debug(
                    "{}.{} has no singular reciprocal on {}; ignored",
                    entity.name,
                    field.name,
                    related.name,
                )
                continue
            if entity.name in junction_names or related.name in junction_names:
                continue

            relationship = OneToManyRelationship(
                one=RelationEnd(entity.name, field.name),
                many=RelationEnd(related.name, reciprocal.name),
            )
            if relationship.key in seen:
                continue
            seen.add(relationship.key)
            relationships.append(relationship)
    return tuple(relationships)


def classify_one_to_one(
    graph: SchemaGraph, junction_names: AbstractSet[str]
) -> Tuple[OneToOneRelationship, ...]:
    """
    Pairs singular object fields with a singular reciprocal.

    Both sides of a relation are visited; the first visited side becomes
    ``table_one``. A field joins at most one pair, so when relation names are
    absent a reciprocal already claimed by another field is not reused.
    """

    relationships: List[OneToOneRelationship] = []
    paired: Set[Tuple[str, str]] = set()
    for entity in graph:
        for field in entity.fields:
            if not field.is_object or field.is_list:
                continue
            related = graph.get(field.type)
            if related is None:
                logger.debug(
                    "{}.{} references unknown entity {}; ignored",
                    entity.name,
                    field.name,
                    field.type,
                )
                continue

            reciprocal = find_reciprocal_field(entity, field, related, is_list=False)
            if reciprocal is None:
                continue
            if entity.name in junction_names or related.name in junction_names:
                continue

            own_end = (entity.name, field.name)
            other_end = (related.name, reciprocal.name)
            if own_end in paired or other_end in paired:
                continue
            paired.update((own_end, other_end))
            relationships.append(
                OneToOneRelationship(
                    table_one=RelationEnd(*own_end),
                    table_two=RelationEnd(*other_end),
                )
            )
    return tuple(relationships)

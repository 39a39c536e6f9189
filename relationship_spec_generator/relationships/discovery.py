from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Tuple, Union

import pandas as pd
from loguru import logger

from relationship_spec_generator.data_processing.data_types import SchemaGraph
from relationship_spec_generator.relationships.classifiers import (
    classify_many_to_many,
    classify_one_to_many,
    classify_one_to_one,
)
from relationship_spec_generator.relationships.junction import (
    JunctionFieldMatcher,
    detect_junction_tables,
    match_junction_field,
)
from relationship_spec_generator.relationships.models import (
    JunctionTable,
    ManyToManyRelationship,
    OneToManyRelationship,
    OneToOneRelationship,
    RelationshipDescriptor,
    RelationshipKind,
)
from relationship_spec_generator.schema_utils.loaders import (
    schema_graph_from_dataframe,
    schema_graph_from_dmmf,
)

RelationshipRegistry = Dict[str, Tuple[RelationshipDescriptor, ...]]


@dataclass
class RelationshipSummary:
    total_entities: int
    total_fields: int
    junction_tables: int
    many_to_many: int
    one_to_many: int
    one_to_one: int
    skipped_junctions: int = 0
    duplicates_suppressed: int = 0
    processing_time_ms: int = 0
    notes: Optional[str] = None


@dataclass
class RelationshipInferenceResult:
    junction_tables: Tuple[JunctionTable, ...]
    many_to_many: Tuple[ManyToManyRelationship, ...]
    one_to_many: Tuple[OneToManyRelationship, ...]
    one_to_one: Tuple[OneToOneRelationship, ...]
    registry: RelationshipRegistry
    summary: RelationshipSummary

    @property
    def junction_names(self) -> FrozenSet[str]:
        return frozenset(junction.name for junction in self.junction_tables)

    def relationships_for(self, entity_name: str) -> Tuple[RelationshipDescriptor, ...]:
        return self.registry.get(entity_name, ())


def _descriptors_for_many_to_many(
    relationship: ManyToManyRelationship,
) -> List[RelationshipDescriptor]:
    descriptors = []
    for directed in (relationship, relationship.mirrored()):
        descriptors.append(
            RelationshipDescriptor(
                entity=directed.entity_a.entity,
                kind=RelationshipKind.MANY_TO_MANY,
                related_entity=directed.entity_b.entity,
                field=directed.entity_a.field,
                related_field=directed.entity_b.field,
                via=directed.junction,
            )
        )
    return descriptors


def _descriptors_for_one_to_many(
    relationship: OneToManyRelationship,
) -> List[RelationshipDescriptor]:
    one, many = relationship.one, relationship.many
    return [
        RelationshipDescriptor(
            entity=many.entity,
            kind=RelationshipKind.MANY_TO_ONE,
            related_entity=one.entity,
            field=many.field,
            related_field=one.field,
        ),
        RelationshipDescriptor(
            entity=one.entity,
            kind=RelationshipKind.ONE_TO_MANY,
            related_entity=many.entity,
            field=one.field,
            related_field=many.field,
        ),
    ]


def _descriptors_for_one_to_one(
    relationship: OneToOneRelationship,
) -> List[RelationshipDescriptor]:
    first, second = relationship.table_one, relationship.table_two
    return [
        RelationshipDescriptor(
            entity=first.entity,
            kind=RelationshipKind.ONE_TO_ONE,
            related_entity=second.entity,
            field=first.field,
            related_field=second.field,
        ),
        RelationshipDescriptor(
            entity=second.entity,
            kind=RelationshipKind.ONE_TO_ONE,
            related_entity=first.entity,
            field=second.field,
            related_field=first.field,
        ),
    ]


def assemble_registry(
    many_to_many: Sequence[ManyToManyRelationship],
    one_to_many: Sequence[OneToManyRelationship],
    one_to_one: Sequence[OneToOneRelationship],
) -> Tuple[RelationshipRegistry, int]:
    """
    Merges classifier outputs into per-entity outgoing relationships.

    Entries keep insertion order (many-to-many, one-to-many, one-to-one).
    Returns the registry and the number of suppressed duplicates.
    """

    buckets: Dict[str, List[RelationshipDescriptor]] = {}
    seen: Set[Tuple[str, RelationshipKind, str, str]] = set()
    duplicates = 0

    candidates: List[RelationshipDescriptor] = []
    for relationship in many_to_many:
        candidates.extend(_descriptors_for_many_to_many(relationship))
    for relationship in one_to_many:
        candidates.extend(_descriptors_for_one_to_many(relationship))
    for relationship in one_to_one:
        candidates.extend(_descriptors_for_one_to_one(relationship))

    for descriptor in candidates:
        if descriptor.key in seen:
            duplicates += 1
            logger.debug("Suppressed duplicate relationship {}", descriptor.key)
            continue
        seen.add(descriptor.key)
        buckets.setdefault(descriptor.entity, []).append(descriptor)

    registry = {entity: tuple(descriptors) for entity, descriptors in buckets.items()}
    return registry, duplicates


def infer_relationships(
    graph: SchemaGraph,
    *,
    field_matcher: JunctionFieldMatcher = match_junction_field,
) -> RelationshipInferenceResult:
    """
    Classifies every relationship in ``graph``.

    Junction tables are detected first; the remaining stages exclude them.
    """

    start = time.perf_counter()

    junctions = detect_junction_tables(graph)
    junction_names = frozenset(junction.name for junction in junctions)

    many_to_many, skipped = classify_many_to_many(junctions, field_matcher=field_matcher)
    one_to_many = classify_one_to_many(graph, junction_names)
    one_to_one = classify_one_to_one(graph, junction_names)
    registry, duplicates = assemble_registry(many_to_many, one_to_many, one_to_one)

    end = time.perf_counter()

    notes: Optional[str] = None
    if skipped:
        notes = f"Skipped junction tables with unresolved key fields: {', '.join(skipped)}."

    summary = RelationshipSummary(
        total_entities=len(graph),
        total_fields=graph.total_fields,
        junction_tables=len(junctions),
        many_to_many=len(many_to_many),
        one_to_many=len(one_to_many),
        one_to_one=len(one_to_one),
        skipped_junctions=len(skipped),
        duplicates_suppressed=duplicates,
        processing_time_ms=int((end - start) * 1000),
        notes=notes,
    )
    logger.info(
        "Classified {} entities: {} junction tables, {} many-to-many, {} one-to-many, {} one-to-one",
        summary.total_entities,
        summary.junction_tables,
        summary.many_to_many,
        summary.one_to_many,
        summary.one_to_one,
    )

    return RelationshipInferenceResult(
        junction_tables=junctions,
        many_to_many=many_to_many,
        one_to_many=one_to_many,
        one_to_one=one_to_one,
        registry=registry,
        summary=summary,
    )


def infer_relationships_from_dmmf(
    document: Union[Mapping[str, Any], Sequence[Any]],
    *,
    field_matcher: JunctionFieldMatcher = match_junction_field,
) -> RelationshipInferenceResult:
    """Run relationship inference on Prisma DMMF output."""

    graph = schema_graph_from_dmmf(document)
    return infer_relationships(graph, field_matcher=field_matcher)


def infer_relationships_from_dataframe(
    fields_df: pd.DataFrame,
    *,
    field_matcher: JunctionFieldMatcher = match_junction_field,
) -> RelationshipInferenceResult:
    """Run relationship inference on a flat field listing."""

    if fields_df.empty:
        logger.warning("No field metadata supplied; nothing to classify")

    graph = schema_graph_from_dataframe(fields_df)
    return infer_relationships(graph, field_matcher=field_matcher)

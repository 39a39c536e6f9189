"""
Markdown report of entity relationships.

Consumes the schema specification document (``manyToMany``, ``oneToMany``,
``oneToOne``) and renders one table per entity followed by a section per
junction table. Junction tables never get an entity section of their own.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import inflect

from relationship_spec_generator.relationships.models import RelationshipKind

_inflector = inflect.engine()

_TABLE_HEADER = (
    "| Entity 1 | Relationship | Entity 2 | Details |\n"
    "|----------|--------------|----------|---------|\n"
)
_JUNCTION_HEADER = (
    "| Entity 1 | Field 1 | Entity 2 | Field 2 |\n"
    "|----------|---------|----------|---------|\n"
)


def capitalize_first_letter(value: str) -> str:
    if not value:
        return ""
    return value[0].upper() + value[1:]


def pluralize(word: str) -> str:
    """Plural form of ``word``; words already plural are returned unchanged."""

    if not word:
        return ""
    # inflect treats capitalized words as proper nouns
    lowered = word.lower()
    singular = _inflector.singular_noun(lowered)
    if singular and _inflector.plural_noun(singular) == lowered:
        return word
    return _restore_case(word, _inflector.plural_noun(lowered))


def _restore_case(original: str, plural: str) -> str:
    shared = 0
    for original_char, plural_char in zip(original.lower(), plural):
        if original_char != plural_char:
            break
        shared += 1
    return original[:shared] + plural[shared:]


def _add_row(
    rows: Dict[str, List[Dict[str, str]]],
    entity: str,
    kind: RelationshipKind,
    related: str,
    details: str,
) -> None:
    rows.setdefault(entity, []).append(
        {"entity1": entity, "relationship": kind.value, "entity2": related, "details": details}
    )


def _collect_entity_rows(document: Mapping[str, Any]) -> Dict[str, List[Dict[str, str]]]:
    many_to_many = document.get("manyToMany", [])
    junction_names = {relation["junctionTable"]["name"] for relation in many_to_many}
    rows: Dict[str, List[Dict[str, str]]] = {}

    for relation in document.get("oneToMany", {}).get("manyToOne", []):
        many = capitalize_first_letter(relation["many"]["name"])
        one = capitalize_first_letter(relation["one"]["name"])
        one_field = relation["one"]["field"]
        if many in junction_names or one in junction_names:
            continue
        _add_row(
            rows, many, RelationshipKind.MANY_TO_ONE, one, f"{pluralize(many)} belong to a {one}"
        )
        _add_row(
            rows,
            one,
            RelationshipKind.ONE_TO_MANY,
            many,
            f"{one} has many {capitalize_first_letter(pluralize(one_field))}",
        )

    for relation in document.get("oneToOne", []):
        table_one = capitalize_first_letter(relation["table_one"]["name"])
        table_two = capitalize_first_letter(relation["table_two"]["name"])
        if table_one in junction_names or table_two in junction_names:
            continue
        _add_row(
            rows,
            table_one,
            RelationshipKind.ONE_TO_ONE,
            table_two,
            f"{table_one} has one {capitalize_first_letter(relation['table_one']['field'])}",
        )
        _add_row(
            rows,
            table_two,
            RelationshipKind.ONE_TO_ONE,
            table_one,
            f"{table_two} has one {capitalize_first_letter(relation['table_two']['field'])}",
        )

    for relation in many_to_many:
        first, second = relation["relationTable"]
        entity1 = capitalize_first_letter(first["name"])
        entity2 = capitalize_first_letter(second["name"])
        junction = relation["junctionTable"]["name"]
        if entity1 in junction_names or entity2 in junction_names:
            continue
        _add_row(
            rows,
            entity1,
            RelationshipKind.MANY_TO_MANY,
            entity2,
            f"{entity1} has many {pluralize(entity2)} via {junction}",
        )
        _add_row(
            rows,
            entity2,
            RelationshipKind.MANY_TO_MANY,
            entity1,
            f"{entity2} has many {pluralize(entity1)} via {junction}",
        )

    return rows


def _ordered_entities(names: List[str], prioritized_entity: Optional[str]) -> List[str]:
    ordered = sorted(names, key=str.lower)
    if prioritized_entity and prioritized_entity in ordered:
        ordered.remove(prioritized_entity)
        ordered.insert(0, prioritized_entity)
    return ordered


def _render_junction(relation: Mapping[str, Any]) -> str:
    junction = relation["junctionTable"]
    first, second = relation["relationTable"]
    entity1 = capitalize_first_letter(first["name"])
    entity2 = capitalize_first_letter(second["name"])
    field1 = junction.get(f"{first['name']}Field")
    field2 = junction.get(f"{second['name']}Field")

    return (
        f"## Junction Table: [{junction['name']}]\n"
        + _JUNCTION_HEADER
        + f"| {entity1} | {field1} | {entity2} | {field2} |\n\n"
        + "### Relationships:\n"
        + f"- **{entity1}** has many **{pluralize(second['name'])}** via **{junction['name']}**.\n"
        + f"- **{entity2}** has many **{pluralize(first['name'])}** via **{junction['name']}**.\n\n"
    )


def generate_relationships_markdown(
    document: Mapping[str, Any], *, prioritized_entity: Optional[str] = "User"
) -> str:
    """
    Renders the relationship sections of a schema specification document.

    Entity sections are sorted alphabetically with ``prioritized_entity``
    pinned first; junction sections are sorted by junction name.
    """

    rows = _collect_entity_rows(document)

    sections = ["# Entity Relationships\n\n"]
    for entity in _ordered_entities(list(rows), prioritized_entity):
        sections.append(f"## Relationships for [{entity}]\n")
        sections.append(_TABLE_HEADER)
        for row in rows[entity]:
            sections.append(
                f"| {row['entity1']} | {row['relationship']} | {row['entity2']} | {row['details']} |\n"
            )
        sections.append("\n")

    many_to_many = document.get("manyToMany", [])
    if many_to_many:
        sections.append("# Junction Tables\n\n")
        for relation in sorted(many_to_many, key=lambda item: item["junctionTable"]["name"]):
            sections.append(_render_junction(relation))

    return "".join(sections)

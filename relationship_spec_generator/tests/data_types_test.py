import pytest

from relationship_spec_generator.data_processing.data_types import (
    AutoincrementDefault,
    Entity,
    Field,
    FieldKind,
    FunctionDefault,
    LiteralDefault,
    MalformedSchemaError,
    NowDefault,
    SchemaGraph,
    parse_default,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        ({"name": "now", "args": []}, NowDefault()),
        ({"name": "autoincrement", "args": []}, AutoincrementDefault()),
        ({"kind": "now"}, NowDefault()),
        ({"kind": "literal", "value": "draft"}, LiteralDefault("draft")),
        ({"name": "uuid", "args": [4]}, FunctionDefault(name="uuid", args=(4,))),
        ("now()", NowDefault()),
        ("pending", LiteralDefault("pending")),
        (False, LiteralDefault(False)),
        (0, LiteralDefault(0)),
    ],
)
def test_parse_default(raw, expected):
    assert parse_default(raw) == expected


def test_parse_default_rejects_nameless_function():
    with pytest.raises(MalformedSchemaError):
        parse_default({"args": []})


def test_schema_graph_lookup_preserves_order():
    graph = SchemaGraph(
        entities=(
            Entity(name="User", fields=(Field(name="id", kind=FieldKind.SCALAR, type="Int"),)),
            Entity(name="Post"),
        )
    )

    assert [entity.name for entity in graph] == ["User", "Post"]
    assert "Post" in graph
    assert graph.get("Comment") is None
    assert graph.total_fields == 1


def test_schema_graph_rejects_duplicate_names():
    with pytest.raises(MalformedSchemaError):
        SchemaGraph(entities=(Entity(name="User"), Entity(name="User")))


def test_entity_field_partitions():
    entity = Entity(
        name="Post",
        fields=(
            Field(name="id", kind=FieldKind.SCALAR, type="Int"),
            Field(name="author", kind=FieldKind.OBJECT, type="User"),
            Field(name="status", kind=FieldKind.ENUM, type="Status"),
        ),
    )

    assert [f.name for f in entity.object_fields()] == ["author"]
    assert [f.name for f in entity.scalar_fields()] == ["id"]

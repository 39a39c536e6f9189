from __future__ import annotations

import json
from typing import Any, Dict, List

import pandas as pd
import pytest

from relationship_spec_generator.data_processing.data_types import (
    FieldKind,
    MalformedSchemaError,
    NowDefault,
)
from relationship_spec_generator.relationships.discovery import (
    infer_relationships_from_dataframe,
)
from relationship_spec_generator.schema_utils.loaders import (
    load_dmmf_file,
    schema_graph_from_dataframe,
    schema_graph_from_dmmf,
)


def _models() -> List[Dict[str, Any]]:
    return [
        {
            "name": "User",
            "dbName": "users",
            "fields": [
                {"name": "id", "kind": "scalar", "type": "Int", "isId": True},
                {
                    "name": "posts",
                    "kind": "object",
                    "type": "Post",
                    "isList": True,
                    "relationName": "PostToUser",
                    "relationFromFields": [],
                    "relationToFields": [],
                },
            ],
        },
        {
            "name": "Post",
            "fields": [
                {"name": "id", "kind": "scalar", "type": "Int", "isId": True},
                {"name": "authorId", "kind": "scalar", "type": "Int"},
                {
                    "name": "createdAt",
                    "kind": "scalar",
                    "type": "DateTime",
                    "hasDefaultValue": True,
                    "default": {"name": "now", "args": []},
                },
                {
                    "name": "author",
                    "kind": "object",
                    "type": "User",
                    "relationName": "PostToUser",
                    "relationFromFields": ["authorId"],
                    "relationToFields": ["id"],
                },
            ],
        },
    ]


@pytest.mark.parametrize(
    "wrap",
    [
        lambda models: {"datamodel": {"models": models, "enums": []}},
        lambda models: {"models": models},
        lambda models: models,
    ],
)
def test_schema_graph_from_dmmf_accepts_document_shapes(wrap):
    graph = schema_graph_from_dmmf(wrap(_models()))

    assert [entity.name for entity in graph] == ["User", "Post"]
    assert graph.get("User").db_name == "users"
    author = graph.get("Post").fields[3]
    assert author.kind is FieldKind.OBJECT
    assert author.relation_from_fields == ("authorId",)
    assert author.references == ("id",)
    assert graph.get("User").fields[1].references is None
    assert graph.get("Post").fields[2].default == NowDefault()


@pytest.mark.parametrize(
    "payload",
    [
        [{"fields": []}],
        [{"name": "User"}],
        [{"name": "User", "fields": [{"kind": "scalar", "type": "Int"}]}],
        [{"name": "User", "fields": [{"name": "id", "type": "Int"}]}],
        [{"name": "User", "fields": [{"name": "id", "kind": "relation", "type": "Int"}]}],
        [{"name": "User", "fields": ["id"]}],
        ["User"],
        "User",
    ],
)
def test_schema_graph_from_dmmf_rejects_malformed_input(payload):
    with pytest.raises(MalformedSchemaError):
        schema_graph_from_dmmf(payload)


def test_load_dmmf_file(tmp_path):
    path = tmp_path / "dmmf.json"
    path.write_text(json.dumps({"datamodel": {"models": _models()}}), encoding="utf-8")

    graph = load_dmmf_file(path)

    assert len(graph) == 2


def _fields_df() -> pd.DataFrame:
    records = [
        {"MODEL_NAME": "Department", "FIELD_NAME": "id", "KIND": "scalar", "TYPE": "Int", "IS_ID": True},
        {
            "MODEL_NAME": "Department",
            "FIELD_NAME": "employees",
            "KIND": "object",
            "TYPE": "Employee",
            "IS_LIST": True,
        },
        {"MODEL_NAME": "Employee", "FIELD_NAME": "id", "KIND": "scalar", "TYPE": "Int", "IS_ID": True},
        {
            "MODEL_NAME": "Employee",
            "FIELD_NAME": "department",
            "KIND": "object",
            "TYPE": "Department",
            "IS_LIST": False,
            "REFERENCES": "id",
        },
    ]
    return pd.DataFrame.from_records(records)


def test_schema_graph_from_dataframe_groups_rows_by_model():
    graph = schema_graph_from_dataframe(_fields_df())

    assert [entity.name for entity in graph] == ["Department", "Employee"]
    department = graph.get("Employee").fields[1]
    assert department.references == ("id",)
    assert department.relation_name is None
    assert graph.get("Department").fields[1].is_list


def test_schema_graph_from_dataframe_requires_columns():
    with pytest.raises(MalformedSchemaError):
        schema_graph_from_dataframe(pd.DataFrame({"MODEL_NAME": ["User"], "FIELD_NAME": ["id"]}))


def test_infer_relationships_from_dataframe():
    result = infer_relationships_from_dataframe(_fields_df())

    assert [rel.key for rel in result.one_to_many] == [
        ("Department", "employees", "Employee", "department")
    ]


def test_infer_relationships_from_empty_dataframe():
    result = infer_relationships_from_dataframe(pd.DataFrame())

    assert result.registry == {}
    assert result.summary.total_entities == 0


@pytest.mark.parametrize("missing", [None, "  "])
def test_schema_graph_from_dataframe_rejects_rows_without_model_name(missing):
    fields_df = pd.DataFrame(
        {
            "MODEL_NAME": ["User", missing],
            "FIELD_NAME": ["id", "email"],
            "KIND": ["scalar", "scalar"],
            "TYPE": ["Int", "String"],
        }
    )

    with pytest.raises(MalformedSchemaError):
        schema_graph_from_dataframe(fields_df)

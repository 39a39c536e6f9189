from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd
from loguru import logger

from relationship_spec_generator.data_processing.data_types import (
    Entity,
    Field,
    FieldKind,
    MalformedSchemaError,
    SchemaGraph,
    parse_default,
)

_MODEL_NAME_COL = "MODEL_NAME"
_DB_NAME_COL = "DB_NAME"
_FIELD_NAME_COL = "FIELD_NAME"
_KIND_COL = "KIND"
_TYPE_COL = "TYPE"
_IS_LIST_COL = "IS_LIST"
_IS_REQUIRED_COL = "IS_REQUIRED"
_IS_ID_COL = "IS_ID"
_IS_UNIQUE_COL = "IS_UNIQUE"
_RELATION_NAME_COL = "RELATION_NAME"
_RELATION_FROM_FIELDS_COL = "RELATION_FROM_FIELDS"
_REFERENCES_COL = "REFERENCES"
_HAS_DEFAULT_VALUE_COL = "HAS_DEFAULT_VALUE"
_DEFAULT_COL = "DEFAULT"
_IS_UPDATED_AT_COL = "IS_UPDATED_AT"

_REQUIRED_COLUMNS = (_MODEL_NAME_COL, _FIELD_NAME_COL, _KIND_COL, _TYPE_COL)


def _coerce_kind(value: Any, entity_name: str, field_name: str) -> FieldKind:
    if isinstance(value, FieldKind):
        return value
    try:
        return FieldKind(str(value).strip().lower())
    except ValueError:
        raise MalformedSchemaError(
            f"Field '{entity_name}.{field_name}' has unknown kind {value!r}"
        ) from None


def _coerce_name_list(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    if isinstance(value, str):
        parts = [part.strip() for part in value.split(",") if part.strip()]
        return tuple(parts) or None
    if isinstance(value, Sequence):
        return tuple(str(part) for part in value) or None
    return None


def _require(entry: Mapping[str, Any], key: str, context: str) -> Any:
    value = entry.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MalformedSchemaError(f"{context} is missing required attribute '{key}'")
    return value


def _field_from_mapping(entity_name: str, entry: Mapping[str, Any]) -> Field:
    if not isinstance(entry, Mapping):
        raise MalformedSchemaError(
            f"Field definition for model '{entity_name}' must be a mapping"
        )

    field_name = str(_require(entry, "name", f"A field of model '{entity_name}'")).strip()
    context = f"Field '{entity_name}.{field_name}'"
    kind = _coerce_kind(_require(entry, "kind", context), entity_name, field_name)
    field_type = str(_require(entry, "type", context)).strip()

    references = entry.get("relationToFields")
    if references is None:
        references = entry.get("references")

    return Field(
        name=field_name,
        kind=kind,
        type=field_type,
        is_list=bool(entry.get("isList", False)),
        is_required=bool(entry.get("isRequired", False)),
        is_id=bool(entry.get("isId", False)),
        is_unique=bool(entry.get("isUnique", False)),
        relation_name=entry.get("relationName") or None,
        relation_from_fields=_coerce_name_list(entry.get("relationFromFields")),
        references=_coerce_name_list(references),
        has_default_value=bool(entry.get("hasDefaultValue", False)),
        default=parse_default(entry.get("default", entry.get("defaultValue"))),
        is_updated_at=bool(entry.get("isUpdatedAt", False)),
    )


def _extract_models(document: Any) -> Sequence[Any]:
    if isinstance(document, Mapping):
        if "datamodel" in document:
            document = document["datamodel"]
        if isinstance(document, Mapping):
            document = document.get("models")
    if not isinstance(document, Sequence) or isinstance(document, (str, bytes)):
        raise MalformedSchemaError(
            "Expected a DMMF document, a datamodel mapping or a list of models"
        )
    return document


def schema_graph_from_dmmf(document: Union[Mapping[str, Any], Sequence[Any]]) -> SchemaGraph:
    """
    Builds a SchemaGraph from Prisma DMMF output.

    Accepts the full ``getDMMF`` result, its ``datamodel`` member, or the bare
    list of models. Structural violations raise MalformedSchemaError.
    """

    entities: List[Entity] = []
    for model_index, model in enumerate(_extract_models(document)):
        if not isinstance(model, Mapping):
            raise MalformedSchemaError(f"Model #{model_index} must be a mapping")

        model_name = str(_require(model, "name", f"Model #{model_index}")).strip()
        fields_payload = model.get("fields")
        if not isinstance(fields_payload, Sequence) or isinstance(fields_payload, (str, bytes)):
            raise MalformedSchemaError(f"Model '{model_name}' must include a 'fields' list")

        entities.append(
            Entity(
                name=model_name,
                fields=tuple(_field_from_mapping(model_name, entry) for entry in fields_payload),
                db_name=model.get("dbName") or None,
            )
        )

    logger.debug("Loaded {} models from DMMF payload", len(entities))
    return SchemaGraph(entities=tuple(entities))


def load_dmmf_file(path: Union[str, Path]) -> SchemaGraph:
    """Reads a DMMF JSON file and returns its SchemaGraph."""

    dmmf_path = Path(path)
    with dmmf_path.open("r", encoding="utf-8") as handle:
        document = json.load(handle)
    return schema_graph_from_dmmf(document)


def _cell(row: Mapping[str, Any], column: str) -> Any:
    value = row.get(column)
    if isinstance(value, (list, tuple, dict)):
        return value
    if value is None or pd.isna(value):
        return None
    return value


def _cell_as_bool(row: Mapping[str, Any], column: str) -> bool:
    value = _cell(row, column)
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "y"}
    return bool(value) if value is not None else False


def schema_graph_from_dataframe(fields_df: pd.DataFrame) -> SchemaGraph:
    """
    Builds a SchemaGraph from a flat field listing, one row per field.

    Models keep the order of their first appearance; fields keep row order.
    """

    if fields_df.empty:
        return SchemaGraph()

    columns_df = fields_df.copy()
    columns_df.columns = [str(col).upper() for col in columns_df.columns]
    missing = [col for col in _REQUIRED_COLUMNS if col not in columns_df.columns]
    if missing:
        raise MalformedSchemaError(
            f"Expected columns {missing} in field metadata dataframe."
        )

    model_names = columns_df[_MODEL_NAME_COL]
    blank = model_names.isna() | (model_names.astype(str).str.strip() == "")
    if blank.any():
        rows = columns_df.index[blank].tolist()
        raise MalformedSchemaError(f"Rows {rows} are missing required attribute '{_MODEL_NAME_COL}'")

    model_order = columns_df[_MODEL_NAME_COL].astype(str).drop_duplicates().tolist()

    entities: List[Entity] = []
    for model_name in model_order:
        model_df = columns_df[columns_df[_MODEL_NAME_COL].astype(str) == model_name]
        fields: List[Field] = []
        db_name: Optional[str] = None
        for row in model_df.to_dict(orient="records"):
            db_name = db_name or _cell(row, _DB_NAME_COL)
            payload: Dict[str, Any] = {
                "name": _cell(row, _FIELD_NAME_COL),
                "kind": _cell(row, _KIND_COL),
                "type": _cell(row, _TYPE_COL),
                "isList": _cell_as_bool(row, _IS_LIST_COL),
                "isRequired": _cell_as_bool(row, _IS_REQUIRED_COL),
                "isId": _cell_as_bool(row, _IS_ID_COL),
                "isUnique": _cell_as_bool(row, _IS_UNIQUE_COL),
                "relationName": _cell(row, _RELATION_NAME_COL),
                "relationFromFields": _cell(row, _RELATION_FROM_FIELDS_COL),
                "references": _cell(row, _REFERENCES_COL),
                "hasDefaultValue": _cell_as_bool(row, _HAS_DEFAULT_VALUE_COL),
                "default": _cell(row, _DEFAULT_COL),
                "isUpdatedAt": _cell_as_bool(row, _IS_UPDATED_AT_COL),
            }
            fields.append(_field_from_mapping(model_name, payload))
        entities.append(Entity(name=model_name, fields=tuple(fields), db_name=db_name))

    logger.debug(
        "Loaded {} models ({} fields) from dataframe", len(entities), len(columns_df.index)
    )
    return SchemaGraph(entities=tuple(entities))

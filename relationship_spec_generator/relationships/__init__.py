"""Public APIs for relationship inference."""

from .discovery import (
    RelationshipInferenceResult,
    RelationshipSummary,
    infer_relationships,
    infer_relationships_from_dataframe,
    infer_relationships_from_dmmf,
)
from .junction import match_junction_field
from .models import RelationshipKind
from .schema_spec import build_schema_spec, write_schema_spec

__all__ = [
    "RelationshipInferenceResult",
    "RelationshipKind",
    "RelationshipSummary",
    "build_schema_spec",
    "infer_relationships",
    "infer_relationships_from_dataframe",
    "infer_relationships_from_dmmf",
    "match_junction_field",
    "write_schema_spec",
]

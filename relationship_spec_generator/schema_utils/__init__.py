"""Input adapters and runtime configuration."""

from .loaders import load_dmmf_file, schema_graph_from_dataframe, schema_graph_from_dmmf

__all__ = [
    "load_dmmf_file",
    "schema_graph_from_dataframe",
    "schema_graph_from_dmmf",
]

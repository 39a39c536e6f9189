"""Typer CLI application."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from relationship_spec_generator.data_processing.data_types import MalformedSchemaError
from relationship_spec_generator.relationships.discovery import infer_relationships
from relationship_spec_generator.relationships.schema_spec import (
    build_schema_spec,
    write_schema_spec,
)
from relationship_spec_generator.rendering.markdown import generate_relationships_markdown
from relationship_spec_generator.schema_utils import env_vars
from relationship_spec_generator.schema_utils.loaders import load_dmmf_file

app = typer.Typer(help="Relationship inference and schema specs for Prisma data models")


def configure_logging(level: str = env_vars.LOG_LEVEL) -> None:
    level = level.upper()
    # unknown level names raise ValueError here, before existing sinks are removed
    logger.level(level)
    logger.remove()
    logger.add(sys.stderr, level=level)


@app.callback()
def main(
    log_level: str = typer.Option(env_vars.LOG_LEVEL, help="Log level for stderr output"),
) -> None:
    try:
        configure_logging(log_level)
    except ValueError as exc:
        typer.echo(f"Error: invalid log level {log_level}: {exc}", err=True)
        raise typer.Exit(1)


@app.command()
def spec(dmmf_file: Path, output_file: Path):
    """
    Classify relationships and write the schema specification JSON.

    Args:
        dmmf_file: Path to Prisma DMMF JSON (``getDMMF`` output)
        output_file: Path of the specification JSON to write
    """
    if not dmmf_file.exists():
        typer.echo(f"Error: input file does not exist at path {dmmf_file}", err=True)
        raise typer.Exit(1)

    try:
        graph = load_dmmf_file(dmmf_file)
    except (json.JSONDecodeError, MalformedSchemaError) as exc:
        typer.echo(f"Error: failed to load {dmmf_file}: {exc}", err=True)
        raise typer.Exit(1)

    result = infer_relationships(graph)
    if result.summary.notes:
        typer.echo(result.summary.notes, err=True)

    write_schema_spec(build_schema_spec(graph, result), output_file)
    typer.echo(f"✓ Schema specification written to {output_file}")


@app.command()
def markdown(
    spec_file: Path,
    output_file: Path,
    priority: Optional[str] = typer.Option(
        None, help="Entity pinned first in the report (defaults to RELSPEC_PRIORITY_ENTITY)"
    ),
):
    """
    Render a schema specification JSON as a Markdown relationship report.

    Args:
        spec_file: Path to a specification JSON produced by ``spec``
        output_file: Path of the Markdown file to write
    """
    if not spec_file.exists():
        typer.echo(f"Error: input file does not exist at path {spec_file}", err=True)
        raise typer.Exit(1)

    try:
        document = json.loads(spec_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"Error: failed to parse {spec_file}: {exc}", err=True)
        raise typer.Exit(1)

    options = env_vars.build_renderer_config()
    if priority is not None:
        options["prioritized_entity"] = priority or None

    content = generate_relationships_markdown(document, **options)

    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(content, encoding="utf-8")
    typer.echo(f"✓ Markdown written to {output_file}")


if __name__ == "__main__":
    app()

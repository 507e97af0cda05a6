"""CLI command for inferring a schema from a CSV file."""

import json
import sys
from pathlib import Path

import click
import yaml

from tablecast.api import infer_file
from tablecast.core.exceptions import TableCastError
from tablecast.core.logging import set_source_name
from tablecast.models.loader import dump_schema


@click.command()
@click.argument("path", type=click.Path())
@click.option(
    "--sample-size",
    default=100,
    show_default=True,
    type=click.IntRange(min=1),
    help="Number of rows to sample",
)
@click.option(
    "--confidence",
    default=1.0,
    show_default=True,
    type=click.FloatRange(min=0, max=1, min_open=True),
    help="Share of sampled values that must cast for a type to win",
)
@click.option("--json", "as_json", is_flag=True, help="Print the schema as JSON instead of YAML")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Write the schema to this file instead of printing it",
)
def infer(path: str, sample_size: int, confidence: float, as_json: bool, output: str | None):
    """Infer a schema document from the first rows of a CSV file.

    Examples:

        tablecast infer people.csv
        tablecast infer people.csv --sample-size 1000 --json
        tablecast infer people.csv --confidence 0.95 -o people.schema.yaml
    """
    set_source_name(Path(path).name)
    try:
        result = infer_file(path, sample_size=sample_size, confidence=confidence)
    except TableCastError as e:
        click.echo(f"✗ Inference failed: {e}", err=True)
        sys.exit(1)

    if output:
        dump_schema(result.schema, output)
        click.echo(
            f"✓ Inferred {len(result.schema.fields)} fields from "
            f"{result.rows_sampled} rows into {output}"
        )
        return

    descriptor = result.schema.to_descriptor()
    if as_json:
        click.echo(json.dumps(descriptor, indent=2))
    else:
        click.echo(yaml.safe_dump(descriptor, sort_keys=False), nl=False)

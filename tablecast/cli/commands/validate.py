"""CLI command for validating a CSV file against a schema."""

import sys
from pathlib import Path

import click

from tablecast.api import validate_file
from tablecast.core.exceptions import TableCastError
from tablecast.core.logging import set_source_name
from tablecast.models.validation_config import HeaderPolicy


@click.command()
@click.argument("path", type=click.Path())
@click.option(
    "--schema",
    "schema_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Schema document (YAML or JSON)",
)
@click.option("--fail-fast", is_flag=True, help="Stop at the first issue")
@click.option(
    "--lenient",
    is_flag=True,
    help="Report missing or extra header columns as warnings instead of errors",
)
def validate(path: str, schema_path: str, fail_fast: bool, lenient: bool):
    """Validate every row of a CSV file against a schema.

    Exits with status 1 if any error is found.

    Examples:

        tablecast validate people.csv --schema people.schema.yaml
        tablecast validate people.csv --schema people.schema.json --fail-fast
    """
    policy = HeaderPolicy.LENIENT if lenient else HeaderPolicy.STRICT
    set_source_name(Path(path).name)
    try:
        report = validate_file(
            path, schema_path, fail_fast=fail_fast, header_policy=policy
        )
    except TableCastError as e:
        click.echo(f"✗ Validation failed: {e}", err=True)
        sys.exit(1)

    for issue in report.warnings:
        click.echo(f"  warning: {issue.message}")
    for issue in report.errors:
        location = f"row {issue.row}" if issue.row is not None else "header"
        click.echo(f"  {location}: [{issue.kind.value}] {issue.message}")

    if report.ok:
        click.echo(f"✓ {report.row_count} rows valid")
        return

    suffix = " (stopped early)" if report.truncated else ""
    click.echo(
        f"✗ {len(report.errors)} errors in {report.invalid_row_count} of "
        f"{report.row_count} rows{suffix}",
        err=True,
    )
    sys.exit(1)

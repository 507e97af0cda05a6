"""CLI command for rewriting a CSV file with its columns reordered."""

import sys
from pathlib import Path

import click

from tablecast.api import reorder_file
from tablecast.core.exceptions import TableCastError
from tablecast.core.logging import set_source_name
from tablecast.models.dialect import CSVDialect
from tablecast.models.validation_config import HeaderPolicy


@click.command()
@click.argument("path", type=click.Path())
@click.argument("output", type=click.Path(dir_okay=False))
@click.option(
    "--header",
    required=True,
    help="Comma-separated column names in output order",
)
@click.option("--lf", is_flag=True, help="End rows with LF instead of CRLF")
@click.option(
    "--lenient",
    is_flag=True,
    help="Drop columns missing from --header and leave unknown ones empty",
)
def reorder(path: str, output: str, header: str, lf: bool, lenient: bool):
    """Rewrite a CSV file with its columns in the order given by --header.

    OUTPUT must be inside the directory of PATH.

    Examples:

        tablecast reorder people.csv sorted.csv --header id,name,email
        tablecast reorder people.csv sorted.csv --header id,name --lenient --lf
    """
    names = [name.strip() for name in header.split(",")]
    dialect = CSVDialect(line_terminator="\n" if lf else "\r\n")
    policy = HeaderPolicy.LENIENT if lenient else HeaderPolicy.STRICT
    set_source_name(Path(path).name)
    try:
        count = reorder_file(
            path, Path(output).absolute(), names, policy=policy, output_dialect=dialect
        )
    except TableCastError as e:
        click.echo(f"✗ Reorder failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Wrote {count} rows to {output}")

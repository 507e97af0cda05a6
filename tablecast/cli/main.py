"""Main CLI entry point for tablecast."""

import click

from tablecast import __version__
from tablecast.cli.commands.infer import infer
from tablecast.cli.commands.reorder import reorder
from tablecast.cli.commands.validate import validate
from tablecast.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Log level (default: WARNING)",
)
@click.option(
    "--json-logs",
    is_flag=True,
    help="Use JSON format for logs",
)
def main(log_level: str, json_logs: bool):
    """tablecast - Typed CSV inference, validation and reordering."""
    configure_logging(level=log_level, json_format=json_logs)


# Register commands
main.add_command(infer)
main.add_command(validate)
main.add_command(reorder)


if __name__ == "__main__":
    main()

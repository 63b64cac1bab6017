"""CLI error handling helpers."""

import click

from tillersync.database.migrations import MigrationError
from tillersync.domain.errors import DomainError
from tillersync.sheets.base import SheetError

# Errors that end a command with a message instead of a traceback
CLI_ERRORS = (DomainError, SheetError, MigrationError, OSError)


def handle_domain_error(ctx: click.Context, error: Exception) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def count_noun(count: int, singular: str, plural: str | None = None) -> str:
    """Return e.g. '1 transaction' or '3 transactions'."""
    if count == 1:
        return f"{count} {singular}"
    return f"{count} {plural or singular + 's'}"


def parse_fields(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated HEADER=VALUE options into a dict keyed by header."""
    fields = {}
    for item in values:
        header, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(
                f"'{item}' is not in HEADER=VALUE form", param_hint="--field"
            )
        fields[header] = value
    return fields

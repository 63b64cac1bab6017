"""Init command."""

import click

from tillersync.cli.error_handling import CLI_ERRORS, handle_domain_error
from tillersync.config import DEFAULT_BACKUP_COPIES, Config
from tillersync.database.factories import create_sqlite_database


@click.command("init")
@click.option(
    "--sheet-url",
    required=True,
    help="URL of the Tiller Google Sheet (or its spreadsheet ID)",
)
@click.option(
    "--backup-copies",
    type=click.IntRange(min=1),
    default=DEFAULT_BACKUP_COPIES,
    show_default=True,
    help="Number of backups of each kind to keep",
)
@click.pass_context
def init(ctx, sheet_url: str, backup_copies: int):
    """Create the home directory, config.json and an empty database."""
    home = ctx.obj["home"]
    try:
        config = Config.create(home, sheet_url, backup_copies=backup_copies)
        db = create_sqlite_database(config.sqlite_path)
        db.connect()
        db.initialize_schema()
        version = db.get_schema_version()
        db.disconnect()
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    click.echo(f"Initialized {home}")
    click.echo(f"Spreadsheet ID: {config.spreadsheet_id}")
    click.echo(f"Database: {config.sqlite_path} (schema version {version})")
    click.echo(f"Place your Google OAuth token at {config.token_file}")


def register_commands(cli):
    """Register init command with main CLI."""
    cli.add_command(init)

"""Main CLI entry point."""

import logging

import click

from tillersync.cli.error_handling import CLI_ERRORS, handle_domain_error
from tillersync.config import MODE_GOOGLE, MODES, Config, resolve_home
from tillersync.database.factories import create_sqlite_database

# Import and register all commands at module level
from tillersync.cli.commands import autocat, category, init_cmd, query, sync, transaction

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--home",
    type=click.Path(file_okay=False),
    help="Home directory holding config.json and the database "
    "(overrides TILLER_HOME environment variable, default ~/tiller)",
    envvar="TILLER_HOME",
)
@click.option(
    "--mode",
    type=click.Choice(MODES),
    default=MODE_GOOGLE,
    show_default=True,
    help="Sync with Google Sheets, or with a seeded in-memory sheet for trying things out",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, home: str | None, mode: str, log_level: str):
    """tillersync - keep a Tiller spreadsheet and a local SQLite database in sync.

    Download the sheet with 'sync down', edit transactions, categories and
    AutoCat rules locally, then write them back with 'sync up'.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["home"] = resolve_home(home)
    ctx.obj["mode"] = mode

    # Open the database only for commands that need an existing setup
    if ctx.invoked_subcommand not in (None, "init"):
        try:
            config = Config.load(ctx.obj["home"])
            db = create_sqlite_database(config.sqlite_path)
            db.connect()
            db.initialize_schema()
        except CLI_ERRORS as e:
            handle_domain_error(ctx, e)
        ctx.obj["config"] = config
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
init_cmd.register_commands(cli)
sync.register_commands(cli)
transaction.register_commands(cli)
category.register_commands(cli)
autocat.register_commands(cli)
query.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()

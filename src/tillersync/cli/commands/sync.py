"""Sync commands."""

import click

from tillersync.backup import Backup
from tillersync.cli.error_handling import CLI_ERRORS, handle_domain_error
from tillersync.domain.sync import FormulasMode, SyncService
from tillersync.sheets.factories import create_sheet


def _sync_service(ctx) -> SyncService:
    config = ctx.obj["config"]
    sheet = ctx.obj.get("sheet") or create_sheet(config, ctx.obj["mode"])
    backup = Backup(config.backups_dir, config.sqlite_path, config.backup_copies)
    return SyncService(ctx.obj["db"], sheet, backup)


@click.group()
def sync_group():
    """Sync with the Tiller spreadsheet."""
    pass


@sync_group.command("down")
@click.pass_context
def sync_down(ctx):
    """Replace local data with the contents of the sheet."""
    try:
        result = _sync_service(ctx).sync_down()
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    click.echo(result.summary)
    for path in result.backups:
        click.echo(f"Backup: {path}")


@sync_group.command("up")
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite the sheet even if it changed since the last sync down",
)
@click.option(
    "--formulas",
    type=click.Choice([mode.value for mode in FormulasMode]),
    default=FormulasMode.UNKNOWN.value,
    show_default=True,
    help="Write formulas back (preserve) or write values only (ignore)",
)
@click.pass_context
def sync_up(ctx, force: bool, formulas: str):
    """Overwrite the sheet with local data."""
    try:
        result = _sync_service(ctx).sync_up(force=force, formulas=FormulasMode(formulas))
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    click.echo(result.summary)
    click.echo(f"Sheet backup: {result.remote_backup_id}")
    for path in result.backups:
        click.echo(f"Backup: {path}")


def register_commands(cli):
    """Register sync commands with main CLI."""
    cli.add_command(sync_group, name="sync")

"""AutoCat rule commands."""

import click

from tillersync.cli.error_handling import (
    CLI_ERRORS,
    count_noun,
    handle_domain_error,
    parse_fields,
)
from tillersync.domain.amount import Amount
from tillersync.domain.autocat import AutoCatService
from tillersync.domain.entities import AutoCat, AutoCatUpdates

_TEXT_OPTIONS = {
    "category": "Category to assign",
    "description": "Description to assign",
    "description_contains": "Match descriptions containing this text",
    "account_contains": "Match accounts containing this text",
    "institution_contains": "Match institutions containing this text",
    "description_equals": "Match this exact description",
    "description_full": "Match this full description",
    "full_description_contains": "Match full descriptions containing this text",
    "amount_contains": "Match amounts containing this text",
}

_AMOUNT_OPTIONS = {
    "amount_min": "Match amounts of at least this value",
    "amount_max": "Match amounts of at most this value",
    "amount_equals": "Match this exact amount",
}


def rule_options(func):
    """Options for every AutoCat column, shared by insert and update."""
    options = [
        click.option(f"--{name.replace('_', '-')}", name, help=help_text)
        for name, help_text in {**_TEXT_OPTIONS, **_AMOUNT_OPTIONS}.items()
    ]
    options.append(
        click.option(
            "--field",
            "fields",
            multiple=True,
            metavar="HEADER=VALUE",
            help="Value for another sheet column (repeatable)",
        )
    )
    for option in reversed(options):
        func = option(func)
    return func


def _amounts(values: dict) -> dict:
    return {
        name: Amount.parse(values[name]) if values[name] is not None else None
        for name in _AMOUNT_OPTIONS
    }


@click.group()
def autocat_group():
    """Manage AutoCat rules."""
    pass


@autocat_group.command("list")
@click.pass_context
def list_autocats(ctx):
    """List AutoCat rules in sheet order."""
    service = AutoCatService(ctx.obj["db"])
    rules = service.list_autocats()
    if not rules:
        click.echo("No AutoCat rules found. Run 'tillersync sync down' first.")
        return

    for rule in rules:
        filters = ", ".join(
            f"{header}={rule.get_with_header(header)}"
            for header in AutoCat.HEADERS
            if header not in ("Category", "Description") and rule.get_with_header(header)
        )
        click.echo(f"{rule.id}: {rule.category or '-'}  <- {filters or '(no filters)'}")


@autocat_group.command("insert")
@rule_options
@click.pass_context
def insert_autocat(ctx, fields, **values):
    """Create a new AutoCat rule."""
    service = AutoCatService(ctx.obj["db"])
    try:
        rule = AutoCat(
            other_fields=parse_fields(fields),
            **{name: values[name] or "" for name in _TEXT_OPTIONS},
            **_amounts(values),
        )
        autocat_id = service.insert_autocat(rule)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)
    click.echo(f"Inserted AutoCat rule {autocat_id}")


@autocat_group.command("update")
@click.argument("autocat_ids", nargs=-1, required=True, type=int)
@rule_options
@click.pass_context
def update_autocats(ctx, autocat_ids, fields, **values):
    """Update one or more AutoCat rules. All are updated or none is."""
    service = AutoCatService(ctx.obj["db"])
    try:
        updates = AutoCatUpdates(
            other_fields=parse_fields(fields),
            **{name: values[name] for name in _TEXT_OPTIONS},
            **_amounts(values),
        )
        updated = service.update_autocats(list(autocat_ids), updates)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated {count_noun(len(updated), 'AutoCat rule')}")


@autocat_group.command("delete")
@click.argument("autocat_ids", nargs=-1, required=True, type=int)
@click.pass_context
def delete_autocats(ctx, autocat_ids):
    """Delete one or more AutoCat rules. All are deleted or none is."""
    service = AutoCatService(ctx.obj["db"])
    try:
        deleted = service.delete_autocats(list(autocat_ids))
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {count_noun(deleted, 'AutoCat rule')}")


def register_commands(cli):
    """Register AutoCat commands with main CLI."""
    cli.add_command(autocat_group, name="autocat")

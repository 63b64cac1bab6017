"""Category management commands."""

import click

from tillersync.cli.error_handling import (
    CLI_ERRORS,
    count_noun,
    handle_domain_error,
    parse_fields,
)
from tillersync.domain.category import CategoryService
from tillersync.domain.entities import CategoryUpdates

_FIELD_OPTION = click.option(
    "--field",
    "fields",
    multiple=True,
    metavar="HEADER=VALUE",
    help="Value for another sheet column (repeatable)",
)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List categories in sheet order."""
    service = CategoryService(ctx.obj["db"])
    categories = service.list_categories()
    if not categories:
        click.echo("No categories found. Run 'tillersync sync down' first.")
        return

    for cat in categories:
        hidden = " (hidden)" if cat.hide_from_reports else ""
        click.echo(f"{cat.category}  [{cat.group or '-'} / {cat.type or '-'}]{hidden}")


@category_group.command("insert")
@click.argument("name")
@click.option("--group", default="", help="Category group")
@click.option("--type", "category_type", default="", help="Type (e.g. Expense, Income, Transfer)")
@click.option("--hide-from-reports", default="", help="'Hide' to hide from reports")
@_FIELD_OPTION
@click.pass_context
def insert_category(ctx, name: str, group: str, category_type: str, hide_from_reports: str, fields):
    """Create a new category."""
    service = CategoryService(ctx.obj["db"])
    try:
        service.insert_category(
            name=name,
            group=group,
            type=category_type,
            hide_from_reports=hide_from_reports,
            other_fields=parse_fields(fields),
        )
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)
    click.echo(f"Inserted category '{name.strip()}'")


@category_group.command("update")
@click.argument("names", nargs=-1, required=True)
@click.option("--name", "new_name", help="Rename the category; references follow")
@click.option("--group", help="Category group")
@click.option("--type", "category_type", help="Type")
@click.option("--hide-from-reports", help="'Hide' to hide from reports")
@_FIELD_OPTION
@click.pass_context
def update_categories(ctx, names, new_name, group, category_type, hide_from_reports, fields):
    """Update one or more categories. All are updated or none is."""
    service = CategoryService(ctx.obj["db"])
    try:
        updates = CategoryUpdates(
            category=new_name,
            group=group,
            type=category_type,
            hide_from_reports=hide_from_reports,
            other_fields=parse_fields(fields),
        )
        updated = service.update_categories(list(names), updates)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    if new_name is not None:
        click.echo(f"Renamed category '{names[0]}' to '{new_name}'")
    else:
        click.echo(f"Updated {count_noun(len(updated), 'category', 'categories')}")


@category_group.command("delete")
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def delete_categories(ctx, names):
    """Delete one or more unused categories. All are deleted or none is."""
    service = CategoryService(ctx.obj["db"])
    try:
        deleted = service.delete_categories(list(names))
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {count_noun(deleted, 'category', 'categories')}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")

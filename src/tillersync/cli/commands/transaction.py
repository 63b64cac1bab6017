"""Transaction commands."""

import click

from tillersync.cli.error_handling import (
    CLI_ERRORS,
    count_noun,
    handle_domain_error,
    parse_fields,
)
from tillersync.domain.amount import Amount
from tillersync.domain.entities import TransactionUpdates
from tillersync.domain.transaction import TransactionService
from tillersync.utils.date_parser import format_sheet_date, parse_date


def _sheet_date(ctx, date_str: str) -> str:
    try:
        return format_sheet_date(parse_date(date_str))
    except ValueError as e:
        handle_domain_error(ctx, e)


def field_options(func):
    """Options shared by insert and update."""
    options = [
        click.option("--description", help="Description"),
        click.option("--account", help="Account name"),
        click.option("--account-number", help="Account number"),
        click.option("--institution", help="Institution"),
        click.option("--category", help="Category name (must exist)"),
        click.option("--note", help="Note"),
        click.option("--tags", help="Tags"),
        click.option(
            "--field",
            "fields",
            multiple=True,
            metavar="HEADER=VALUE",
            help="Value for another sheet column (repeatable)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.pass_context
def list_transactions(ctx):
    """List transactions in sheet order."""
    service = TransactionService(ctx.obj["db"])
    transactions = service.list_transactions()
    if not transactions:
        click.echo("No transactions found. Run 'tillersync sync down' first.")
        return

    for txn in transactions:
        category = f" [{txn.category}]" if txn.category else ""
        click.echo(
            f"{txn.transaction_id}  {txn.date:<10}  {str(txn.amount):>12}  "
            f"{txn.description}{category}"
        )
    click.echo(f"\n{count_noun(len(transactions), 'transaction')}")


@transaction_group.command("insert")
@click.option("--date", "date_str", required=True, help="Date (e.g. 2025-01-15, 1/15/2025, today)")
@click.option("--amount", required=True, help="Amount (e.g. -12.50 or -$1,200.00)")
@field_options
@click.pass_context
def insert_transaction(ctx, date_str: str, amount: str, fields: tuple[str, ...], **values):
    """Insert a new transaction."""
    service = TransactionService(ctx.obj["db"])
    date = _sheet_date(ctx, date_str)
    try:
        transaction_id = service.insert_transaction(
            date=date,
            amount=amount,
            description=values["description"] or "",
            account=values["account"] or "",
            account_number=values["account_number"] or "",
            institution=values["institution"] or "",
            category=values["category"] or "",
            note=values["note"] or "",
            tags=values["tags"] or "",
            other_fields=parse_fields(fields),
        )
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)
    click.echo(f"Inserted transaction {transaction_id}")


@transaction_group.command("update")
@click.argument("transaction_ids", nargs=-1, required=True)
@click.option("--date", "date_str", help="New date")
@click.option("--amount", help="New amount")
@field_options
@click.pass_context
def update_transactions(ctx, transaction_ids: tuple[str, ...], date_str, amount, fields, **values):
    """Update one or more transactions. All are updated or none is."""
    service = TransactionService(ctx.obj["db"])
    try:
        updates = TransactionUpdates(
            date=_sheet_date(ctx, date_str) if date_str else None,
            amount=Amount.parse(amount) if amount is not None else None,
            other_fields=parse_fields(fields),
            **values,
        )
        updated = service.update_transactions(list(transaction_ids), updates)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated {count_noun(len(updated), 'transaction')}")


@transaction_group.command("delete")
@click.argument("transaction_ids", nargs=-1, required=True)
@click.pass_context
def delete_transactions(ctx, transaction_ids: tuple[str, ...]):
    """Delete one or more transactions. All are deleted or none is."""
    service = TransactionService(ctx.obj["db"])
    try:
        deleted = service.delete_transactions(list(transaction_ids))
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {count_noun(deleted, 'transaction')}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")

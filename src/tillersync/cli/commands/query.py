"""Read-only query and schema commands."""

import click

from tillersync.cli.error_handling import CLI_ERRORS, count_noun, handle_domain_error
from tillersync.domain.query import QueryFormat, QueryService


@click.command("query")
@click.argument("sql")
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in QueryFormat]),
    default=QueryFormat.JSON.value,
    show_default=True,
    help="Output as JSON objects, a markdown table, or CSV",
)
@click.pass_context
def query(ctx, sql: str, output_format: str):
    """Run a read-only SQL statement against the local database.

    Statements that would change the database are rejected.

    Examples:
        tillersync query "SELECT category, COUNT(*) FROM transactions GROUP BY category"
        tillersync query --format csv "SELECT * FROM autocat"
    """
    service = QueryService(ctx.obj["db"])
    try:
        output = service.render(sql, QueryFormat(output_format))
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)
    click.echo(output.rstrip("\n"))


@click.command("schema")
@click.option("--json", "as_json", is_flag=True, help="Output the schema as JSON")
@click.pass_context
def schema(ctx, as_json: bool):
    """Show tables, columns, indexes, foreign keys and row counts."""
    service = QueryService(ctx.obj["db"])
    try:
        if as_json:
            click.echo(service.schema_json())
            return
        tables = service.schema()
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    for table in tables:
        click.echo(f"{table.name} ({count_noun(table.row_count, 'row')})")
        for column in table.columns:
            flags = []
            if column.primary_key:
                flags.append("primary key")
            if not column.nullable:
                flags.append("not null")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            click.echo(f"  {column.name} {column.data_type}{suffix}")
        for index in table.indexes:
            unique = "unique " if index.unique else ""
            click.echo(f"  {unique}index {index.name} ({', '.join(index.columns)})")
        for fk in table.foreign_keys:
            click.echo(
                f"  foreign key ({', '.join(fk.columns)}) -> "
                f"{fk.references_table} ({', '.join(fk.references_columns)})"
            )


def register_commands(cli):
    """Register query commands with the main CLI."""
    cli.add_command(query)
    cli.add_command(schema)

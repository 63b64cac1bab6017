"""Read-only access to the local database for ad hoc questions."""

import csv
import enum
import io
import json
from dataclasses import asdict
from typing import Any

from tillersync.database.base import Database
from tillersync.domain.entities import QueryResult, TableInfo


class QueryFormat(str, enum.Enum):
    """How query rows are rendered."""

    JSON = "json"
    TABLE = "table"
    CSV = "csv"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.hex()
    return str(value)


def to_json(result: QueryResult) -> str:
    """Render rows as a JSON array of objects keyed by column name."""
    return json.dumps(result.records(), indent=2, default=_cell)


def to_markdown(result: QueryResult) -> str:
    """Render rows as a markdown table."""
    if not result.columns:
        return ""

    def line(cells):
        escaped = [_cell(c).replace("|", "\\|").replace("\n", " ") for c in cells]
        return "| " + " | ".join(escaped) + " |"

    lines = [line(result.columns), "|" + "|".join("---" for _ in result.columns) + "|"]
    lines.extend(line(row) for row in result.rows)
    return "\n".join(lines)


def to_csv(result: QueryResult) -> str:
    """Render rows as CSV with a header line."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    if result.columns:
        writer.writerow(result.columns)
    for row in result.rows:
        writer.writerow([_cell(c) for c in row])
    return output.getvalue()


_RENDERERS = {
    QueryFormat.JSON: to_json,
    QueryFormat.TABLE: to_markdown,
    QueryFormat.CSV: to_csv,
}


class QueryService:
    """Service for read-only SQL queries and schema inspection."""

    def __init__(self, db: Database):
        """Initialize query service.

        Args:
            db: Database instance
        """
        self.db = db

    def query(self, sql: str) -> QueryResult:
        """Run a read-only SQL statement.

        Raises:
            QueryError: If the statement would write, or is not valid SQL
        """
        return self.db.execute_query(sql)

    def render(self, sql: str, output_format: QueryFormat = QueryFormat.JSON) -> str:
        """Run sql and render its rows in output_format."""
        return _RENDERERS[QueryFormat(output_format)](self.query(sql))

    def schema(self) -> list[TableInfo]:
        return self.db.get_schema()

    def schema_json(self) -> str:
        return json.dumps({"tables": [asdict(t) for t in self.schema()]}, indent=2)

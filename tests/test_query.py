"""Tests for read-only queries and schema inspection."""

import json

import pytest

from tillersync.domain.entities import Category, QueryResult
from tillersync.domain.errors import QueryError
from tillersync.domain.query import QueryFormat, QueryService, to_csv, to_markdown


@pytest.fixture
def query_service(loaded_db):
    return QueryService(loaded_db)


def test_select(query_service):
    """Test running a SELECT against the local data."""
    result = query_service.query(
        "SELECT transaction_id, amount FROM transactions WHERE category = 'Groceries' "
        "ORDER BY original_order"
    )

    assert result.columns == ["transaction_id", "amount"]
    assert result.rows == [
        ("tx001a2b3c4d5e6f7g8h9i01", "-$87.43"),
        ("tx001a2b3c4d5e6f7g8h9i06", "-$63.21"),
    ]


@pytest.mark.parametrize(
    "sql",
    [
        "DELETE FROM transactions",
        "UPDATE categories SET \"group\" = 'x'",
        "INSERT INTO categories (category) VALUES ('Pets')",
        "DROP TABLE autocat",
    ],
)
def test_writes_are_rejected(query_service, loaded_db, sql):
    """Test that statements which change data fail and change nothing."""
    with pytest.raises(QueryError, match="readonly"):
        query_service.query(sql)

    assert loaded_db.count_transactions() == 8
    assert loaded_db.get_category("Groceries").group == "Food"
    assert loaded_db.get_category("Pets") is None


def test_writes_work_after_rejected_query(query_service, loaded_db):
    """Test that the store is writable again after a read-only query."""
    with pytest.raises(QueryError):
        query_service.query("DELETE FROM categories")

    loaded_db.insert_category(Category(category="Pets"))

    assert loaded_db.get_category("Pets") is not None


def test_invalid_sql(query_service):
    """Test that bad SQL is reported as a query error."""
    with pytest.raises(QueryError, match="no such table"):
        query_service.query("SELECT * FROM nope")
    with pytest.raises(QueryError, match="empty"):
        query_service.query("   ")


def test_render_json(query_service):
    """Test JSON output keyed by column name."""
    output = query_service.render(
        "SELECT category, type FROM categories WHERE category = 'Income'", QueryFormat.JSON
    )

    assert json.loads(output) == [{"category": "Income", "type": "Income"}]


def test_to_markdown():
    """Test markdown table output."""
    result = QueryResult(columns=["name", "total"], rows=[("Food | Drink", 2), ("Gas", None)])

    assert to_markdown(result) == (
        "| name | total |\n"
        "|---|---|\n"
        "| Food \\| Drink | 2 |\n"
        "| Gas |  |"
    )


def test_to_csv():
    """Test CSV output quoting."""
    result = QueryResult(columns=["description", "amount"], rows=[("PG&E, Electric", "-$1,142.67")])

    assert to_csv(result) == 'description,amount\n"PG&E, Electric","-$1,142.67"\n'


def test_schema(query_service):
    """Test describing tables, keys and row counts."""
    tables = {table.name: table for table in query_service.schema()}

    assert {"transactions", "categories", "autocat", "sheet_metadata", "formulas"} <= set(tables)
    transactions = tables["transactions"]
    assert transactions.row_count == 8
    columns = {c.name: c for c in transactions.columns}
    assert columns["transaction_id"].primary_key
    assert columns["category"].nullable
    assert "idx_transactions_category" in {i.name for i in transactions.indexes}
    fk = transactions.foreign_keys[0]
    assert fk.columns == ["category"]
    assert fk.references_table == "categories"
    assert fk.references_columns == ["category"]
    assert tables["categories"].row_count == 6
    assert tables["formulas"].row_count == 8


def test_schema_json(query_service):
    """Test the JSON form of the schema."""
    payload = json.loads(query_service.schema_json())

    names = [table["name"] for table in payload["tables"]]
    assert "autocat" in names
    autocat = next(t for t in payload["tables"] if t["name"] == "autocat")
    assert autocat["row_count"] == 3

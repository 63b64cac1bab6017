"""Tests for parsing sheet rows into records."""

import pytest

from tillersync.domain.amount import Amount
from tillersync.domain.entities import AutoCat, Category, Transaction
from tillersync.domain.errors import ValidationError
from tillersync.domain.items import Items, RowCol

HEADERS = ["Transaction ID", "Date", "Description", "Amount", "Category", "Custom Column"]


def _rows():
    return [
        HEADERS,
        ["tx1", "10/20/2025", "Whole Foods", "-$87.43", "Groceries", "87.43"],
        ["tx2", "10/19/2025", "Starbucks", "-$6.75", "Coffee Shops", "6.75"],
    ]


def test_parse_transactions():
    """Test parsing typed fields, other fields and original order."""
    items = Items.parse(Transaction, _rows())

    assert len(items) == 2
    first = items.data[0]
    assert first.transaction_id == "tx1"
    assert first.date == "10/20/2025"
    assert first.amount == Amount.parse("-$87.43")
    assert first.category == "Groceries"
    assert first.other_fields == {"Custom Column": "87.43"}
    assert [t.original_order for t in items.data] == [0, 1]
    assert items.mapping.headers == tuple(HEADERS)
    assert items.formulas == {}


def test_parse_detects_formulas():
    """Test that formula cells are recorded by position."""
    formulas = _rows()
    formulas[1][5] = "=ABS(D2)"
    formulas[2][5] = "=ABS(D3)"

    items = Items.parse(Transaction, _rows(), formulas)

    assert items.formulas == {
        RowCol(0, 5): "=ABS(D2)",
        RowCol(1, 5): "=ABS(D3)",
    }
    # The record keeps the displayed value
    assert items.data[0].other_fields["Custom Column"] == "87.43"


def test_parse_formula_past_end_of_value_row():
    """Test that a formula cell whose value row is shorter is still a formula."""
    rows = [["Category", "Group"], ["Groceries"]]
    formulas = [["Category", "Group"], ["Groceries", '=""']]

    items = Items.parse(Category, rows, formulas)

    assert items.formulas == {RowCol(0, 1): '=""'}


def test_parse_skips_empty_rows():
    """Test that empty rows are skipped and do not count toward positions."""
    rows = [HEADERS, _rows()[1], [], _rows()[2]]
    formulas = [HEADERS, _rows()[1], [], _rows()[2][:5] + ["=ABS(D4)"]]

    items = Items.parse(Transaction, rows, formulas)

    assert [t.transaction_id for t in items.data] == ["tx1", "tx2"]
    assert [t.original_order for t in items.data] == [0, 1]
    assert items.formulas == {RowCol(1, 5): "=ABS(D4)"}


def test_parse_short_rows():
    """Test that missing trailing cells are empty."""
    items = Items.parse(Transaction, [HEADERS, ["tx1", "10/20/2025"]])

    assert items.data[0].amount == Amount()
    assert items.data[0].description == ""


def test_parse_empty_sheet():
    """Test that a sheet without a header row is rejected."""
    with pytest.raises(ValidationError, match="header row is required"):
        Items.parse(Transaction, [])


def test_parse_row_longer_than_headers():
    """Test that a row with more cells than headers is rejected."""
    rows = _rows()
    rows[2].append("extra")

    with pytest.raises(ValidationError, match="longer than the headers list was encountered at row 3"):
        Items.parse(Transaction, rows)


def test_parse_invalid_amount():
    """Test that an unparseable amount names the column and row."""
    rows = _rows()
    rows[2][3] = "lots"

    with pytest.raises(ValidationError, match="column 'Amount' at row 3"):
        Items.parse(Transaction, rows)


def test_parse_autocat_optional_amounts():
    """Test that empty AutoCat amounts are None."""
    rows = [
        ["Category", "Description Contains", "Amount Min", "Amount Max"],
        ["Gas & Fuel", "Shell", "$10.00", ""],
    ]

    rule = Items.parse(AutoCat, rows).data[0]

    assert rule.amount_min == Amount.parse("$10.00")
    assert rule.amount_max is None
    assert rule.amount_equals is None


def test_to_rows_reproduces_sheet():
    """Test that records are written back in mapping order."""
    items = Items.parse(Transaction, _rows())

    assert items.to_rows() == _rows()


def test_to_rows_with_formulas():
    """Test that formula text replaces values at recorded cells."""
    formulas = _rows()
    formulas[2][5] = "=ABS(D3)"
    items = Items.parse(Transaction, _rows(), formulas)

    rows = items.to_rows_with_formulas()

    assert rows[1][5] == "87.43"
    assert rows[2][5] == "=ABS(D3)"
    assert items.to_rows()[2][5] == "6.75"


def test_original_order_gaps():
    """Test detecting deleted rows."""
    items = Items.parse(Transaction, _rows())
    assert not items.has_original_order_gaps()

    # Locally inserted rows have no original order
    items.data.append(Transaction(transaction_id="user-1"))
    assert not items.has_original_order_gaps()

    del items.data[0]
    assert items.has_original_order_gaps()


def test_row_col_text():
    """Test the text form of cell positions."""
    assert str(RowCol(3, 16)) == "(3, 16)"
    assert RowCol.parse("(3, 16)") == RowCol(3, 16)
    assert RowCol.parse(" ( 0,2 ) ") == RowCol(0, 2)
    with pytest.raises(ValidationError):
        RowCol.parse("3,16")

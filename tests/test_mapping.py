"""Tests for header to column mapping."""

import pytest

from tillersync.domain.errors import ValidationError
from tillersync.domain.mapping import NO_NAME, Mapping, to_column, validate_column


@pytest.mark.parametrize(
    "header,column",
    [
        ("Date", "date"),
        ("Account #", "account_number"),
        ("Hide From Reports", "hide_from_reports"),
        ("Jan 2025", "jan_2025"),
        ("2025 Budget", "x_2025_budget"),
        ("Café", "caf"),
        ("%", "x_"),
        ("# of Items", "number_of_items"),
        ("#", "number"),
        ("", NO_NAME),
    ],
)
def test_to_column(header, column):
    """Test deriving column names from sheet headers."""
    assert to_column(header) == column


def test_validate_column():
    """Test column name validation."""
    validate_column("account_number")
    with pytest.raises(ValidationError):
        validate_column("Account")
    with pytest.raises(ValidationError):
        validate_column("1st")


def test_mapping_lookups():
    """Test looking up headers and columns."""
    mapping = Mapping(["", "Date", "Account #"])

    assert mapping.headers == ("", "Date", "Account #")
    assert mapping.columns == (NO_NAME, "date", "account_number")
    assert mapping.header_index("Account #") == 2
    assert mapping.column_index("date") == 1
    assert mapping.column_for("Account #") == "account_number"
    assert mapping.column_for("Missing") is None
    assert len(mapping) == 3
    assert list(mapping) == [("", NO_NAME), ("Date", "date"), ("Account #", "account_number")]


def test_mapping_duplicate_header():
    """Test that a repeated header is rejected."""
    with pytest.raises(ValidationError, match="duplicate header"):
        Mapping(["Date", "Amount", "Date"])


def test_mapping_duplicate_column():
    """Test that two headers deriving the same column are rejected."""
    with pytest.raises(ValidationError, match="duplicate column name"):
        Mapping(["Account #", "Account Number"])


def test_mapping_equality():
    """Test that mappings compare by headers in order."""
    assert Mapping(["Date", "Amount"]) == Mapping(("Date", "Amount"))
    assert Mapping(["Date", "Amount"]) != Mapping(["Amount", "Date"])
    assert hash(Mapping(["Date"])) == hash(Mapping(["Date"]))

"""Tests for domain records and TillerData."""

import json

from tillersync.domain.amount import Amount
from tillersync.domain.entities import (
    AutoCat,
    AutoCatUpdates,
    Category,
    CategoryUpdates,
    Transaction,
    TransactionUpdates,
)
from tillersync.domain.items import RowCol
from tillersync.domain.tiller_data import TillerData, default_mapping


def test_set_and_get_with_header():
    """Test reading and writing fields by sheet header."""
    txn = Transaction()
    txn.set_with_header("Account #", "xxxx1234")
    txn.set_with_header("Amount", "-$6.75")
    txn.set_with_header("Budget Notes", "monthly")

    assert txn.account_number == "xxxx1234"
    assert txn.amount == Amount.parse("-$6.75")
    assert txn.other_fields == {"Budget Notes": "monthly"}
    assert txn.get_with_header("Amount") == "-$6.75"
    assert txn.get_with_header("Budget Notes") == "monthly"
    assert txn.get_with_header("Unknown") == ""


def test_autocat_empty_amount_header():
    """Test that a missing optional amount reads back as an empty cell."""
    rule = AutoCat(category="Groceries")
    assert rule.get_with_header("Amount Min") == ""


def test_transaction_dict_round_trip():
    """Test converting a transaction to a dict and back."""
    txn = Transaction(
        transaction_id="tx1",
        date="10/20/2025",
        amount=Amount.parse("-$1,142.67"),
        category="Utilities",
        other_fields={"Custom Column": "1142.67"},
        original_order=4,
    )

    data = txn.to_dict()

    assert data["amount"] == "-$1,142.67"
    assert data["original_order"] == 4
    assert Transaction.from_dict(data) == txn


def test_dict_writes_empty_amount_as_zero():
    """Test that an empty amount is saved as a formatted zero."""
    txn = Transaction(transaction_id="tx1")

    data = txn.to_dict()

    assert data["amount"] == "$0.00"
    assert Transaction.from_dict(data) == txn


def test_dict_omits_missing_original_order():
    """Test that locally created records have no original order in their dict."""
    assert "original_order" not in Category(category="New").to_dict()


def test_autocat_dict_drops_id():
    """Test that the local rule ID is not part of the sheet data."""
    rule = AutoCat(id=7, category="Gas & Fuel", amount_min=Amount.parse("$10.00"))

    data = rule.to_dict()

    assert "id" not in data
    assert data["amount_min"] == "$10.00"
    assert data["amount_max"] is None
    assert AutoCat.from_dict(data) == rule


def test_transaction_updates():
    """Test applying partial updates."""
    txn = Transaction(transaction_id="tx1", note="old", other_fields={"A": "1"})
    updates = TransactionUpdates(note="new", other_fields={"B": "2"})

    updated = updates.apply(txn)

    assert updated.note == "new"
    assert updated.other_fields == {"A": "1", "B": "2"}
    assert txn.note == "old"
    assert not updates.is_empty()
    assert TransactionUpdates().is_empty()


def test_category_and_autocat_updates_empty():
    """Test empty update detection."""
    assert CategoryUpdates().is_empty()
    assert not CategoryUpdates(other_fields={"Jan 2025": "$0.00"}).is_empty()
    assert AutoCatUpdates().is_empty()
    assert not AutoCatUpdates(amount_max=Amount.parse("$5.00")).is_empty()


def test_seeded_data_parses(tiller_data):
    """Test parsing the seeded sheet, formulas included."""
    assert len(tiller_data.transactions) == 8
    assert len(tiller_data.categories) == 6
    assert len(tiller_data.auto_cats) == 3

    first = tiller_data.transactions.data[0]
    assert first.transaction_id == "tx001a2b3c4d5e6f7g8h9i01"
    assert first.no_name == ""
    assert first.other_fields == {"Custom Column": "87.43"}

    assert tiller_data.has_formulas()
    assert tiller_data.transactions.formulas[RowCol(0, 16)] == "=ABS(E2)"
    assert tiller_data.transactions.formulas[RowCol(7, 16)] == "=ABS(E9)"
    assert len(tiller_data.transactions.formulas) == 8
    assert tiller_data.categories.formulas == {}

    shell = tiller_data.auto_cats.data[2]
    assert shell.description_contains == "Shell"
    assert shell.amount_max == Amount.parse("$100.00")


def test_tiller_data_json_round_trip(tiller_data):
    """Test that a snapshot written as JSON loads back equal."""
    payload = json.loads(json.dumps(tiller_data.to_dict()))

    assert payload["transactions"]["formulas"]["(0, 16)"] == "=ABS(E2)"
    assert TillerData.from_dict(payload) == tiller_data


def test_tiller_data_equality_sees_changes(tiller_data):
    """Test that an edited cell makes data unequal."""
    other = TillerData.from_dict(tiller_data.to_dict())
    other.transactions.data[1].note = "changed"

    assert other != tiller_data


def test_tiller_data_gaps(tiller_data):
    """Test gap detection across sheets."""
    assert not tiller_data.has_original_order_gaps()
    del tiller_data.auto_cats.data[0]
    assert tiller_data.has_original_order_gaps()


def test_default_mapping():
    """Test the known headers of each sheet."""
    assert default_mapping("Categories").headers == (
        "Category",
        "Group",
        "Type",
        "Hide from Reports",
    )
    assert "Transaction ID" in default_mapping("Transactions").headers

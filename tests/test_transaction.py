"""Tests for the transaction service."""

import pytest

from tillersync.domain.amount import Amount
from tillersync.domain.entities import TransactionUpdates
from tillersync.domain.errors import (
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)


@pytest.fixture
def groceries(category_service):
    category_service.insert_category("Groceries", group="Food", type="Expense")
    return "Groceries"


def test_insert_transaction(transaction_service, groceries):
    """Test inserting a transaction created locally."""
    transaction_id = transaction_service.insert_transaction(
        date="10/22/2025",
        amount="-$12.50",
        description="Farmers Market",
        category=groceries,
        other_fields={"Custom Column": "12.50"},
    )

    assert transaction_id.startswith("user-")
    assert len(transaction_id) == len("user-") + 19
    txn = transaction_service.get_transaction(transaction_id)
    assert txn.amount == Amount.parse("-$12.50")
    assert txn.description == "Farmers Market"
    assert txn.category == "Groceries"
    assert txn.other_fields == {"Custom Column": "12.50"}
    assert txn.original_order is None


def test_insert_transaction_generates_unique_ids(transaction_service):
    """Test that every insert gets its own ID."""
    ids = {
        transaction_service.insert_transaction(date="1/1/2025", amount="$1.00")
        for _ in range(5)
    }
    assert len(ids) == 5


def test_insert_transaction_requires_date(transaction_service):
    """Test that a date is required."""
    with pytest.raises(ValidationError, match="date is required"):
        transaction_service.insert_transaction(date=" ", amount="$1.00")


def test_insert_transaction_invalid_amount(transaction_service):
    """Test that a malformed amount is rejected."""
    with pytest.raises(ValidationError, match="Invalid amount"):
        transaction_service.insert_transaction(date="1/1/2025", amount="ten")


def test_insert_transaction_unknown_category(transaction_service):
    """Test that the category must exist."""
    with pytest.raises(ReferentialIntegrityError, match="Create the category first"):
        transaction_service.insert_transaction(
            date="1/1/2025", amount="$1.00", category="Nope"
        )
    assert transaction_service.list_transactions() == []


def test_update_transactions(transaction_service, groceries):
    """Test updating several transactions at once."""
    first = transaction_service.insert_transaction(date="1/1/2025", amount="$1.00")
    second = transaction_service.insert_transaction(date="1/2/2025", amount="$2.00")

    updated = transaction_service.update_transactions(
        [first, second], TransactionUpdates(category=groceries, note="weekly")
    )

    assert len(updated) == 2
    for transaction_id in (first, second):
        txn = transaction_service.get_transaction(transaction_id)
        assert txn.category == "Groceries"
        assert txn.note == "weekly"
    assert transaction_service.get_transaction(second).amount == Amount.parse("$2.00")


def test_update_transactions_requires_ids_and_fields(transaction_service):
    """Test argument validation."""
    with pytest.raises(ValidationError, match="At least one transaction ID"):
        transaction_service.update_transactions([], TransactionUpdates(note="x"))
    with pytest.raises(ValidationError, match="No fields to update"):
        transaction_service.update_transactions(["a"], TransactionUpdates())


def test_update_missing_transaction(transaction_service):
    """Test that updating an unknown ID fails."""
    with pytest.raises(NotFoundError):
        transaction_service.update_transactions(["missing"], TransactionUpdates(note="x"))


def test_delete_transactions(transaction_service):
    """Test deleting transactions."""
    first = transaction_service.insert_transaction(date="1/1/2025", amount="$1.00")
    second = transaction_service.insert_transaction(date="1/2/2025", amount="$2.00")

    assert transaction_service.delete_transactions([first]) == 1
    assert [t.transaction_id for t in transaction_service.list_transactions()] == [second]

    with pytest.raises(ValidationError):
        transaction_service.delete_transactions([])

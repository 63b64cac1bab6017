"""Tests for database mappers."""

from tillersync.database.models import (
    AutoCat as ORMAutoCat,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)
from tillersync.database.mappers import (
    autocat_to_domain,
    autocat_to_orm,
    category_to_domain,
    category_to_orm,
    transaction_to_domain,
    transaction_to_orm,
)
from tillersync.domain.amount import Amount
from tillersync.domain.entities import AutoCat, Category, Transaction


class TestTransactionMapper:
    """Tests for Transaction mapper."""

    def test_transaction_to_orm(self):
        """Test converting domain Transaction to ORM Transaction."""
        txn = Transaction(
            transaction_id="tx1",
            date="10/20/2025",
            amount=Amount.parse("-$87.43"),
            metadata='{"source": "bank"}',
            other_fields={"Custom Column": "87.43"},
            original_order=0,
        )

        orm_transaction = transaction_to_orm(txn)

        assert isinstance(orm_transaction, ORMTransaction)
        assert orm_transaction.amount == "-$87.43"
        assert orm_transaction.metadata_ == '{"source": "bank"}'
        assert orm_transaction.category is None
        assert orm_transaction.other_fields == {"Custom Column": "87.43"}

    def test_transaction_to_domain(self):
        """Test converting ORM Transaction to domain Transaction."""
        orm_transaction = ORMTransaction(
            transaction_id="tx1",
            date="10/20/2025",
            amount="",
            category=None,
            metadata_="",
            other_fields={},
            original_order=None,
        )

        txn = transaction_to_domain(orm_transaction)

        assert isinstance(txn, Transaction)
        assert txn.amount == Amount()
        assert txn.category == ""
        assert txn.description == ""
        assert txn.original_order is None

    def test_round_trip(self):
        """Test that a transaction survives conversion both ways."""
        txn = Transaction(
            transaction_id="tx1",
            amount=Amount.parse("$2,500.00"),
            category="Income",
            original_order=6,
        )

        assert transaction_to_domain(transaction_to_orm(txn)) == txn


class TestCategoryMapper:
    """Tests for Category mapper."""

    def test_category_round_trip(self):
        """Test converting a category both ways."""
        category = Category(
            category="Groceries",
            group="Food",
            type="Expense",
            other_fields={"Jan 2025": "$0.00"},
            original_order=0,
        )

        orm_category = category_to_orm(category)

        assert isinstance(orm_category, ORMCategory)
        assert orm_category.group == "Food"
        assert category_to_domain(orm_category) == category


class TestAutoCatMapper:
    """Tests for AutoCat mapper."""

    def test_optional_amounts(self):
        """Test that missing amounts are stored as NULL."""
        rule = AutoCat(
            category="Gas & Fuel",
            description_contains="Shell",
            amount_min=Amount.parse("$10.00"),
        )

        orm_rule = autocat_to_orm(rule)

        assert isinstance(orm_rule, ORMAutoCat)
        assert orm_rule.amount_min == "$10.00"
        assert orm_rule.amount_max is None
        assert autocat_to_domain(orm_rule) == rule

    def test_empty_category_is_null(self):
        """Test that a rule without a category stores no reference."""
        orm_rule = autocat_to_orm(AutoCat(description_contains="Shell"))

        assert orm_rule.category is None
        assert autocat_to_domain(orm_rule).category == ""

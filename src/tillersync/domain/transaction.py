"""Transaction domain service."""

from typing import Optional, Union

from tillersync.database.base import Database
from tillersync.domain.amount import Amount
from tillersync.domain.entities import Transaction, TransactionUpdates
from tillersync.domain.errors import ValidationError
from tillersync.utils.ids import generate_transaction_id


class TransactionService:
    """Service for managing transactions between syncs."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def insert_transaction(
        self,
        date: str,
        amount: Union[Amount, str],
        description: str = "",
        account: str = "",
        account_number: str = "",
        institution: str = "",
        category: str = "",
        note: str = "",
        tags: str = "",
        full_description: str = "",
        merchant_name: str = "",
        other_fields: Optional[dict[str, str]] = None,
    ) -> str:
        """Insert a transaction created locally.

        The transaction gets a ``user-`` prefixed ID and no original order,
        so it is written after the downloaded rows on the next sync up.

        Args:
            date: Transaction date as shown in the sheet
            amount: Amount or amount string such as '-$12.50'
            description: Description
            account: Account name
            account_number: Account number
            institution: Institution name
            category: Category name; must exist if given
            note: Note
            tags: Tags
            full_description: Full description
            merchant_name: Merchant name
            other_fields: Values for columns without a known field, by header

        Returns:
            The new transaction ID

        Raises:
            ValidationError: If date is empty or amount is invalid
            ReferentialIntegrityError: If category does not exist
        """
        if not date.strip():
            raise ValidationError("Transaction date is required")
        if isinstance(amount, str):
            amount = Amount.parse(amount)

        transaction = Transaction(
            transaction_id=generate_transaction_id(),
            date=date,
            description=description,
            amount=amount,
            account=account,
            account_number=account_number,
            institution=institution,
            category=category,
            note=note,
            tags=tags,
            full_description=full_description,
            merchant_name=merchant_name,
            other_fields=dict(other_fields or {}),
        )
        return self.db.insert_transaction(transaction)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(self) -> list[Transaction]:
        return self.db.list_transactions()

    def update_transactions(
        self, transaction_ids: list[str], updates: TransactionUpdates
    ) -> list[Transaction]:
        """Apply the same updates to several transactions at once.

        Either every transaction is updated or none is.

        Raises:
            ValidationError: If no IDs or no updates are given
            NotFoundError: If any transaction does not exist
            ReferentialIntegrityError: If the new category does not exist
        """
        if not transaction_ids:
            raise ValidationError("At least one transaction ID is required")
        if updates.is_empty():
            raise ValidationError("No fields to update")
        return self.db.update_transactions(transaction_ids, updates)

    def delete_transactions(self, transaction_ids: list[str]) -> int:
        """Delete several transactions at once.

        Either every transaction is deleted or none is.

        Returns:
            Number of deleted transactions

        Raises:
            ValidationError: If no IDs are given
            NotFoundError: If any transaction does not exist
        """
        if not transaction_ids:
            raise ValidationError("At least one transaction ID is required")
        return self.db.delete_transactions(transaction_ids)

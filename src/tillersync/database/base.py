"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional

# Import records directly to avoid circular import through domain/__init__.py
from tillersync.domain.entities import (
    AutoCat,
    AutoCatUpdates,
    Category,
    CategoryUpdates,
    QueryResult,
    TableInfo,
    Transaction,
    TransactionUpdates,
)
from tillersync.domain.tiller_data import TillerData


class Database(ABC):
    """Abstract database interface for tillersync.

    Batch updates and deletes are all-or-nothing: if any key is missing or a
    category reference is invalid, no row of the batch changes.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Migrate the schema to the current version."""
        pass

    @abstractmethod
    def get_schema_version(self) -> int:
        """Return the applied schema version."""
        pass

    # Sync operations
    @abstractmethod
    def save_tiller_data(self, data: TillerData) -> None:
        """Persist a downloaded TillerData in one transaction.

        Transactions are upserted by ID and rows missing from data are
        deleted; categories and AutoCat rules are replaced wholesale.
        """
        pass

    @abstractmethod
    def load_tiller_data(self) -> TillerData:
        """Rebuild TillerData, headers and formulas included, from the database."""
        pass

    # Transaction operations
    @abstractmethod
    def count_transactions(self) -> int:
        """Return the number of stored transactions."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(self) -> list[Transaction]:
        """List transactions in sheet order, locally inserted ones last."""
        pass

    @abstractmethod
    def insert_transaction(self, transaction: Transaction) -> str:
        """Insert a transaction. Returns its ID."""
        pass

    @abstractmethod
    def update_transactions(
        self, transaction_ids: list[str], updates: TransactionUpdates
    ) -> list[Transaction]:
        """Apply updates to every listed transaction. Returns the updated records."""
        pass

    @abstractmethod
    def delete_transactions(self, transaction_ids: list[str]) -> int:
        """Delete every listed transaction. Returns the number deleted."""
        pass

    # Category operations
    @abstractmethod
    def get_category(self, name: str) -> Optional[Category]:
        """Get category by name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List categories in sheet order."""
        pass

    @abstractmethod
    def insert_category(self, category: Category) -> str:
        """Insert a category. Returns its name."""
        pass

    @abstractmethod
    def update_categories(
        self, names: list[str], updates: CategoryUpdates
    ) -> list[Category]:
        """Apply updates to every listed category; a rename cascades to references."""
        pass

    @abstractmethod
    def delete_categories(self, names: list[str]) -> int:
        """Delete every listed category. Referenced categories cannot be deleted."""
        pass

    # AutoCat operations
    @abstractmethod
    def get_autocat(self, autocat_id: int) -> Optional[AutoCat]:
        """Get AutoCat rule by ID."""
        pass

    @abstractmethod
    def list_autocats(self) -> list[AutoCat]:
        """List AutoCat rules in sheet order."""
        pass

    @abstractmethod
    def insert_autocat(self, rule: AutoCat) -> int:
        """Insert an AutoCat rule. Returns its new ID."""
        pass

    @abstractmethod
    def update_autocats(
        self, autocat_ids: list[int], updates: AutoCatUpdates
    ) -> list[AutoCat]:
        """Apply updates to every listed AutoCat rule."""
        pass

    @abstractmethod
    def delete_autocats(self, autocat_ids: list[int]) -> int:
        """Delete every listed AutoCat rule. Returns the number deleted."""
        pass

    # Read-only access
    @abstractmethod
    def execute_query(self, sql: str) -> QueryResult:
        """Run one SQL statement without allowing it to change the database.

        Raises:
            QueryError: If the statement writes, is invalid, or fails
        """
        pass

    @abstractmethod
    def get_schema(self) -> list[TableInfo]:
        """Describe every table: columns, indexes, foreign keys and row count."""
        pass

"""SQLAlchemy database implementation."""

import logging
import sqlite3
from collections import Counter
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import inspect, text
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from tillersync.database import migrations
from tillersync.database.base import Database
from tillersync.database.models import (
    AutoCat,
    Category,
    Formula,
    SheetMetadata,
    Transaction,
    create_session_factory,
)
from tillersync.database.mappers import (
    autocat_to_domain,
    autocat_to_orm,
    category_to_domain,
    category_to_orm,
    transaction_to_domain,
    transaction_to_orm,
    update_orm_autocat,
    update_orm_category,
    update_orm_transaction,
)
from tillersync.domain import entities as domain
from tillersync.domain.errors import (
    ConflictError,
    DomainError,
    NotFoundError,
    QueryError,
    ReferentialIntegrityError,
    autocat_not_found,
    category_delete_blocked,
    category_not_found,
    category_reference_missing,
    duplicate_category,
    transaction_not_found,
)
from tillersync.domain.items import Items, RowCol
from tillersync.domain.mapping import Mapping
from tillersync.domain.tiller_data import (
    AUTO_CAT,
    CATEGORIES,
    SHEETS,
    TRANSACTIONS,
    TillerData,
    default_mapping,
)

logger = logging.getLogger(__name__)


def _integrity_error(error: IntegrityError) -> DomainError:
    message = str(error.orig)
    if "FOREIGN KEY" in message.upper():
        return ReferentialIntegrityError(
            f"A category reference does not exist or is still in use ({message})"
        )
    return ConflictError(f"Duplicate key ({message})")


def _duplicates(keys: list) -> list:
    return sorted(str(k) for k, n in Counter(keys).items() if n > 1)


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to/tiller.sqlite')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        """Run the enclosed block in one transaction, rolling back on any error."""
        session = self._get_session()
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise _integrity_error(e) from e
        except Exception:
            session.rollback()
            raise

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None
        self.session_factory.kw["bind"].dispose()

    def initialize_schema(self) -> None:
        """Migrate the schema to the current version."""
        session = self._get_session()
        current = migrations.ensure_version_table(session)
        if current > migrations.CURRENT_VERSION:
            raise migrations.MigrationError(
                f"Database schema version {current} is newer than this version of "
                f"tillersync supports ({migrations.CURRENT_VERSION})"
            )
        migrations.run(session, current, migrations.CURRENT_VERSION)

    def get_schema_version(self) -> int:
        """Return the applied schema version."""
        return migrations.get_version(self._get_session())

    # Sync operations
    def save_tiller_data(self, data: TillerData) -> None:
        """Persist a downloaded TillerData in one transaction."""
        self._check_references(data)
        with self._transaction() as session:
            self._replace_categories(session, data.categories)
            self._replace_autocats(session, data.auto_cats)
            self._upsert_transactions(session, data.transactions)
            for sheet in SHEETS:
                self._replace_sheet_metadata(session, sheet, data.sheet(sheet))
        logger.info(
            "Saved %d transactions, %d categories, %d AutoCat rules",
            len(data.transactions),
            len(data.categories),
            len(data.auto_cats),
        )

    def _check_references(self, data: TillerData) -> None:
        names = {c.category for c in data.categories.data}
        for sheet, record in ((TRANSACTIONS, "transaction"), (AUTO_CAT, "AutoCat rule")):
            for row in data.sheet(sheet).data:
                if row.category and row.category not in names:
                    raise ReferentialIntegrityError(
                        f"{sheet} row {row.original_order}: "
                        + category_reference_missing(record, row.category),
                        key=row.category,
                    )

    def _upsert_transactions(self, session: Session, items: Items) -> None:
        incoming_ids = [t.transaction_id for t in items.data]
        duplicates = _duplicates(incoming_ids)
        if duplicates:
            raise ConflictError(
                f"Duplicate Transaction ID(s) in the Transactions sheet: {', '.join(duplicates)}"
            )

        existing = {t.transaction_id: t for t in session.query(Transaction).all()}
        removed = set(existing) - set(incoming_ids)
        for transaction_id in removed:
            session.delete(existing[transaction_id])

        inserted = 0
        for txn in items.data:
            orm_transaction = existing.get(txn.transaction_id)
            if orm_transaction is None:
                session.add(transaction_to_orm(txn))
                inserted += 1
            else:
                update_orm_transaction(orm_transaction, txn)
        logger.debug(
            "Transactions: %d inserted, %d updated, %d deleted",
            inserted,
            len(items.data) - inserted,
            len(removed),
        )

    def _replace_categories(self, session: Session, items: Items) -> None:
        duplicates = _duplicates([c.category for c in items.data])
        if duplicates:
            raise ConflictError(
                f"Duplicate categories in the Categories sheet: {', '.join(duplicates)}"
            )
        session.query(Category).delete()
        session.add_all(category_to_orm(c) for c in items.data)

    def _replace_autocats(self, session: Session, items: Items) -> None:
        session.query(AutoCat).delete()
        session.add_all(autocat_to_orm(rule) for rule in items.data)

    def _replace_sheet_metadata(self, session: Session, sheet: str, items: Items) -> None:
        session.query(SheetMetadata).filter(SheetMetadata.sheet == sheet).delete()
        session.query(Formula).filter(Formula.sheet == sheet).delete()
        session.add_all(
            SheetMetadata(sheet=sheet, column_name=column, header_name=header, order=order)
            for order, (header, column) in enumerate(items.mapping)
        )
        session.add_all(
            Formula(sheet=sheet, row=position.row, col=position.col, formula=formula)
            for position, formula in items.formulas.items()
        )

    def load_tiller_data(self) -> TillerData:
        """Rebuild TillerData, headers and formulas included, from the database."""
        with self._transaction() as session:
            return TillerData(
                transactions=Items(
                    mapping=self._load_mapping(session, TRANSACTIONS),
                    data=[transaction_to_domain(t) for t in self._transactions(session)],
                    formulas=self._load_formulas(session, TRANSACTIONS),
                ),
                categories=Items(
                    mapping=self._load_mapping(session, CATEGORIES),
                    data=[category_to_domain(c) for c in self._categories(session)],
                    formulas=self._load_formulas(session, CATEGORIES),
                ),
                auto_cats=Items(
                    mapping=self._load_mapping(session, AUTO_CAT),
                    data=[autocat_to_domain(a) for a in self._autocats(session)],
                    formulas=self._load_formulas(session, AUTO_CAT),
                ),
            )

    def _load_mapping(self, session: Session, sheet: str) -> Mapping:
        rows = (
            session.query(SheetMetadata)
            .filter(SheetMetadata.sheet == sheet)
            .order_by(SheetMetadata.order)
            .all()
        )
        if not rows:
            return default_mapping(sheet)
        return Mapping(row.header_name for row in rows)

    def _load_formulas(self, session: Session, sheet: str) -> dict[RowCol, str]:
        rows = session.query(Formula).filter(Formula.sheet == sheet).all()
        return {RowCol(row.row, row.col): row.formula for row in rows}

    def _transactions(self, session: Session) -> list[Transaction]:
        return (
            session.query(Transaction)
            .order_by(
                Transaction.original_order.is_(None),
                Transaction.original_order,
                Transaction.transaction_id,
            )
            .all()
        )

    def _categories(self, session: Session) -> list[Category]:
        return (
            session.query(Category)
            .order_by(
                Category.original_order.is_(None),
                Category.original_order,
                Category.category,
            )
            .all()
        )

    def _autocats(self, session: Session) -> list[AutoCat]:
        return (
            session.query(AutoCat)
            .order_by(AutoCat.original_order.is_(None), AutoCat.original_order, AutoCat.id)
            .all()
        )

    def _check_category(self, session: Session, name: str, record: str) -> None:
        if name and session.get(Category, name) is None:
            raise ReferentialIntegrityError(
                category_reference_missing(record, name), key=name
            )

    # Transaction operations
    def count_transactions(self) -> int:
        """Return the number of stored transactions."""
        with self._transaction() as session:
            return session.query(Transaction).count()

    def get_transaction(self, transaction_id: str) -> Optional[domain.Transaction]:
        """Get transaction by ID."""
        with self._transaction() as session:
            txn = session.get(Transaction, transaction_id)
            if txn is None:
                return None
            return transaction_to_domain(txn)

    def list_transactions(self) -> list[domain.Transaction]:
        """List transactions in sheet order, locally inserted ones last."""
        with self._transaction() as session:
            return [transaction_to_domain(t) for t in self._transactions(session)]

    def insert_transaction(self, transaction: domain.Transaction) -> str:
        """Insert a transaction. Returns its ID."""
        with self._transaction() as session:
            if session.get(Transaction, transaction.transaction_id) is not None:
                raise ConflictError(
                    f"Cannot insert transaction: '{transaction.transaction_id}' already exists."
                )
            self._check_category(session, transaction.category, "transaction")
            session.add(transaction_to_orm(transaction))
        return transaction.transaction_id

    def update_transactions(
        self, transaction_ids: list[str], updates: domain.TransactionUpdates
    ) -> list[domain.Transaction]:
        """Apply updates to every listed transaction. Returns the updated records."""
        updated = []
        with self._transaction() as session:
            for transaction_id in transaction_ids:
                orm_transaction = session.get(Transaction, transaction_id)
                if orm_transaction is None:
                    raise NotFoundError(transaction_not_found(transaction_id))
                txn = updates.apply(transaction_to_domain(orm_transaction))
                self._check_category(session, txn.category, "transaction")
                update_orm_transaction(orm_transaction, txn)
                updated.append(txn)
        return updated

    def delete_transactions(self, transaction_ids: list[str]) -> int:
        """Delete every listed transaction. Returns the number deleted."""
        unique_ids = list(dict.fromkeys(transaction_ids))
        with self._transaction() as session:
            for transaction_id in unique_ids:
                orm_transaction = session.get(Transaction, transaction_id)
                if orm_transaction is None:
                    raise NotFoundError(transaction_not_found(transaction_id))
                session.delete(orm_transaction)
        return len(unique_ids)

    # Category operations
    def get_category(self, name: str) -> Optional[domain.Category]:
        """Get category by name."""
        with self._transaction() as session:
            category = session.get(Category, name)
            if category is None:
                return None
            return category_to_domain(category)

    def list_categories(self) -> list[domain.Category]:
        """List categories in sheet order."""
        with self._transaction() as session:
            return [category_to_domain(c) for c in self._categories(session)]

    def insert_category(self, category: domain.Category) -> str:
        """Insert a category. Returns its name."""
        with self._transaction() as session:
            if session.get(Category, category.category) is not None:
                raise ConflictError(duplicate_category(category.category))
            session.add(category_to_orm(category))
        return category.category

    def update_categories(
        self, names: list[str], updates: domain.CategoryUpdates
    ) -> list[domain.Category]:
        """Apply updates to every listed category; a rename cascades to references."""
        updated = []
        with self._transaction() as session:
            for name in names:
                orm_category = session.get(Category, name)
                if orm_category is None:
                    raise NotFoundError(category_not_found(name))
                category = updates.apply(category_to_domain(orm_category))
                if category.category != name and session.get(Category, category.category) is not None:
                    raise ConflictError(
                        f"Cannot rename category '{name}': '{category.category}' already exists."
                    )
                update_orm_category(orm_category, category)
                session.flush()
                updated.append(category)
        return updated

    def delete_categories(self, names: list[str]) -> int:
        """Delete every listed category. Referenced categories cannot be deleted."""
        unique_names = list(dict.fromkeys(names))
        with self._transaction() as session:
            for name in unique_names:
                orm_category = session.get(Category, name)
                if orm_category is None:
                    raise NotFoundError(category_not_found(name))

                transaction_count = (
                    session.query(Transaction).filter(Transaction.category == name).count()
                )
                autocat_count = session.query(AutoCat).filter(AutoCat.category == name).count()
                if transaction_count > 0 or autocat_count > 0:
                    raise ReferentialIntegrityError(
                        category_delete_blocked(name, transaction_count, autocat_count),
                        key=name,
                    )
                session.delete(orm_category)
        return len(unique_names)

    # AutoCat operations
    def get_autocat(self, autocat_id: int) -> Optional[domain.AutoCat]:
        """Get AutoCat rule by ID."""
        with self._transaction() as session:
            rule = session.get(AutoCat, autocat_id)
            if rule is None:
                return None
            return autocat_to_domain(rule)

    def list_autocats(self) -> list[domain.AutoCat]:
        """List AutoCat rules in sheet order."""
        with self._transaction() as session:
            return [autocat_to_domain(a) for a in self._autocats(session)]

    def insert_autocat(self, rule: domain.AutoCat) -> int:
        """Insert an AutoCat rule. Returns its new ID."""
        with self._transaction() as session:
            self._check_category(session, rule.category, "AutoCat rule")
            orm_rule = autocat_to_orm(rule)
            session.add(orm_rule)
            session.flush()
            autocat_id = orm_rule.id
        return autocat_id

    def update_autocats(
        self, autocat_ids: list[int], updates: domain.AutoCatUpdates
    ) -> list[domain.AutoCat]:
        """Apply updates to every listed AutoCat rule."""
        updated = []
        with self._transaction() as session:
            for autocat_id in autocat_ids:
                orm_rule = session.get(AutoCat, autocat_id)
                if orm_rule is None:
                    raise NotFoundError(autocat_not_found(autocat_id))
                rule = updates.apply(autocat_to_domain(orm_rule))
                self._check_category(session, rule.category, "AutoCat rule")
                update_orm_autocat(orm_rule, rule)
                updated.append(rule)
        return updated

    def delete_autocats(self, autocat_ids: list[int]) -> int:
        """Delete every listed AutoCat rule. Returns the number deleted."""
        unique_ids = list(dict.fromkeys(autocat_ids))
        with self._transaction() as session:
            for autocat_id in unique_ids:
                orm_rule = session.get(AutoCat, autocat_id)
                if orm_rule is None:
                    raise NotFoundError(autocat_not_found(autocat_id))
                session.delete(orm_rule)
        return len(unique_ids)

    # Read-only access
    def execute_query(self, sql: str) -> domain.QueryResult:
        """Run one SQL statement with writes disabled on the connection."""
        if not sql.strip():
            raise QueryError("Query cannot be empty")
        session = self._get_session()
        try:
            connection = session.connection()
            connection.exec_driver_sql("PRAGMA query_only = ON")
            try:
                result = connection.exec_driver_sql(sql)
                if result.returns_rows:
                    columns = list(result.keys())
                    rows = [tuple(row) for row in result]
                else:
                    columns, rows = [], []
            finally:
                connection.exec_driver_sql("PRAGMA query_only = OFF")
        except (DBAPIError, sqlite3.Warning) as e:
            raise QueryError(f"Query failed: {getattr(e, 'orig', None) or e}") from e
        finally:
            session.rollback()
        logger.debug("Query returned %d rows", len(rows))
        return domain.QueryResult(columns=columns, rows=rows)

    def get_schema(self) -> list[domain.TableInfo]:
        """Describe every table of the database."""
        session = self._get_session()
        try:
            connection = session.connection()
            inspector = inspect(connection)
            quote = connection.dialect.identifier_preparer.quote
            tables = []
            for name in sorted(inspector.get_table_names()):
                primary_key = set(inspector.get_pk_constraint(name).get("constrained_columns") or [])
                row_count = connection.execute(text(f"SELECT COUNT(*) FROM {quote(name)}")).scalar()
                tables.append(
                    domain.TableInfo(
                        name=name,
                        row_count=row_count,
                        columns=[
                            domain.ColumnInfo(
                                name=column["name"],
                                data_type=str(column["type"]),
                                nullable=bool(column["nullable"]),
                                primary_key=column["name"] in primary_key,
                            )
                            for column in inspector.get_columns(name)
                        ],
                        indexes=[
                            domain.IndexInfo(
                                name=index["name"],
                                columns=list(index["column_names"]),
                                unique=bool(index["unique"]),
                            )
                            for index in inspector.get_indexes(name)
                        ],
                        foreign_keys=[
                            domain.ForeignKeyInfo(
                                columns=list(fk["constrained_columns"]),
                                references_table=fk["referred_table"],
                                references_columns=list(fk["referred_columns"]),
                            )
                            for fk in inspector.get_foreign_keys(name)
                        ],
                    )
                )
        finally:
            session.rollback()
        return tables

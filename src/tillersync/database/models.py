"""SQLAlchemy models for the tillersync database.

Tables are created by the SQL migrations, not by ``create_all``; these models
only describe them.
"""

from sqlalchemy import (
    JSON,
    Column,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

Base = declarative_base()

_CATEGORY_FK = dict(onupdate="CASCADE", deferrable=True, initially="DEFERRED")


class Category(Base):
    """Category model, keyed by name."""

    __tablename__ = "categories"

    category = Column(String, primary_key=True)
    group = Column("group", String, nullable=False, default="")
    type = Column(String, nullable=False, default="")
    hide_from_reports = Column(String, nullable=False, default="")
    other_fields = Column(JSON, nullable=False, default=dict)
    original_order = Column(Integer, nullable=True)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    transaction_id = Column(String, primary_key=True)
    date = Column(String, nullable=False, default="")
    description = Column(String, nullable=False, default="")
    amount = Column(String, nullable=False, default="")
    account = Column(String, nullable=False, default="")
    account_number = Column(String, nullable=False, default="")
    institution = Column(String, nullable=False, default="")
    month = Column(String, nullable=False, default="")
    week = Column(String, nullable=False, default="")
    full_description = Column(String, nullable=False, default="")
    account_id = Column(String, nullable=False, default="")
    check_number = Column(String, nullable=False, default="")
    date_added = Column(String, nullable=False, default="")
    merchant_name = Column(String, nullable=False, default="")
    category_hint = Column(String, nullable=False, default="")
    category = Column(
        String, ForeignKey("categories.category", **_CATEGORY_FK), nullable=True
    )
    note = Column(String, nullable=False, default="")
    tags = Column(String, nullable=False, default="")
    categorized_date = Column(String, nullable=False, default="")
    statement = Column(String, nullable=False, default="")
    metadata_ = Column("metadata", String, nullable=False, default="")
    no_name = Column(String, nullable=False, default="")
    other_fields = Column(JSON, nullable=False, default=dict)
    original_order = Column(Integer, nullable=True)


class AutoCat(Base):
    """AutoCat rule model."""

    __tablename__ = "autocat"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(
        String, ForeignKey("categories.category", **_CATEGORY_FK), nullable=True
    )
    description = Column(String, nullable=False, default="")
    description_contains = Column(String, nullable=False, default="")
    account_contains = Column(String, nullable=False, default="")
    institution_contains = Column(String, nullable=False, default="")
    amount_min = Column(String, nullable=True)
    amount_max = Column(String, nullable=True)
    amount_equals = Column(String, nullable=True)
    description_equals = Column(String, nullable=False, default="")
    description_full = Column(String, nullable=False, default="")
    full_description_contains = Column(String, nullable=False, default="")
    amount_contains = Column(String, nullable=False, default="")
    other_fields = Column(JSON, nullable=False, default=dict)
    original_order = Column(Integer, nullable=True)


class SheetMetadata(Base):
    """One header of a sheet, in column order."""

    __tablename__ = "sheet_metadata"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sheet = Column(String, nullable=False)
    column_name = Column(String, nullable=False)
    header_name = Column(String, nullable=False)
    order = Column("order", Integer, nullable=False)

    __table_args__ = (UniqueConstraint("sheet", "order"),)


class Formula(Base):
    """A formula cell of a sheet."""

    __tablename__ = "formulas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sheet = Column(String, nullable=False)
    row = Column("row", Integer, nullable=False)
    col = Column(Integer, nullable=False)
    formula = Column(String, nullable=False)

    __table_args__ = (UniqueConstraint("sheet", "row", "col"),)


def create_session_factory(database_url: str) -> sessionmaker:
    """Create an engine and session factory for a SQLite database.

    The pool holds a single connection, so every statement, migrations
    included, runs on one writer. Foreign keys are enforced and DDL takes
    part in transactions.
    """
    engine = create_engine(
        database_url, poolclass=QueuePool, pool_size=1, max_overflow=0
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy issue BEGIN itself so DDL is transactional.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return sessionmaker(bind=engine)

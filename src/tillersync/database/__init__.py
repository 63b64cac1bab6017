"""Database layer for tillersync."""

from tillersync.database.base import Database
from tillersync.database.sqlalchemy_db import SQLAlchemyDatabase
from tillersync.database.factories import create_sqlite_database

__all__ = ["Database", "SQLAlchemyDatabase", "create_sqlite_database"]

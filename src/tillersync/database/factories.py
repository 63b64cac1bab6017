"""Database factory functions for creating database instances."""

from pathlib import Path
from typing import Optional, Union

from tillersync import config
from tillersync.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(
    database_path: Optional[Union[str, Path]] = None,
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, uses tiller.sqlite
            in the home directory ($TILLER_HOME, else ~/tiller)

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        home = config.resolve_home()
        home.mkdir(parents=True, exist_ok=True)
        database_path = home / config.SQLITE_FILE

    database_url = f"sqlite:///{database_path}"
    db = SQLAlchemyDatabase(database_url)
    db.database_path = str(database_path)
    return db

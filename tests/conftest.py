"""Shared pytest fixtures for tillersync tests."""

import tempfile
import os
from datetime import datetime
import pytest

from tillersync.backup import Backup
from tillersync.config import Config
from tillersync.database.factories import create_sqlite_database
from tillersync.domain.autocat import AutoCatService
from tillersync.domain.category import CategoryService
from tillersync.domain.sync import SyncService
from tillersync.domain.transaction import TransactionService
from tillersync.sheets.memory import MemorySheet
from tillersync.sheets.tiller import TillerClient

SHEET_URL = "https://docs.google.com/spreadsheets/d/1AbCdEfGhIjKlMnOp/edit#gid=0"
SPREADSHEET_ID = "1AbCdEfGhIjKlMnOp"


def fixed_clock():
    return datetime(2025, 10, 21, 9, 30, 0)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".sqlite")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def autocat_service(temp_db):
    """Create an AutoCatService with a temporary database."""
    return AutoCatService(temp_db)


@pytest.fixture
def memory_sheet():
    """A sheet holding the seeded sample data."""
    return MemorySheet.seeded()


@pytest.fixture
def tiller_data(memory_sheet):
    """Sample data as downloaded from the seeded sheet."""
    return TillerClient(memory_sheet).get_data()


@pytest.fixture
def loaded_db(temp_db, tiller_data):
    """A database holding the seeded sample data."""
    temp_db.save_tiller_data(tiller_data)
    return temp_db


@pytest.fixture
def backup(tmp_path, temp_db):
    """Backup manager writing to a temporary directory."""
    return Backup(
        tmp_path / ".backups",
        temp_db.database_path,
        backup_copies=3,
        clock=fixed_clock,
    )


@pytest.fixture
def sync_service(temp_db, memory_sheet, backup):
    """SyncService wired to the seeded in-memory sheet."""
    return SyncService(temp_db, memory_sheet, backup, clock=fixed_clock)


@pytest.fixture
def home(tmp_path):
    """An initialized home directory."""
    home = tmp_path / "home"
    Config.create(home, SHEET_URL)
    return home


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()

"""Sync service for moving data between the Tiller sheet and the local database.

- sync_down: replace local data with the sheet's contents
- sync_up: overwrite the sheet with local data, after checking that the sheet
  has not changed since the last sync_down and that formulas are safe
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from tillersync.backup import SYNC_DOWN, SYNC_UP_PRE, Backup
from tillersync.database.base import Database
from tillersync.domain.errors import FormulaSafetyError, SyncConflictError, SyncError
from tillersync.domain.tiller_data import SHEETS, TillerData
from tillersync.sheets.base import Sheet
from tillersync.sheets.tiller import TillerClient

logger = logging.getLogger(__name__)


class FormulasMode(str, enum.Enum):
    """What sync_up does with formula cells."""

    UNKNOWN = "unknown"
    PRESERVE = "preserve"
    IGNORE = "ignore"


@dataclass
class SyncResult:
    """Result of a completed sync."""

    direction: str  # 'down' or 'up'
    transactions: int = 0
    categories: int = 0
    auto_cats: int = 0
    backups: list[Path] = field(default_factory=list)
    remote_backup_id: Optional[str] = None

    @property
    def summary(self) -> str:
        """Return a one-line human-readable summary."""
        verb = "Downloaded" if self.direction == "down" else "Uploaded"
        return (
            f"{verb} {self.transactions} transactions, {self.categories} categories, "
            f"{self.auto_cats} AutoCat rules"
        )


def _formula_count(data: TillerData) -> int:
    return sum(len(data.sheet(name).formulas) for name in SHEETS)


class SyncService:
    """Service for syncing the Tiller sheet with the local database.

    One sync must finish before another starts; nothing here locks the
    database or the sheet.
    """

    def __init__(
        self,
        db: Database,
        sheet: Sheet,
        backup: Backup,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize sync service.

        Args:
            db: Database instance
            sheet: Spreadsheet to sync with
            backup: Backup manager for local snapshots and database copies
            clock: Returns the current local time
        """
        self.db = db
        self.tiller = TillerClient(sheet)
        self.backup = backup
        self.clock = clock

    def sync_down(self) -> SyncResult:
        """Download the sheet and replace local data with it.

        Steps: copy the database file (if any), download and parse all tabs,
        write a sync-down snapshot, save to the database. A failing step stops
        the remaining ones.

        Returns:
            SyncResult with the downloaded row counts
        """
        result = SyncResult(direction="down")
        if self.backup.sqlite_path.exists():
            result.backups.append(self.backup.copy_sqlite())

        data = self.tiller.get_data()
        logger.info(
            "Downloaded %d transactions, %d categories, %d AutoCat rules",
            len(data.transactions),
            len(data.categories),
            len(data.auto_cats),
        )
        result.backups.append(self.backup.save_json(SYNC_DOWN, data))
        self.db.save_tiller_data(data)

        result.transactions = len(data.transactions)
        result.categories = len(data.categories)
        result.auto_cats = len(data.auto_cats)
        return result

    def sync_up(
        self, force: bool = False, formulas: FormulasMode = FormulasMode.UNKNOWN
    ) -> SyncResult:
        """Overwrite the sheet with local data.

        Args:
            force: Write even if the sheet changed since the last sync_down,
                no sync-down snapshot exists, or rows were deleted locally
                while preserving formulas
            formulas: How to treat formula cells

        Returns:
            SyncResult with the verified row counts

        Raises:
            SyncError: If the database holds no transactions
            SyncConflictError: If the sheet changed or there is no baseline
            FormulaSafetyError: If formulas could be lost or misplaced
            VerificationError: If the sheet does not hold what was written
        """
        formulas = FormulasMode(formulas)
        if self.db.count_transactions() == 0:
            raise SyncError(
                "Database has no transactions, run 'tillersync sync down' to get data"
            )

        result = SyncResult(direction="up")
        current = self.tiller.get_data()
        pre_path = self.backup.save_json(SYNC_UP_PRE, current)
        result.backups.append(pre_path)

        self._check_conflicts(current, force, pre_path)

        local = self.db.load_tiller_data()
        self._check_formulas(local, force, formulas)

        result.backups.append(self.backup.copy_sqlite())
        name = f"tiller-backup-{self.clock():%Y-%m-%d-%H%M%S}"
        result.remote_backup_id = self.tiller.copy_spreadsheet(name)
        logger.info("Backed up sheet as '%s' (%s)", name, result.remote_backup_id)

        self.tiller.clear_and_write_data(
            local, preserve_formulas=formulas == FormulasMode.PRESERVE
        )
        counts = self.tiller.verify_write(local)

        result.transactions = counts.transactions
        result.categories = counts.categories
        result.auto_cats = counts.auto_cats
        return result

    def _check_conflicts(self, current: TillerData, force: bool, pre_path: Path) -> None:
        last = self.backup.load_latest_json(SYNC_DOWN)
        if last is None:
            if not force:
                raise SyncConflictError(
                    "No sync-down snapshot found, so changes made in the sheet cannot be "
                    "detected. Run 'tillersync sync down' first, or use --force to "
                    "overwrite the sheet."
                )
            logger.warning("No sync-down snapshot found; overwriting the sheet because of --force")
        elif last != current:
            if not force:
                raise SyncConflictError(
                    "The sheet has changed since the last sync down. Run 'tillersync sync "
                    "down' to get the latest data, or use --force to overwrite the sheet. "
                    f"The current sheet contents were saved to {pre_path}."
                )
            logger.warning("The sheet changed since the last sync down; overwriting because of --force")

    def _check_formulas(self, local: TillerData, force: bool, formulas: FormulasMode) -> None:
        if formulas == FormulasMode.UNKNOWN:
            count = _formula_count(local)
            if count:
                raise FormulaSafetyError(
                    f"The data contains {count} formula cell(s). Use --formulas preserve "
                    "to write them back, or --formulas ignore to write values only."
                )
        elif formulas == FormulasMode.PRESERVE and local.has_original_order_gaps():
            if not force:
                raise FormulaSafetyError(
                    "Rows were deleted locally since the last sync down, so formulas "
                    "would be written to the wrong rows. Use --formulas ignore, or "
                    "--force to write them anyway."
                )
            logger.warning("Rows were deleted locally; preserving formulas anyway because of --force")

"""Local backups: JSON snapshots of sheet data and copies of the SQLite file.

Backup files are named ``{prefix}.{YYYY-MM-DD}-{NNN}[.{ext}]``; sorting names
sorts them by date and then by sequence number.
"""

import json
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from tillersync.config import DEFAULT_BACKUP_COPIES, SQLITE_FILE
from tillersync.domain.tiller_data import TillerData

logger = logging.getLogger(__name__)

SYNC_DOWN = "sync-down"
SYNC_UP_PRE = "sync-up-pre"
JSON = "json"


def is_backup_file(name: str, prefix: str, ext: Optional[str]) -> bool:
    """True if name belongs to the backup family of prefix and ext.

    SQLite copies have no extension, so they are told apart from JSON
    snapshots sharing the prefix by excluding ``.json``.
    """
    if not name.startswith(f"{prefix}."):
        return False
    if ext is None:
        return not name.endswith(f".{JSON}")
    return name.endswith(f".{ext}")


def _sequence_number(name: str, prefix: str, date: str, ext: Optional[str]) -> Optional[int]:
    start = f"{prefix}.{date}-"
    if not name.startswith(start):
        return None
    seq = name[len(start):]
    if ext is not None:
        if not seq.endswith(f".{ext}"):
            return None
        seq = seq[: -len(ext) - 1]
    if not seq.isdigit():
        return None
    return int(seq)


class Backup:
    """Writes, rotates and reads backups in one directory."""

    def __init__(
        self,
        backups_dir: Path,
        sqlite_path: Path,
        backup_copies: int = DEFAULT_BACKUP_COPIES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize backup manager.

        Args:
            backups_dir: Directory that holds the backup files
            sqlite_path: Live database file copied by copy_sqlite
            backup_copies: Number of files kept per backup family
            clock: Returns the current local time
        """
        self.backups_dir = Path(backups_dir)
        self.sqlite_path = Path(sqlite_path)
        self.backup_copies = backup_copies
        self.clock = clock

    def today(self) -> str:
        return self.clock().strftime("%Y-%m-%d")

    def next_sequence_number(self, prefix: str, ext: Optional[str]) -> int:
        """Return one more than the highest sequence number used today."""
        date = self.today()
        numbers = [
            n
            for n in (
                _sequence_number(p.name, prefix, date, ext)
                for p in self._files()
                if is_backup_file(p.name, prefix, ext)
            )
            if n is not None
        ]
        return max(numbers, default=0) + 1

    def _backup_path(self, prefix: str, ext: Optional[str]) -> Path:
        seq = self.next_sequence_number(prefix, ext)
        name = f"{prefix}.{self.today()}-{seq:03d}"
        if ext is not None:
            name = f"{name}.{ext}"
        return self.backups_dir / name

    def _files(self) -> list[Path]:
        if not self.backups_dir.exists():
            return []
        return [p for p in self.backups_dir.iterdir() if p.is_file()]

    def save_json(self, prefix: str, data: TillerData) -> Path:
        """Write data as a pretty-printed JSON snapshot, then rotate.

        Returns:
            Path of the new snapshot
        """
        self.backups_dir.mkdir(parents=True, exist_ok=True)
        path = self._backup_path(prefix, JSON)
        path.write_text(json.dumps(data.to_dict(), indent=2) + "\n", encoding="utf-8")
        logger.info("Wrote %s snapshot %s", prefix, path)
        self.rotate(prefix, JSON)
        return path

    def copy_sqlite(self) -> Path:
        """Copy the live database file byte for byte, then rotate.

        Returns:
            Path of the copy
        """
        self.backups_dir.mkdir(parents=True, exist_ok=True)
        path = self._backup_path(SQLITE_FILE, None)
        shutil.copyfile(self.sqlite_path, path)
        logger.info("Copied database to %s", path)
        self.rotate(SQLITE_FILE, None)
        return path

    def rotate(self, prefix: str, ext: Optional[str]) -> list[Path]:
        """Delete the oldest files of a family beyond the retention count.

        Returns:
            Paths that were deleted
        """
        names = sorted(p.name for p in self._files() if is_backup_file(p.name, prefix, ext))
        excess = len(names) - self.backup_copies
        deleted = []
        for name in names[: max(excess, 0)]:
            path = self.backups_dir / name
            path.unlink()
            deleted.append(path)
            logger.debug("Deleted old backup %s", path)
        return deleted

    def latest(self, prefix: str, ext: Optional[str] = JSON) -> Optional[Path]:
        names = sorted(p.name for p in self._files() if is_backup_file(p.name, prefix, ext))
        if not names:
            return None
        return self.backups_dir / names[-1]

    def load_latest_json(self, prefix: str) -> Optional[TillerData]:
        """Load the most recent JSON snapshot of prefix, or None if there is none."""
        path = self.latest(prefix)
        if path is None:
            return None
        logger.info("Loading %s snapshot %s", prefix, path)
        return TillerData.from_dict(json.loads(path.read_text(encoding="utf-8")))

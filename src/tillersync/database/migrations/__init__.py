"""Versioned SQL schema migrations.

Each version ``N`` ships ``migration_NN_up.sql`` and ``migration_NN_down.sql``.
The applied version lives in the single-row ``schema_version`` table and is
rewritten in the same transaction as the script that changes it.
"""

import logging
from dataclasses import dataclass
from importlib import resources
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

CURRENT_VERSION = 2


class MigrationError(RuntimeError):
    """A migration is missing or failed to apply."""


@dataclass(frozen=True)
class Migration:
    """Up and down SQL scripts for one schema version."""

    version: int
    up: str
    down: str


def _read_script(name: str) -> str:
    return resources.files(__name__).joinpath(name).read_text(encoding="utf-8")


def load_migrations() -> dict[int, Migration]:
    """Load the bundled migration scripts, keyed by version."""
    return {
        version: Migration(
            version=version,
            up=_read_script(f"migration_{version:02d}_up.sql"),
            down=_read_script(f"migration_{version:02d}_down.sql"),
        )
        for version in range(1, CURRENT_VERSION + 1)
    }


def split_statements(script: str) -> list[str]:
    """Split a script on ';' and drop fragments that hold only comments."""
    statements = []
    for fragment in script.split(";"):
        lines = [
            line for line in fragment.splitlines()
            if line.strip() and not line.strip().startswith("--")
        ]
        if lines:
            statements.append("\n".join(lines))
    return statements


def ensure_version_table(session: Session) -> int:
    """Create schema_version if needed and return the recorded version."""
    try:
        session.execute(
            text("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)")
        )
        version = session.execute(text("SELECT version FROM schema_version")).scalar()
        if version is None:
            session.execute(text("INSERT INTO schema_version (version) VALUES (0)"))
            version = 0
        session.commit()
    except Exception:
        session.rollback()
        raise
    return version


def get_version(session: Session) -> int:
    version = session.execute(text("SELECT version FROM schema_version")).scalar()
    session.commit()
    return version


def run(
    session: Session,
    current: int,
    target: int,
    migrations: Optional[dict[int, Migration]] = None,
) -> None:
    """Move the schema from version current to version target.

    Every script the move needs is checked for before any of them runs.
    Scripts run in order (ascending to upgrade, descending to downgrade),
    each in its own transaction together with the schema_version update.

    Args:
        session: Session bound to the database to migrate
        current: Version the database is at
        target: Version to migrate to
        migrations: Scripts by version; defaults to the bundled scripts

    Raises:
        MigrationError: If a needed version is missing or a script fails
    """
    if current == target:
        return
    if migrations is None:
        migrations = load_migrations()

    if target > current:
        steps = [(v, v) for v in range(current + 1, target + 1)]
    else:
        steps = [(v, v - 1) for v in range(current, target, -1)]

    missing = [v for v, _ in steps if v not in migrations]
    if missing:
        raise MigrationError(
            f"Cannot migrate schema from version {current} to {target}: "
            f"missing migration(s) {', '.join(str(v) for v in missing)}"
        )

    for version, new_version in steps:
        migration = migrations[version]
        script = migration.up if target > current else migration.down
        direction = "up" if target > current else "down"
        logger.info("Applying migration %d (%s)", version, direction)
        try:
            for statement in split_statements(script):
                session.execute(text(statement))
            session.execute(
                text("UPDATE schema_version SET version = :version"),
                {"version": new_version},
            )
            session.commit()
        except Exception as e:
            session.rollback()
            raise MigrationError(
                f"Migration {version} ({direction}) failed: {e}"
            ) from e

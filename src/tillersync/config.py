"""Configuration stored in the tillersync home directory.

Layout of the home directory::

    config.json
    tiller.sqlite
    .backups/
    .secrets/token.json
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from tillersync.domain.errors import ConfigError

logger = logging.getLogger(__name__)

APP_NAME = "tiller"
CONFIG_VERSION = 1
DEFAULT_BACKUP_COPIES = 5

CONFIG_FILE = "config.json"
SQLITE_FILE = "tiller.sqlite"
BACKUPS_DIR = ".backups"
SECRETS_DIR = ".secrets"
TOKEN_FILE = "token.json"

MODE_GOOGLE = "google"
MODE_TESTING = "testing"
MODES = (MODE_GOOGLE, MODE_TESTING)


def resolve_home(home: Optional[Union[str, Path]] = None) -> Path:
    """Return the home directory: the argument, else $TILLER_HOME, else ~/tiller."""
    if home is None:
        home = os.environ.get("TILLER_HOME")
    if home is None:
        return Path.home() / APP_NAME
    return Path(home).expanduser()


def extract_spreadsheet_id(sheet_url: str) -> str:
    """Return the spreadsheet ID from a Google Sheets URL.

    ``https://docs.google.com/spreadsheets/d/<id>/edit#gid=0`` yields ``<id>``.
    A value without ``/d/`` is taken to be an ID already.

    Raises:
        ConfigError: If no ID can be found
    """
    url = sheet_url.strip()
    if "/d/" in url:
        url = url.split("/d/", 1)[1]
        for separator in ("/", "?", "#"):
            url = url.split(separator, 1)[0]
    if not url or "/" in url:
        raise ConfigError(f"Could not find a spreadsheet ID in '{sheet_url}'")
    return url


@dataclass
class Config:
    """Settings for one tillersync home directory."""

    home: Path
    sheet_url: str
    backup_copies: int = DEFAULT_BACKUP_COPIES
    token_path: Optional[Path] = None

    @property
    def config_path(self) -> Path:
        return self.home / CONFIG_FILE

    @property
    def sqlite_path(self) -> Path:
        return self.home / SQLITE_FILE

    @property
    def backups_dir(self) -> Path:
        return self.home / BACKUPS_DIR

    @property
    def secrets_dir(self) -> Path:
        return self.home / SECRETS_DIR

    @property
    def token_file(self) -> Path:
        return self.token_path or self.secrets_dir / TOKEN_FILE

    @property
    def spreadsheet_id(self) -> str:
        return extract_spreadsheet_id(self.sheet_url)

    @classmethod
    def create(
        cls,
        home: Union[str, Path],
        sheet_url: str,
        backup_copies: int = DEFAULT_BACKUP_COPIES,
    ) -> "Config":
        """Create the home directory layout and write config.json.

        Raises:
            ConfigError: If a configuration already exists or the values are invalid
        """
        config = cls(home=Path(home), sheet_url=sheet_url, backup_copies=backup_copies)
        if config.config_path.exists():
            raise ConfigError(f"A configuration already exists at {config.config_path}")
        config.validate()

        config.home.mkdir(parents=True, exist_ok=True)
        config.backups_dir.mkdir(exist_ok=True)
        config.secrets_dir.mkdir(exist_ok=True)
        config.save()
        logger.info("Created configuration at %s", config.config_path)
        return config

    @classmethod
    def load(cls, home: Union[str, Path]) -> "Config":
        """Load config.json from home.

        Raises:
            ConfigError: If the file is missing or invalid
        """
        home = Path(home)
        path = home / CONFIG_FILE
        if not path.exists():
            raise ConfigError(
                f"No configuration found at {path}. Run 'tillersync init' first."
            )
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration file {path}: {e}") from e

        if not isinstance(payload, dict) or not payload.get("sheet_url"):
            raise ConfigError(f"Invalid configuration file {path}: 'sheet_url' is required")
        if payload.get("config_version", CONFIG_VERSION) != CONFIG_VERSION:
            raise ConfigError(
                f"Unsupported config_version {payload['config_version']} in {path}"
            )

        token_path = payload.get("token_path")
        config = cls(
            home=home,
            sheet_url=payload["sheet_url"],
            backup_copies=payload.get("backup_copies", DEFAULT_BACKUP_COPIES),
            token_path=Path(token_path) if token_path else None,
        )
        config.validate()
        config.backups_dir.mkdir(exist_ok=True)
        return config

    def validate(self) -> None:
        if not isinstance(self.backup_copies, int) or self.backup_copies < 1:
            raise ConfigError(
                f"backup_copies must be a positive integer, got {self.backup_copies!r}"
            )
        extract_spreadsheet_id(self.sheet_url)

    def save(self) -> None:
        payload = {
            "app_name": APP_NAME,
            "config_version": CONFIG_VERSION,
            "sheet_url": self.sheet_url,
            "backup_copies": self.backup_copies,
        }
        if self.token_path is not None:
            payload["token_path"] = str(self.token_path)
        self.config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

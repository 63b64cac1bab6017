"""Sheet factory functions."""

from tillersync.config import MODE_GOOGLE, MODE_TESTING, Config
from tillersync.domain.errors import ConfigError
from tillersync.sheets.base import Sheet
from tillersync.sheets.google import GoogleSheet, load_credentials
from tillersync.sheets.memory import MemorySheet


def create_sheet(config: Config, mode: str = MODE_GOOGLE) -> Sheet:
    """Create the Sheet for a run.

    Args:
        config: Loaded configuration
        mode: 'google' for the spreadsheet in config, 'testing' for a seeded
            in-memory sheet

    Returns:
        Sheet instance
    """
    if mode == MODE_TESTING:
        return MemorySheet.seeded()
    if mode == MODE_GOOGLE:
        credentials = load_credentials(config.token_file)
        return GoogleSheet(config.spreadsheet_id, credentials)
    raise ConfigError(f"Unknown sheet mode '{mode}'")

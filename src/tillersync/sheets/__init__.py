"""Spreadsheet access for tillersync."""

from tillersync.sheets.base import Sheet, SheetError, SheetRange
from tillersync.sheets.memory import MemorySheet
from tillersync.sheets.tiller import TillerClient

__all__ = ["Sheet", "SheetError", "SheetRange", "MemorySheet", "TillerClient"]

"""Utility functions for tillersync."""

from tillersync.utils.date_parser import format_sheet_date, parse_date
from tillersync.utils.ids import generate_transaction_id

__all__ = ["format_sheet_date", "parse_date", "generate_transaction_id"]

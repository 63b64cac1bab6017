"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_date(date_str: str, today: date | None = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - Absolute dates: "2025-01-15", "1/15/2025", "January 15, 2025", etc.
    - Relative dates: "today", "yesterday", "last friday", "last month"

    Args:
        date_str: Date string in various formats
        today: Date that relative dates count from (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in relative_dates:
        return relative_dates[text]

    if text.startswith("last "):
        period = text[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        if period in _WEEKDAYS:
            days_ago = (today.weekday() - _WEEKDAYS.index(period)) % 7 or 7
            return today - timedelta(days=days_ago)

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def format_sheet_date(value: date) -> str:
    """Format a date the way Tiller writes dates: month/day/year without padding."""
    return f"{value.month}/{value.day}/{value.year}"

"""
Month utility functions.

This module parses the ``yyyy-mm`` month argument, computes the default
(previous) month and formats calendar labels.
"""

from datetime import date
from typing import Optional, Tuple
import re

# Calendar columns, Monday first
WEEKDAY_LABELS = ['月', '火', '水', '木', '金', '土', '日']


class MonthParseError(ValueError):
    """Exception raised when month parsing fails."""
    pass


def parse_month(month_text: str) -> Tuple[int, int]:
    """
    Parse a "yyyy-mm" month argument into (year, month).

    Args:
        month_text: Month in the form "yyyy-mm" (e.g. "2006-01")

    Returns:
        Tuple of (year, month)

    Raises:
        MonthParseError: If the format is invalid or the month is out of range

    Examples:
        >>> parse_month("2006-01")
        (2006, 1)
        >>> parse_month("2020-12")
        (2020, 12)
    """
    if not month_text or not month_text.strip():
        raise MonthParseError("Month cannot be empty")

    match = re.match(r'^(\d{4})-(\d{2})$', month_text.strip())
    if not match:
        raise MonthParseError(f"Invalid month: '{month_text}'. Expected format: yyyy-mm (e.g. 2006-01)")

    year = int(match.group(1))
    month = int(match.group(2))

    if not (1 <= month <= 12):
        raise MonthParseError(f"Month {month} out of range (must be 01-12)")

    return (year, month)


def previous_month(today: Optional[date] = None) -> Tuple[int, int]:
    """
    Return (year, month) of the month before ``today``.

    Examples:
        >>> previous_month(date(2006, 1, 15))
        (2005, 12)
    """
    if today is None:
        today = date.today()

    if today.month == 1:
        return (today.year - 1, 12)
    return (today.year, today.month - 1)


def format_month(year: int, month: int) -> str:
    """Format (year, month) as "yyyy-mm"."""
    return f"{year:04d}-{month:02d}"

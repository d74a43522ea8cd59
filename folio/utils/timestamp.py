"""Timestamp and display-date formatting utilities."""

import re
from datetime import datetime
from typing import Optional

MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

PRESENT = "Present"

# YYYY-MM, YYYY-MM-DD, YYYY/MM, with an optional ISO time suffix
_YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})[-/](\d{1,2})(?:[-/]\d{1,2})?(?:[T ].*)?$")
_YEAR_PATTERN = re.compile(r"^(\d{4})$")
# "Jan 2024", "January 2024"
_MONTH_NAME_PATTERN = re.compile(r"^([A-Za-z]{3,9})\.?\s+(\d{4})$")


def now() -> str:
    """Timestamp suitable for directory names (e.g., 20251114_123456)."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def format_month_year(date_string: Optional[str]) -> str:
    """
    Format a stored date string as "Mon YYYY".

    Calendar dates are read without any timezone conversion, so "2022-01"
    is always "Jan 2022". Empty or missing dates render as empty text.
    Year-only dates render as the bare year. Free text that is not a
    recognizable date ("Summer 2020") is returned as written.

    Examples:
        format_month_year("2024-01")        # "Jan 2024"
        format_month_year("2024-01-15")     # "Jan 2024"
        format_month_year("")               # ""
        format_month_year("2019")           # "2019"
    """
    if not date_string:
        return ""

    text = date_string.strip()
    if not text:
        return ""

    match = _YEAR_MONTH_PATTERN.match(text)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        if 1 <= month <= 12:
            return f"{MONTH_ABBREVIATIONS[month - 1]} {year:04d}"
        return text

    if _YEAR_PATTERN.match(text):
        return text

    match = _MONTH_NAME_PATTERN.match(text)
    if match:
        prefix = match.group(1)[:3].title()
        if prefix in MONTH_ABBREVIATIONS:
            return f"{prefix} {match.group(2)}"

    return text


def format_date_range(
    start_date: Optional[str],
    end_date: Optional[str],
    current: bool = False,
) -> str:
    """
    Format a start/end pair as "Mon YYYY - Mon YYYY".

    When `current` is set the end is always "Present", regardless of any
    stored end date. When both ends are empty the range is empty.
    """
    start = format_month_year(start_date)
    end = PRESENT if current else format_month_year(end_date)

    if not start and not end:
        return ""
    if not end:
        return start
    if not start:
        return end
    return f"{start} - {end}"

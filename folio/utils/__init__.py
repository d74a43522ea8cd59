"""
Shared utilities for FOLIO.

Common functionality used across contexts:
- Logger setup
- Date and timestamp formatting
- Text processing (filenames, slugs)
- PDF inspection
"""

from folio.utils.timestamp import format_date_range, format_month_year, now

__all__ = ["format_date_range", "format_month_year", "now"]

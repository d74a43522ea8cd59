"""
Text processing utilities for filenames, slugs and display.
"""

import re
from typing import Iterable, List

_NON_WORD = re.compile(r"[^A-Za-z0-9_]")
_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def sanitize_filename_stem(title: str, fallback: str = "resume") -> str:
    """
    Derive a filename stem from a free-text title.

    Every character outside [A-Za-z0-9_] is stripped and the result is
    lowercased. An empty result becomes the fallback.

    Examples:
        >>> sanitize_filename_stem("Jane Doe - Resume (2024)")
        'janedoeresume2024'
        >>> sanitize_filename_stem("???")
        'resume'
    """
    stem = _NON_WORD.sub("", title or "").lower()
    return stem or fallback


def slugify(text: str) -> str:
    """
    Lowercase URL slug with hyphen separators.

    Examples:
        >>> slugify("Jane Doe Resume!")
        'jane-doe-resume'
    """
    return _SLUG_SEPARATORS.sub("-", (text or "").lower()).strip("-")


def join_nonempty(parts: Iterable[str], separator: str = " | ") -> str:
    """Join the non-empty, stripped parts with a separator."""
    return separator.join(p.strip() for p in parts if p and p.strip())


def dedupe_preserving_order(items: Iterable[str]) -> List[str]:
    """Remove case-insensitive duplicates, keeping the first spelling."""
    seen = set()
    result = []
    for item in items:
        key = item.lower()
        if key not in seen:
            seen.add(key)
            result.append(item)
    return result

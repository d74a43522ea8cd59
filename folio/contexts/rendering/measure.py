"""
Text measurement with PDF font metrics.

Layout, preview and export all wrap text through this module, so a line
break chosen while paginating is the same line break drawn in the PDF.
Widths come from reportlab's standard Type 1 metrics (Helvetica and Times
families), which need no font files.
"""

from functools import lru_cache
from typing import List, Tuple

from reportlab.pdfbase import pdfmetrics


def pdf_safe_text(text: str) -> str:
    """Replace characters the standard PDF fonts cannot encode with '?'."""
    return text.encode("cp1252", "replace").decode("cp1252")


def text_width(text: str, font: str, size: float) -> float:
    return pdfmetrics.stringWidth(pdf_safe_text(text), font, size)


def ascent(font: str, size: float) -> float:
    """Distance from the top of the em box to the baseline."""
    return pdfmetrics.getAscent(font, size)


def _break_word(word: str, font: str, size: float, width: float) -> List[str]:
    """Split a single word wider than the line into character chunks."""
    pieces = []
    current = ""
    for char in word:
        if current and text_width(current + char, font, size) > width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


@lru_cache(maxsize=4096)
def _wrap_cached(text: str, font: str, size: float, width: float) -> Tuple[str, ...]:
    lines = []
    space = text_width(" ", font, size)

    for paragraph in text.split("\n"):
        words = paragraph.split()
        current = ""
        current_width = 0.0
        for word in words:
            word_width = text_width(word, font, size)
            if word_width > width:
                if current:
                    lines.append(current)
                *full, current = _break_word(word, font, size, width)
                lines.extend(full)
                current_width = text_width(current, font, size)
                continue
            if not current:
                current, current_width = word, word_width
            elif current_width + space + word_width <= width:
                current = f"{current} {word}"
                current_width += space + word_width
            else:
                lines.append(current)
                current, current_width = word, word_width
        if current:
            lines.append(current)

    return tuple(lines)


class TextMeasurer:
    """
    Greedy word wrapping against a fixed width.

    Deterministic for identical input; results are cached per
    (text, font, size, width).
    """

    def wrap(self, text: str, font: str, size: float, width: float) -> List[str]:
        """
        Wrap text into lines no wider than width.

        Newlines start a new line; blank lines are dropped. Words longer
        than the whole line are broken between characters.
        """
        if not text or not text.strip():
            return []
        return list(_wrap_cached(text, font, float(size), round(float(width), 2)))

    def width(self, text: str, font: str, size: float) -> float:
        return text_width(text, font, size)

"""
PDF inspection for exported artifacts.

Reads an exported PDF back (PyPDF2 for structure, pdfplumber for
characters) so tests and layout diagnostics can check that each block's
text landed on the page, and inside the horizontal span, the layout
promised.

Main class:
    PDFDocument: Character-level reader with span-restricted line assembly.

Helper functions:
    page_count: Quick page count without character extraction.
    normalize_for_matching: Text normalization for fuzzy matching.
    cluster_by_y_tolerance: Y-coordinate clustering for line detection.
"""

import io
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple, Union

import pdfplumber
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

PdfSource = Union[str, Path, bytes]

# Horizontal range (x0, x1) in points
Span = Tuple[float, float]


def _open_source(source: PdfSource) -> Union[str, BinaryIO]:
    """Return something PdfReader and pdfplumber can both open."""
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    return str(source)


def page_count(source: PdfSource) -> Optional[int]:
    """Get page count from PDF path or bytes, or None if unreadable."""
    try:
        return len(PdfReader(_open_source(source)).pages)
    except (PdfReadError, OSError, ValueError):
        return None


def normalize_for_matching(text: str) -> str:
    """Keep only lowercase alphanumeric characters for fuzzy text matching."""
    return "".join(c for c in text.lower() if c.isalnum())


def cluster_by_y_tolerance(chars: List[dict], tolerance: float = 3.0) -> List[List[dict]]:
    """
    Group characters into lines by Y-coordinate proximity.

    Bold and regular faces sit on slightly different tops; the tolerance
    keeps them on one line.
    """
    if not chars:
        return []

    sorted_chars = sorted(chars, key=lambda c: c["top"])
    lines = [[sorted_chars[0]]]
    current_y = sorted_chars[0]["top"]

    for char in sorted_chars[1:]:
        if abs(char["top"] - current_y) <= tolerance:
            lines[-1].append(char)
        else:
            lines.append([char])
            current_y = char["top"]

    return lines


class PDFDocument:
    """
    Exported PDF read back character by character.

    Characters are extracted once, on first access, and kept as plain
    dicts (text, x0, top). Pages are 1-indexed, as printed.

    Args:
        source: Path to a PDF file or the PDF bytes themselves
        y_tolerance: Max Y-distance (points) to group characters as one line

    Example:
        >>> pdf = PDFDocument(artifact.content)
        >>> pdf.contains("Jane Doe", page=1)
        True
        >>> pdf.get_lines(page=1, span=(36.0, 186.0))  # left rail only
    """

    def __init__(self, source: PdfSource, y_tolerance: float = 3.0):
        if isinstance(source, (str, Path)) and not Path(source).exists():
            raise FileNotFoundError(f"PDF not found: {source}")

        self.source = source
        self.y_tolerance = y_tolerance
        self._chars: Optional[Dict[int, List[dict]]] = None
        self._page_count: Optional[int] = None

    @property
    def page_count(self) -> int:
        if self._page_count is None:
            self._page_count = page_count(self.source) or 0
        return self._page_count

    def _get_chars(self) -> Dict[int, List[dict]]:
        if self._chars is None:
            self._chars = {}
            with pdfplumber.open(_open_source(self.source)) as pdf:
                for page_num, page in enumerate(pdf.pages, start=1):
                    self._chars[page_num] = [
                        {"text": c["text"], "x0": c["x0"], "top": c["top"]} for c in page.chars
                    ]
        return self._chars

    def get_lines(self, page: int, span: Optional[Span] = None) -> List[str]:
        """Text lines of a page, top to bottom, optionally only characters starting inside span."""
        chars = self._get_chars().get(page, [])
        if span is not None:
            x0, x1 = span
            chars = [c for c in chars if x0 <= c["x0"] < x1]

        lines = []
        for line in cluster_by_y_tolerance(chars, tolerance=self.y_tolerance):
            line.sort(key=lambda c: c["x0"])
            lines.append("".join(c["text"] for c in line))
        return lines

    def get_text(self, page: int) -> str:
        return "\n".join(self.get_lines(page))

    def get_character_stream(self, page: int, span: Optional[Span] = None) -> str:
        """Normalized character stream for a page or a span of it (for fuzzy containment checks)."""
        return normalize_for_matching("".join(self.get_lines(page, span)))

    def contains(self, text: str, page: int, span: Optional[Span] = None) -> bool:
        """True if the normalized text appears on the page (optionally within span)."""
        return normalize_for_matching(text) in self.get_character_stream(page, span)

"""Custom exceptions for the rendering context."""

from typing import Optional


class CaptureError(Exception):
    """
    Exception raised by a capture surface when one page cannot be captured.

    Attributes:
        message: Error description
        page_index: Zero-based page index being captured
    """

    def __init__(self, message: str, page_index: Optional[int] = None):
        self.message = message
        self.page_index = page_index

        parts = [message]
        if page_index is not None:
            parts.append(f"Page: {page_index + 1}")

        super().__init__("\n".join(parts))


class ExportError(Exception):
    """
    Single terminal error for a failed export.

    An export either produces a complete document or raises this; partial
    output is discarded.

    Attributes:
        message: Error description
        page_index: Page being captured when the failure happened (None if not page-specific)
        cause: The underlying exception
    """

    def __init__(
        self,
        message: str,
        page_index: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.page_index = page_index
        self.cause = cause

        parts = [message]
        if page_index is not None:
            parts.append(f"Failed on page {page_index + 1}")
        if cause is not None:
            parts.append(f"Cause: {type(cause).__name__}: {cause}")

        super().__init__("\n".join(parts))

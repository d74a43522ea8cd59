"""Custom exceptions for the assist context."""

from typing import Optional


class TextGenerationError(Exception):
    """
    Exception raised when a text-generation request fails.

    Attributes:
        message: Error description
        operation: Which request failed ("summary", "bullets", "analysis")
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        self.message = message
        self.operation = operation

        parts = [message]
        if operation:
            parts.append(f"Operation: {operation}")

        super().__init__("\n".join(parts))

"""Custom exceptions for the templating context."""

from typing import List, Optional


class InvalidResumeStructureError(ValueError):
    """
    Exception raised when resume data cannot be coerced into the canonical model.

    Raised for structurally wrong input (a collection that is not a list, an
    entry that is not a mapping) and for legacy shapes that must go through
    normalize_resume() first. Missing or empty fields are never an error here:
    the model is always renderable.

    Attributes:
        message: Error description
        path: Dotted path of the offending value (e.g., "skills[2]")
    """

    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path

        parts = [message]
        if path:
            parts.append(f"At: {path}")

        super().__init__("\n".join(parts))


class UnknownPresetError(ValueError):
    """
    Exception raised when a theme preset name is not defined.

    Attributes:
        preset_name: The requested preset
        available: Preset names that do exist
    """

    def __init__(self, preset_name: str, available: List[str]):
        self.preset_name = preset_name
        self.available = available
        super().__init__(f"Preset '{preset_name}' not found. Available presets: {available}")

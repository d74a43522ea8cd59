"""
Templating context logger.

Provides logging interface for templating context with automatic [template] prefix.
All templating modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import List

from loguru import logger

from folio.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[template]"


def setup_templating_logger(log_dir: Path, phase: str = "template") -> Path:
    """
    Setup logger for templating context.

    Args:
        log_dir: Directory for this templating session
        phase: Phase name for provenance ("migrate" or "resolve")

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="template",
        log_dir=log_dir,
        extra_provenance={"Phase": phase},
    )


def _log_info(message: str) -> None:
    """Log info message with [template] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [template] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_template_fallback(requested: str, fallback: str) -> None:
    """Log that an unknown template id was replaced by the default."""
    _log_debug(f"Unknown template '{requested}', falling back to '{fallback}'")


def log_normalization_result(migrated: bool, changes: List[str]) -> None:
    """Log the outcome of a legacy-record migration."""
    if not migrated:
        _log_debug("Resume already canonical, nothing to migrate")
        return

    _log_info(f"Migrated legacy resume record ({len(changes)} change(s))")
    for change in changes:
        _log_debug(f"  {change}")

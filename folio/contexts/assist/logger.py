"""
Assist context logger.

Provides logging interface for assist context with automatic [assist] prefix.
All assist modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from folio.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[assist]"


def setup_assist_logger(log_dir: Path, provider: str = "mock") -> Path:
    """
    Setup logger for assist context.

    Args:
        log_dir: Directory for this session
        provider: Text generation provider name (recorded in provenance)

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="assist",
        log_dir=log_dir,
        extra_provenance={"Provider": provider},
    )


def _log_success(message: str) -> None:
    """Log success message with [assist] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [assist] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [assist] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_generation_applied(field: str, sequence: int) -> None:
    _log_success(f"Applied generated text to {field} (request #{sequence})")


def log_generation_discarded(field: str, sequence: int, latest: int) -> None:
    """Log a result that arrived after a newer request or edit for the same field."""
    _log_debug(f"Discarding stale result for {field} (request #{sequence}, latest #{latest})")


def log_generation_failed(field: str, error: BaseException) -> None:
    _log_warning(f"Generation failed for {field}: {type(error).__name__}: {error}")

"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from folio.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path, template_id: str = None) -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session
        template_id: Template being rendered (recorded in the provenance header)

    Returns:
        Path to log file

    Example:
        from folio.contexts.rendering.logger import setup_rendering_logger

        log_file = setup_rendering_logger(log_dir, template_id="classic")
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Template": template_id or "(from theme)"},
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_oversized_unit(kind: str, source_id: str, height: float, available: float, page: int) -> None:
    """Log an atomic unit that cannot fit on any page."""
    _log_warning(
        f"Oversized {kind} '{source_id}' ({height:.1f}pt > {available:.1f}pt content height), "
        f"placed alone on page {page + 1}"
    )


def log_section_fault(section: str, error: BaseException) -> None:
    """Log a section that could not be composed; the rest of the document still renders."""
    _log_error(f"Skipping section '{section}': {type(error).__name__}: {error}")


def log_unit_fault(section: str, source_id: str, error: BaseException) -> None:
    """Log one entry that could not be composed; its siblings still render."""
    _log_error(f"Skipping {section} entry '{source_id}': {type(error).__name__}: {error}")


def log_layout_result(template_id: str, blocks: list, elapsed_time: float) -> None:
    """Log layout summary: block and page counts per column."""
    pages = sorted({block.page for block in blocks})
    overflowed = [block for block in blocks if block.overflow]
    _log_debug(
        f"Layout '{template_id}': {len(blocks)} blocks on {len(pages)} page(s) ({elapsed_time * 1000:.1f}ms)"
    )
    if overflowed:
        _log_warning(f"{len(overflowed)} oversized unit(s) in layout '{template_id}'")


def log_export_start(title: str, filename: str, page_total: int) -> None:
    """Log start of export with context."""
    _log_info(f"Starting export: {title}")
    _log_debug(f"  Filename: {filename}")
    _log_debug(f"  Pages: {page_total}")


def log_export_result(filename: str, artifact=None, error: BaseException = None, elapsed_time: float = 0.0) -> None:
    """
    Log export result.

    Args:
        filename: Target filename
        artifact: ExportArtifact on success
        error: ExportError on failure
        elapsed_time: Time taken to export
    """
    if artifact is not None:
        _log_success(
            f"Exported {filename}: {artifact.page_count} page(s), {len(artifact.content)} bytes ({elapsed_time:.2f}s)"
        )
    else:
        _log_error(f"Export failed: {filename} ({elapsed_time:.2f}s)")
        if error is not None:
            for line in str(error).splitlines():
                _log_error(f"  {line}")

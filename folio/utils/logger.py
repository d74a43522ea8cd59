"""
Session logging shared by every folio context.

One CLI run is one session: a timestamped directory under the logs root
holding one {context}.log file with a provenance header. Console output
goes to stderr so commands that print documents (migrate, layout --json)
keep stdout clean.

Context-specific wrappers live in contexts/{context}/logger.py; library
code only logs, and only command-line entry points configure sinks.
"""

import os
import sys
from pathlib import Path
from typing import Optional, TextIO

from dotenv import load_dotenv
from loguru import logger

import folio
from folio.utils.timestamp import now

load_dotenv()
CONSOLE_LEVEL = os.getenv("FOLIO_LOG_LEVEL", "INFO")

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "<level>{level: <7}</level> | <level>{message}</level>"

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def session_log_dir(logs_root: Path, command: str) -> Path:
    """Directory for one command run, e.g. outs/logs/export_20251114_123456."""
    return Path(logs_root) / f"{command}_{now()}"


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: dict = None,
    level_colors: dict = None,
    console: Optional[TextIO] = None,
) -> Path:
    """
    Route loguru to a session log file plus a console stream.

    The file captures DEBUG and above; the console shows FOLIO_LOG_LEVEL
    (INFO by default) and above.

    Args:
        context_name: Context identifier ("render", "template", "assist")
        log_dir: Directory for this session (created if missing)
        extra_provenance: Additional key-value pairs for the provenance header
        level_colors: Override default level colors (e.g., {"INFO": "<cyan>"})
        console: Console stream (sys.stderr by default)

    Returns:
        Path to the log file

    Example:
        log_file = setup_logger(
            context_name="render",
            log_dir=session_log_dir(Path("outs/logs"), "export"),
            extra_provenance={"Template": "classic"}
        )
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()

    for level_name, color in {**LEVEL_COLORS, **(level_colors or {})}.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(console or sys.stderr, format=CONSOLE_FORMAT, level=CONSOLE_LEVEL, colorize=True)

    log_provenance({"Context": context_name, **(extra_provenance or {})})

    return log_file


def reset_logger() -> None:
    """Drop session sinks and fall back to a plain stderr sink."""
    logger.remove()
    logger.add(sys.stderr, level=CONSOLE_LEVEL)


def log_provenance(extra_context: dict = None) -> None:
    """
    Write the provenance header: command line, working directory,
    interpreter and folio versions, plus any extra context.
    """
    logger.info("=" * 80)
    logger.info(f"Command: {' '.join(sys.argv)}")
    logger.info(f"Working directory: {Path.cwd()}")
    logger.info(f"Python: {sys.version.split()[0]}")
    logger.info(f"Folio: {folio.__version__}")

    for key, value in (extra_context or {}).items():
        logger.info(f"{key}: {value}")

    logger.info("=" * 80)

"""Utility functions for treesync."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

DEFAULT_LOG_DIR = Path.home() / ".treesync"


def setup_logging(
    log_file: Optional[str] = "treesync.log",
    console: bool = False,
    level: str = "INFO",
    home_dir: Path = DEFAULT_LOG_DIR,
) -> None:  # pragma: no cover
    """
    Configure loguru sinks for the process.

    Args:
        log_file: File name under home_dir, or None for no file sink
        console: Also log to stderr
        level: Minimum level for every sink
        home_dir: Directory that holds the log file
    """
    logger.remove()

    if log_file:
        log_path = home_dir / log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            level=level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
            enqueue=True,
            colorize=False,
        )

    if console:
        logger.add(sys.stderr, level=level, backtrace=True, diagnose=False, colorize=True)

    logger.debug(f"Logging configured: file={log_file} console={console} level={level}")

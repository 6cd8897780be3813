"""
Logging setup: console plus one log file per day.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, once, by the CLI.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"

_HANDLER_MARK = "_signalfire_handler"


def log_file_path(log_dir: Path, now: Optional[datetime] = None) -> Path:
    """``<log_dir>/<YYYY-MM-DD>.log`` for the current UTC date."""
    now = now or datetime.now(timezone.utc)
    return log_dir / f"{now.strftime('%Y-%m-%d')}.log"


def configure_logging(log_dir: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Attach console and file handlers to the ``signalfire`` logger.

    Safe to call more than once; previously attached handlers are replaced.

    Args:
        log_dir: Directory for daily log files (None: console only)
        level: Minimum level to emit

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("signalfire")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    setattr(console, _HANDLER_MARK, True)
    logger.addHandler(console)

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file_path(log_dir), encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to set up log directory %s: %s", log_dir, exc)
        else:
            file_handler.setFormatter(formatter)
            setattr(file_handler, _HANDLER_MARK, True)
            logger.addHandler(file_handler)

    return logger

"""Logging configuration."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_handler: Optional[logging.StreamHandler] = None  # type: ignore[type-arg]


def setup_logging(level: str = "WARNING") -> None:
    """Route package log records to stderr at the given level.

    Calling it again changes the level and re-targets the current stderr.

    Args:
        level: Level name such as 'DEBUG' or 'WARNING'
    """
    global _handler

    log_level = getattr(logging, level.upper(), logging.WARNING)
    package_logger = logging.getLogger("time_tracker")
    package_logger.setLevel(log_level)

    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(_handler)
    else:
        _handler.setStream(sys.stderr)
    _handler.setLevel(log_level)

"""Logging configuration for the entity database."""

import logging
import sys
from enum import Enum
from typing import TextIO

PACKAGE_LOGGER = "entitydb"
LOG_FORMAT = "%(name)s  %(levelname)s  %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def to_numeric_level(level: str | LogLevel) -> int:
    """Convert a LogLevel enum or level name to a logging constant.

    Unknown names fall back to INFO.
    """
    level_str = level.value if isinstance(level, LogLevel) else level.upper()
    return getattr(logging, level_str, logging.INFO)


_handler: logging.Handler | None = None


def setup_logging(
    level: str | LogLevel = LogLevel.INFO,
    format_string: str | None = None,
    include_timestamp: bool = True,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Send the package's log records to a stream.

    Only the ``entitydb`` logger is configured; the root logger and any
    handlers the application installed are left alone. Calling it again
    replaces the handler installed by the previous call.

    Args:
        level: Level for the ``entitydb`` logger, as string or LogLevel enum
        format_string: Custom format string (optional)
        include_timestamp: Prefix records with their time when no format is given
        stream: Stream to write to, stdout by default

    Returns:
        The ``entitydb`` logger
    """
    global _handler

    if format_string is None:
        format_string = f"%(asctime)s  {LOG_FORMAT}" if include_timestamp else LOG_FORMAT

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler(stream or sys.stdout)
    _handler.setFormatter(logging.Formatter(format_string, datefmt=DATE_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(to_numeric_level(level))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, typically ``get_logger(__name__)``."""
    return logging.getLogger(name)

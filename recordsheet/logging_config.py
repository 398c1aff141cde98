"""Logging configuration helpers."""

import logging
import sys
from typing import Optional, TextIO, Union

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Union[int, str]) -> int:
    """Turn a level name such as ``"debug"`` into its number; unknown names map to INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: Union[int, str] = logging.INFO, stream: Optional[TextIO] = None
) -> None:
    """Configure application-wide logging.

    openpyxl reports unsupported workbook features through ``warnings``;
    those are routed into the ``py.warnings`` logger so they share the same
    handler.

    Args:
        level: Minimum logging level, as a number or a level name.
        stream: Destination stream. Defaults to standard output.
    """
    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(resolve_level(level))
    root_logger.handlers = [handler]
    logging.captureWarnings(True)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a configured logger instance."""
    return logging.getLogger(name)

"""Tests for logging configuration."""

from __future__ import annotations

import io
import logging

from recordsheet.logging_config import configure_logging, get_logger, resolve_level


def test_resolve_level() -> None:
    assert resolve_level(logging.WARNING) == logging.WARNING
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Error ") == logging.ERROR
    assert resolve_level("chatty") == logging.INFO


def test_configure_logging_installs_single_handler() -> None:
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers, root_logger.level
    stream = io.StringIO()

    try:
        configure_logging("DEBUG", stream=stream)
        configure_logging("DEBUG", stream=stream)
        get_logger("recordsheet.test").debug("Wrote %d rows", 3)

        assert len(root_logger.handlers) == 1
        assert root_logger.level == logging.DEBUG
    finally:
        root_logger.handlers = handlers
        root_logger.setLevel(level)
        logging.captureWarnings(False)

    assert "DEBUG recordsheet.test - Wrote 3 rows" in stream.getvalue()

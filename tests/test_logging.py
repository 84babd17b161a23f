"""Tests for ubergen.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from ubergen.logging import configure_logging, get_logger


def test_get_logger_nests_under_package_logger() -> None:
    assert get_logger().name == "ubergen"
    assert get_logger("rewriter").name == "ubergen.rewriter"


def test_configure_logging_levels_and_handler_reset() -> None:
    logger = configure_logging(verbose=True)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1

    logger = configure_logging(quiet=True)
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_configure_logging_writes_debug_records_to_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "ubergen.log"
    logger = configure_logging(quiet=True, log_file=log_file)

    get_logger("rewriter").debug("rewrote %s", "index.ts")
    for handler in logger.handlers:
        handler.flush()

    assert "ubergen.rewriter: rewrote index.ts" in log_file.read_text(encoding="utf-8")
    configure_logging()

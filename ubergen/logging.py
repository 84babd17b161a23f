"""Logging setup shared by the ubergen pipeline stages."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "ubergen"
_CONSOLE_FORMAT = "[ubergen] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a stage logger (``ubergen.<name>``) or the package root logger."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _level_for(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send ubergen records to stderr and, optionally, to ``log_file``.

    ``verbose`` enables per-file rewrite records; ``quiet`` keeps only the
    corrections and failures. The file sink always records at DEBUG so a
    failed run can be inspected after the fact.
    """
    level = _level_for(verbose, quiet)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    logger.addHandler(_handler(logging.StreamHandler(), level, _CONSOLE_FORMAT))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), logging.DEBUG, _FILE_FORMAT)
        )
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(level)

    return logger


__all__ = ["configure_logging", "get_logger"]

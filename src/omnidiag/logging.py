"""Logging configuration for omnidiag."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER_NAME = "omnidiag"

# Protocol errors from pygls (malformed messages, failed handlers it caught
# itself) land next to our own records, but its per-message chatter does not.
LIBRARY_LOGGERS = ("pygls",)
LIBRARY_MIN_LEVEL = logging.WARNING


def configure_logging(*, level: str = "INFO", log_file: Path | None = None) -> None:
    """
    Configure the omnidiag logger tree and the pygls loggers.

    Both write to one handler: a file when ``log_file`` is given, otherwise
    stderr, since stdout carries the stdio LSP transport. Library loggers
    never go below WARNING, even when omnidiag runs at DEBUG.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        log_file: Optional path to a log file.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    _install(logging.getLogger(ROOT_LOGGER_NAME), handler, log_level)
    for name in LIBRARY_LOGGERS:
        _install(logging.getLogger(name), handler, max(log_level, LIBRARY_MIN_LEVEL))


def _install(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return the ``omnidiag.<name>`` logger."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

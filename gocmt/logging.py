"""Logging utilities for gocmt runs."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "gocmt"

DEFAULT_LOG_FILE = Path("logfile.log")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the gocmt hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = DEFAULT_LOG_FILE
) -> logging.Logger:
    """Configure the gocmt logger with an append-only file sink and a quiet console.

    Per-file progress and diagnostics go to ``log_file``; the console only
    receives warnings unless ``verbose`` is set.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    stream_handler.setFormatter(logging.Formatter("[gocmt] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["DEFAULT_LOG_FILE", "configure_logging", "get_logger"]

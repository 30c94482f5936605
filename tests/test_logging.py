"""Tests for gocmt.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from gocmt.logging import configure_logging, get_logger


def test_configure_logging_appends_to_log_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logfile.log"
    log_file.write_text("earlier run\n", encoding="utf-8")

    logger = configure_logging(log_file=log_file)
    get_logger("orchestrator").info("Processing file: %s", "main.go")
    get_logger("orchestrator").debug("hidden without verbose")
    for handler in logger.handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert content.startswith("earlier run\n")
    assert "gocmt.orchestrator: Processing file: main.go" in content
    assert "hidden without verbose" not in content


def test_configure_logging_replaces_handlers(tmp_path: Path) -> None:
    configure_logging(log_file=tmp_path / "a.log")
    logger = configure_logging(verbose=True, log_file=None)

    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.DEBUG
    assert logger.propagate is False

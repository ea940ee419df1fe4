"""Tests for logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from ffp.config import LoggingSettings
from ffp.log import PACKAGE_LOGGER, configure_logging


def test_configure_logging_sets_level_and_console_handler() -> None:
    logger = configure_logging(LoggingSettings(level="info"), console=Console(file=None))

    assert logger.name == PACKAGE_LOGGER
    assert logger.level == logging.INFO
    assert sum(isinstance(handler, RichHandler) for handler in logger.handlers) == 1


def test_verbose_forces_debug() -> None:
    logger = configure_logging(LoggingSettings(level="ERROR"), verbose=True)

    assert logger.level == logging.DEBUG


def test_unknown_level_defaults_to_warning() -> None:
    logger = configure_logging(LoggingSettings(level="chatty"))

    assert logger.level == logging.WARNING


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging(LoggingSettings())
    logger = configure_logging(LoggingSettings())

    assert sum(isinstance(handler, RichHandler) for handler in logger.handlers) == 1


def test_rotating_file_handler_writes_records(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "ffp.log"
    logger = configure_logging(LoggingSettings(level="INFO", file=str(log_path), max_size_mb=1))

    logging.getLogger("ffp.fingerprint.pipeline").info("Fingerprinted 3 file(s)")
    for handler in logger.handlers:
        handler.flush()

    assert "Fingerprinted 3 file(s)" in log_path.read_text(encoding="utf-8")

    # Detach the file handler so the temp directory can be removed.
    configure_logging(LoggingSettings())

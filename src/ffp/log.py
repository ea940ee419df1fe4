"""Logging setup for the ffp CLI.

Library modules log through ``logging.getLogger(__name__)``; this module attaches
handlers to the ``ffp`` package logger only, so embedding applications keep
control of the root logger.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from ffp.config import LoggingSettings

PACKAGE_LOGGER = "ffp"
_HANDLER_MARKER = "_ffp_handler"


def _mark(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_MARKER, True)
    return handler


def configure_logging(
    settings: LoggingSettings,
    *,
    verbose: bool = False,
    console: Console | None = None,
) -> logging.Logger:
    """Attach console and optional rotating-file handlers to the package logger.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        settings: Logging section of the effective configuration.
        verbose: Force DEBUG level, reproducing the per-entry trace.
        console: Rich console for log output; defaults to stderr.

    Returns:
        logging.Logger: The configured package logger.
    """
    level = logging.DEBUG if verbose else logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_mark(rich_handler))

    if settings.file:
        path = Path(settings.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(_mark(file_handler))

    logger.setLevel(level)
    return logger


__all__ = ["PACKAGE_LOGGER", "configure_logging"]

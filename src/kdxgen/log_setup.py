"""Logging configuration for command line runs."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from kdxgen.config.models import LoggingSettings

ROOT_LOGGER_NAME = "kdxgen"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: LoggingSettings, *, verbose: bool = False) -> logging.Logger:
    """Attach the run's handlers to the ``kdxgen`` logger.

    Records always go to a rotating log file; ``verbose`` also echoes them to
    stderr. Handlers from an earlier call are closed and replaced.

    Args:
        settings: Logging section of the active configuration.
        verbose: Whether to echo log records to the console.

    Returns:
        logging.Logger: The configured package logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level = logging.getLevelName(settings.level.upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)

    log_path = Path(settings.file).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=settings.max_size_mb * 1024 * 1024,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    logger.addHandler(file_handler)

    if verbose:
        console_handler = RichHandler(console=Console(stderr=True), show_path=False)
        logger.addHandler(console_handler)

    return logger


__all__ = ["ROOT_LOGGER_NAME", "configure_logging"]

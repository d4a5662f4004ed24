"""Logging setup for the Vaultsort CLI and scheduler."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from vaultsort.config.models import LoggingSettings

LOG_FILENAME = "vaultsort.log"
_HANDLER_MARKER = "_vaultsort_handler"


def configure_logging(
    settings: LoggingSettings,
    *,
    log_dir: Path | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Attach console and rotating file handlers to the ``vaultsort`` logger.

    Handlers installed by an earlier call are replaced, so commands can call
    this once per invocation without duplicating output.

    Args:
        settings: Level and rotation settings.
        log_dir: Directory for ``vaultsort.log``; no file handler when omitted.
        console: Console used for rich log output; defaults to stderr.

    Returns:
        logging.Logger: The configured package logger.
    """
    logger = logging.getLogger("vaultsort")
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    console_handler.setLevel(level)
    setattr(console_handler, _HANDLER_MARKER, True)
    logger.addHandler(console_handler)

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_dir / LOG_FILENAME,
                maxBytes=max(1, settings.max_size_mb) * 1024 * 1024,
                backupCount=max(0, settings.backup_count),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.warning("File logging disabled: %s", exc)
        else:
            file_handler.setLevel(logging.DEBUG if level <= logging.INFO else logging.INFO)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
            setattr(file_handler, _HANDLER_MARKER, True)
            logger.addHandler(file_handler)
            logger.setLevel(min(level, file_handler.level))

    return logger


__all__ = ["configure_logging", "LOG_FILENAME"]

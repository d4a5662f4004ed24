"""Tests for logging setup."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Iterator

import pytest
from rich.logging import RichHandler

from vaultsort.config.models import LoggingSettings
from vaultsort.logging_config import LOG_FILENAME, configure_logging


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("vaultsort")
    original = list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        if handler not in original:
            logger.removeHandler(handler)
            handler.close()


def test_configure_logging_writes_rotating_file(
    tmp_path: Path, package_logger: logging.Logger
) -> None:
    configure_logging(LoggingSettings(level="INFO"), log_dir=tmp_path / "logs")

    logging.getLogger("vaultsort.organization").info("Moved: a.md -> Archive/a.md")
    for handler in package_logger.handlers:
        handler.flush()

    text = (tmp_path / "logs" / LOG_FILENAME).read_text(encoding="utf-8")
    assert "Moved: a.md -> Archive/a.md" in text


def test_configure_logging_replaces_own_handlers(
    tmp_path: Path, package_logger: logging.Logger
) -> None:
    configure_logging(LoggingSettings(), log_dir=tmp_path)
    configure_logging(LoggingSettings(), log_dir=tmp_path)

    rich_handlers = [h for h in package_logger.handlers if isinstance(h, RichHandler)]
    file_handlers = [
        h for h in package_logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
    ]
    assert len(rich_handlers) == 1
    assert len(file_handlers) == 1


def test_unknown_level_falls_back_to_warning(package_logger: logging.Logger) -> None:
    configure_logging(LoggingSettings(level="chatty"))

    assert package_logger.level == logging.WARNING

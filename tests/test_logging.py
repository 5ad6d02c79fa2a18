"""Tests for gitcherry.logging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from gitcherry.logging import configure_logging, get_logger


def test_get_logger_nests_under_gitcherry() -> None:
    assert get_logger("walk").name == "gitcherry.walk"
    assert get_logger().name == "gitcherry"


def test_console_is_quiet_below_warning_by_default() -> None:
    logger = configure_logging()

    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.WARNING
    assert logger.propagate is False


def test_repeated_configuration_replaces_handlers(tmp_path: Path) -> None:
    configure_logging(debug=True)
    logger = configure_logging(log_file=tmp_path / "cherry.log")

    assert len(logger.handlers) == 2
    assert logger.level == logging.DEBUG
    assert logger.handlers[0].level == logging.WARNING

    get_logger("test").debug("walked %d commits", 3)
    for handler in logger.handlers:
        handler.flush()
    assert "walked 3 commits" in (tmp_path / "cherry.log").read_text(encoding="utf-8")
    configure_logging()


def test_missing_log_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        configure_logging(log_file=tmp_path / "absent" / "cherry.log")

"""Diagnostics for gitcherry; the report itself always goes to stdout."""

from __future__ import annotations

import logging
from pathlib import Path

_ROOT = "gitcherry"
_CONSOLE_FORMAT = "[gitcherry] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Child of the `gitcherry` logger, e.g. `gitcherry.walk`."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def configure_logging(
    *, debug: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach a stderr handler and, when `log_file` is given, a DEBUG file handler.

    stderr only shows warnings unless `debug` is set. Calling this again
    replaces the handlers from the previous call. OSError from opening
    `log_file` propagates to the caller.
    """
    console_level = logging.DEBUG if debug else logging.WARNING
    logger = logging.getLogger(_ROOT)
    logger.setLevel(logging.DEBUG if log_file is not None else console_level)
    logger.propagate = False

    while logger.handlers:
        stale = logger.handlers[0]
        logger.removeHandler(stale)
        stale.close()

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]

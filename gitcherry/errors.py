"""Error taxonomy for gitcherry operations."""

from __future__ import annotations

FATAL_EXIT_CODE = 128
USAGE_EXIT_CODE = 129


class CherryError(RuntimeError):
    """Base class for terminal, user-visible failures."""

    exit_code = FATAL_EXIT_CODE


class UsageError(CherryError):
    """Raised when the supplied arguments cannot describe a comparison."""

    exit_code = USAGE_EXIT_CODE


class ResolutionError(CherryError):
    """Raised when an endpoint does not name a known commit."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown commit {name}")
        self.name = name


class RangeError(CherryError):
    """Raised when walk boundaries do not form a single a..b range."""


class WalkSetupError(CherryError):
    """Raised when the commit graph cannot be loaded for a walk."""


__all__ = [
    "CherryError",
    "FATAL_EXIT_CODE",
    "RangeError",
    "ResolutionError",
    "USAGE_EXIT_CODE",
    "UsageError",
    "WalkSetupError",
]

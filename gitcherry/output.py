"""Line-oriented rendering of classified commits."""

from __future__ import annotations

from typing import Iterable, TextIO

from .git.repository import AUTO_ABBREV, FULL_ABBREV, CommitSource
from .models import ClassifiedCommit

MINIMUM_ABBREV = 4
MAXIMUM_ABBREV = 40


def normalise_abbrev(value: int | None) -> int:
    """Clamp an --abbrev value the way git does; 0 keeps full ids, -1 picks the default."""
    if value is None:
        return FULL_ABBREV
    if value < 0:
        return AUTO_ABBREV
    if value and value < MINIMUM_ABBREV:
        return MINIMUM_ABBREV
    return min(value, MAXIMUM_ABBREV)


class OutputFormatter:
    """Renders `<sign> <id> [<summary>]` lines."""

    def __init__(
        self,
        source: CommitSource,
        *,
        verbose: bool = False,
        abbrev: int | None = FULL_ABBREV,
    ) -> None:
        self._source = source
        self.verbose = verbose
        self.abbrev = normalise_abbrev(abbrev)

    def format(self, classified: ClassifiedCommit) -> str:
        commit = classified.commit
        display_id = self._source.abbreviate(commit.oid, self.abbrev)
        if self.verbose:
            return f"{classified.sign} {display_id} {commit.summary}"
        return f"{classified.sign} {display_id}"

    def render(self, commits: Iterable[ClassifiedCommit]) -> str:
        return "".join(f"{self.format(item)}\n" for item in commits)

    def write(self, stream: TextIO, commits: Iterable[ClassifiedCommit]) -> None:
        stream.write(self.render(commits))


__all__ = ["MAXIMUM_ABBREV", "MINIMUM_ABBREV", "OutputFormatter", "normalise_abbrev"]

"""Two-phase classification of head commits against upstream."""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional

from .errors import RangeError
from .fingerprint import PatchFingerprinter
from .git.repository import CommitSource
from .git.walk import RevisionWalker
from .index import FingerprintIndex
from .logging import get_logger
from .models import ClassifiedCommit, Commit, Fingerprint, RevisionRange
from .ranges import CherryRange, RangeResolver


class CherryClassifier:
    """Tags every commit in head..upstream as new or already applied upstream.

    Phase one walks the inverse range (what upstream has that head lacks) and
    records a fingerprint for each single-parent commit. Phase two walks the
    head side and looks every commit up in that index. The walks share nothing
    but the index; merges are skipped from both.
    """

    def __init__(
        self,
        source: CommitSource,
        walker: RevisionWalker | None = None,
        fingerprinter: PatchFingerprinter | None = None,
    ) -> None:
        self._source = source
        self.walker = walker or RevisionWalker(source.commit)
        self.fingerprinter = fingerprinter or PatchFingerprinter(source)
        self.logger = get_logger("classifier")

    def classify(self, cherry_range: CherryRange) -> List[ClassifiedCommit]:
        """Return the head-only commits, oldest first, with their upstream tag."""
        if cherry_range.is_empty:
            self.logger.debug("Head and upstream are both %s; nothing to compare", cherry_range.head.oid)
            return []

        index = self.build_index(cherry_range.boundary)
        index.freeze()

        ordered: Deque[ClassifiedCommit] = deque()
        for commit in self.walker.walk(cherry_range.classify_boundary, max_parents=1):
            fingerprint = self._fingerprint(commit)
            upstream = fingerprint is not None and index.contains(fingerprint)
            if upstream:
                origin = index.origin(fingerprint)
                self.logger.debug(
                    "%s matches upstream %s", commit.oid[:12], origin.oid[:12] if origin else "?"
                )
            # The walk is newest first; prepending leaves the oldest commit at the front.
            ordered.appendleft(ClassifiedCommit(commit=commit, upstream=upstream))

        self.logger.debug(
            "Classified %d commits, %d already upstream",
            len(ordered),
            sum(1 for item in ordered if item.upstream),
        )
        return list(ordered)

    def build_index(self, boundary: RevisionRange) -> FingerprintIndex:
        """Fingerprint every commit reachable from the excluded side but not the included one."""
        if boundary.endpoints != 2:
            raise RangeError("need exactly one range")
        if len(boundary.included) != 1 or len(boundary.excluded) != 1:
            raise RangeError("not a range")

        index = FingerprintIndex()
        walked = 0
        for commit in self.walker.walk(boundary.inverted(), max_parents=1):
            walked += 1
            fingerprint = self._fingerprint(commit)
            if fingerprint is not None:
                index.insert(fingerprint, commit)
        self.logger.debug("Indexed %d fingerprints from %d upstream commits", len(index), walked)
        return index

    def _fingerprint(self, commit: Commit) -> Optional[Fingerprint]:
        if commit.is_root or commit.is_merge:
            return None
        return self.fingerprinter.fingerprint(commit)


def run_cherry(
    source: CommitSource,
    upstream: Optional[str] = None,
    head: Optional[str] = None,
    limit: Optional[str] = None,
    *,
    ignore_whitespace: bool = True,
) -> List[ClassifiedCommit]:
    """Resolve the endpoints and classify the head range in one call."""
    cherry_range = RangeResolver(source).resolve(upstream, head, limit)
    classifier = CherryClassifier(
        source,
        fingerprinter=PatchFingerprinter(source, ignore_whitespace=ignore_whitespace),
    )
    return classifier.classify(cherry_range)


__all__ = ["CherryClassifier", "run_cherry"]

"""Interpretation of the upstream/head/limit endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import ResolutionError, UsageError
from .git.repository import CommitSource
from .logging import get_logger
from .models import Commit, RevisionRange

DEFAULT_HEAD = "HEAD"


@dataclass(frozen=True)
class CherryRange:
    """Resolved endpoints of a cherry comparison."""

    head: Commit
    upstream: Commit
    limit: Optional[Commit] = None

    @property
    def is_empty(self) -> bool:
        return self.head.oid == self.upstream.oid

    @property
    def boundary(self) -> RevisionRange:
        """The upstream..head range used to collect upstream fingerprints."""
        return RevisionRange(included=(self.head.oid,), excluded=(self.upstream.oid,))

    @property
    def classify_boundary(self) -> RevisionRange:
        """The head-only range that gets reported, cut short at `limit`."""
        if self.limit is None:
            return self.boundary
        return self.boundary.with_excluded(self.limit.oid)


class RangeResolver:
    """Turns user-supplied endpoint names into a CherryRange."""

    def __init__(self, source: CommitSource) -> None:
        self._source = source
        self.logger = get_logger("ranges")

    def resolve(
        self,
        upstream: Optional[str] = None,
        head: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> CherryRange:
        if upstream is None:
            upstream = self._source.current_branch_upstream()
            if upstream is None:
                raise UsageError(
                    "current branch does not appear to be tracking any upstream branch; "
                    "please specify an <upstream>"
                )
            self.logger.debug("Using tracked upstream %s", upstream)

        head_commit = self._lookup(head or DEFAULT_HEAD)
        upstream_commit = self._lookup(upstream)
        resolved = CherryRange(head=head_commit, upstream=upstream_commit)
        if resolved.is_empty:
            # Nothing to report; the limit is never consulted.
            return resolved
        if limit is not None:
            resolved = CherryRange(
                head=head_commit, upstream=upstream_commit, limit=self._lookup(limit)
            )
        return resolved

    def _lookup(self, name: str) -> Commit:
        commit = self._source.resolve(name)
        if commit is None:
            raise ResolutionError(name)
        return commit


__all__ = ["CherryRange", "DEFAULT_HEAD", "RangeResolver"]

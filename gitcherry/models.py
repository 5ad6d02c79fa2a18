"""Core data models shared across gitcherry components."""

from dataclasses import dataclass, field, replace
from typing import Dict, NewType, Optional, Tuple

Fingerprint = NewType("Fingerprint", str)


@dataclass(frozen=True)
class Commit:
    """Immutable commit node; parents are object ids resolved through a CommitGraph."""

    oid: str
    parents: Tuple[str, ...] = ()
    author: str = ""
    timestamp: int = 0
    summary: str = ""

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


@dataclass
class CommitGraph:
    """Arena of commits addressed by object id."""

    commits: Dict[str, Commit] = field(default_factory=dict)

    def add(self, commit: Commit) -> Commit:
        return self.commits.setdefault(commit.oid, commit)

    def get(self, oid: str) -> Optional[Commit]:
        return self.commits.get(oid)

    def __contains__(self, oid: object) -> bool:
        return oid in self.commits

    def __len__(self) -> int:
        return len(self.commits)


@dataclass(frozen=True)
class RevisionRange:
    """Walk boundary: start from `included`, stop at anything reachable from `excluded`."""

    included: Tuple[str, ...] = ()
    excluded: Tuple[str, ...] = ()

    def inverted(self) -> "RevisionRange":
        return RevisionRange(included=self.excluded, excluded=self.included)

    def with_excluded(self, *oids: str) -> "RevisionRange":
        return replace(self, excluded=self.excluded + tuple(oids))

    @property
    def endpoints(self) -> int:
        return len(self.included) + len(self.excluded)


@dataclass(frozen=True)
class ClassifiedCommit:
    """Head-range commit tagged with whether an equivalent change is already upstream."""

    commit: Commit
    upstream: bool

    @property
    def sign(self) -> str:
        return "-" if self.upstream else "+"

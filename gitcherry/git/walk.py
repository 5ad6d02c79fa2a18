"""Stateless revision walks over a commit graph."""

from __future__ import annotations

import heapq
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ..errors import WalkSetupError
from ..logging import get_logger
from ..models import Commit, RevisionRange

CommitLookup = Callable[[str], Commit]

# Extra rounds walked after the frontier turns all-excluded, to absorb clock skew.
_SLOP = 5


class RevisionWalker:
    """Yields commits of a range newest first, every child before its parents.

    Each call to `walk` keeps its visited and excluded sets local to that call,
    so consecutive walks over the same graph never observe each other.
    """

    def __init__(self, lookup: CommitLookup) -> None:
        self._lookup = lookup
        self.logger = get_logger("walk")

    def walk(
        self, boundary: RevisionRange, *, max_parents: Optional[int] = 1
    ) -> Iterator[Commit]:
        """Walk `boundary`, emitting only commits with at most `max_parents` parents.

        Commits filtered out by `max_parents` are still traversed, so the
        ancestry behind a merge stays reachable.
        """
        included, visited = self._limit(boundary)
        self.logger.debug(
            "Walking %d commits (%d visited) from %s",
            len(included),
            visited,
            ", ".join(oid[:12] for oid in boundary.included) or "nothing",
        )
        return self._emit(boundary.included, included, max_parents)

    def _limit(self, boundary: RevisionRange) -> Tuple[Dict[str, Commit], int]:
        """Collect the commits reachable from `included` but not from `excluded`.

        Both sides share one frontier ordered by commit time. The walk stops
        once only excluded commits have been queued for `_SLOP` rounds in a
        row, so at most a handful of shared commits below the fork are loaded.
        """
        seen: Dict[str, Commit] = {}
        excluded: Set[str] = set(boundary.excluded)
        frontier: List[Tuple[int, int, str]] = []
        order = 0

        def enqueue(oid: str) -> None:
            nonlocal order
            if oid in seen:
                return
            commit = self._load(oid)
            seen[oid] = commit
            heapq.heappush(frontier, (-commit.timestamp, order, oid))
            order += 1

        for oid in boundary.excluded + boundary.included:
            enqueue(oid)

        candidates: List[str] = []
        slop = _SLOP
        while frontier:
            _, _, oid = heapq.heappop(frontier)
            commit = seen[oid]
            if oid in excluded:
                self._mark_excluded(commit.parents, seen, excluded)
                for parent in commit.parents:
                    enqueue(parent)
                if any(entry[2] not in excluded for entry in frontier):
                    slop = _SLOP
                    continue
                slop -= 1
                if slop == 0:
                    break
                continue
            for parent in commit.parents:
                enqueue(parent)
            candidates.append(oid)

        included = {oid: seen[oid] for oid in candidates if oid not in excluded}
        return included, len(seen)

    @staticmethod
    def _mark_excluded(oids: Iterable[str], seen: Dict[str, Commit], excluded: Set[str]) -> None:
        # Commits already walked as included pass the mark down to their own parents.
        stack = list(oids)
        while stack:
            oid = stack.pop()
            if oid in excluded:
                continue
            excluded.add(oid)
            commit = seen.get(oid)
            if commit is not None:
                stack.extend(commit.parents)

    def _emit(
        self,
        tips: Tuple[str, ...],
        included: Dict[str, Commit],
        max_parents: Optional[int],
    ) -> Iterator[Commit]:
        pending_children: Dict[str, int] = {oid: 0 for oid in included}
        for commit in included.values():
            for parent in dict.fromkeys(commit.parents):
                if parent in pending_children:
                    pending_children[parent] += 1

        order = 0
        ready: List[Tuple[int, int, str]] = []
        queued: Set[str] = set()

        def push(oid: str) -> None:
            nonlocal order
            heapq.heappush(ready, (-included[oid].timestamp, order, oid))
            queued.add(oid)
            order += 1

        # Tips first, in the order given, then any other commit nobody in range points at.
        for oid in tips:
            if oid in included and pending_children[oid] == 0 and oid not in queued:
                push(oid)
        for oid, count in pending_children.items():
            if count == 0 and oid not in queued:
                push(oid)

        while ready:
            _, _, oid = heapq.heappop(ready)
            commit = included[oid]
            if max_parents is None or len(commit.parents) <= max_parents:
                yield commit
            for parent in dict.fromkeys(commit.parents):
                if parent not in pending_children:
                    continue
                pending_children[parent] -= 1
                if pending_children[parent] == 0:
                    push(parent)

    def _load(self, oid: str) -> Commit:
        try:
            return self._lookup(oid)
        except KeyError as exc:
            raise WalkSetupError(f"revision walk setup failed: missing commit {oid}") from exc


__all__ = ["CommitLookup", "RevisionWalker"]

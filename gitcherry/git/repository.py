"""Commit lookup, diffs and ref resolution backed by the git executable."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Protocol, Tuple

from ..errors import WalkSetupError
from ..logging import get_logger
from ..models import Commit, CommitGraph

# Unit and record separators keep subjects containing tabs or newlines intact.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_COMMIT_FORMAT = "%x1f".join(("%H", "%P", "%an", "%ct", "%s")) + "%x1e"

AUTO_ABBREV = -1
FULL_ABBREV = 0

# Commits fetched per `rev-list` call when a lookup misses the graph.
HISTORY_BATCH = 256


class CommitSource(Protocol):
    """Capabilities the cherry pipeline needs from a commit store."""

    def resolve(self, name: str) -> Optional[Commit]:
        ...

    def commit(self, oid: str) -> Commit:
        ...

    def diff(self, commit: Commit, parent: Commit) -> str:
        ...

    def current_branch_upstream(self) -> Optional[str]:
        ...

    def abbreviate(self, oid: str, length: int) -> str:
        ...


class GitRepository:
    """Loads commit history from a local repository into a CommitGraph."""

    def __init__(
        self,
        path: str | Path = ".",
        runner: Callable[..., str] | None = None,
        *,
        history_batch: int = HISTORY_BATCH,
    ) -> None:
        self.path = Path(path).expanduser()
        self.graph = CommitGraph()
        self.history_batch = max(1, history_batch)
        self._runner = runner or self._default_runner
        self._abbrev_cache: Dict[Tuple[str, int], str] = {}
        self.logger = get_logger("git")

    def ensure_repository(self) -> None:
        """Raise WalkSetupError unless `path` is inside a git work tree or git dir."""
        self._run(["git", "rev-parse", "--git-dir"])

    def toplevel(self) -> Optional[Path]:
        """Return the root of the work tree containing `path`, or None outside one."""
        try:
            output = self._runner(["git", "rev-parse", "--show-toplevel"], cwd=self.path)
        except subprocess.CalledProcessError:
            return None
        except OSError as exc:
            raise WalkSetupError(f"revision walk setup failed: {exc}") from exc
        top = output.strip()
        return Path(top) if top else None

    def resolve(self, name: str) -> Optional[Commit]:
        """Return the commit `name` peels to, or None when it names no commit."""
        try:
            output = self._runner(
                ["git", "rev-parse", "--verify", "--quiet", "--end-of-options", f"{name}^{{commit}}"],
                cwd=self.path,
            )
        except subprocess.CalledProcessError:
            return None
        except OSError as exc:
            raise WalkSetupError(f"revision walk setup failed: {exc}") from exc
        oid = output.strip()
        if not oid:
            return None
        return self.commit(oid)

    def commit(self, oid: str) -> Commit:
        found = self.graph.get(oid)
        if found is None:
            self._load_history(oid)
            found = self.graph.get(oid)
        if found is None:
            raise KeyError(oid)
        return found

    def diff(self, commit: Commit, parent: Commit) -> str:
        return self._run(
            [
                "git",
                "diff-tree",
                "-p",
                "--no-color",
                "--no-renames",
                "--binary",
                "-U0",
                parent.oid,
                commit.oid,
            ]
        )

    def current_branch_upstream(self) -> Optional[str]:
        try:
            output = self._runner(
                ["git", "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"],
                cwd=self.path,
            )
        except subprocess.CalledProcessError:
            return None
        except OSError as exc:
            raise WalkSetupError(f"revision walk setup failed: {exc}") from exc
        upstream = output.strip()
        return upstream or None

    def abbreviate(self, oid: str, length: int) -> str:
        """Return the shortest unique prefix of `oid` that is at least `length` long."""
        if length == FULL_ABBREV:
            return oid
        key = (oid, length)
        cached = self._abbrev_cache.get(key)
        if cached is not None:
            return cached
        flag = "--short" if length == AUTO_ABBREV else f"--short={length}"
        abbreviated = self._run(["git", "rev-parse", flag, oid]).strip() or oid
        self._abbrev_cache[key] = abbreviated
        return abbreviated

    # ------------------------------------------------------------------
    # Internals

    def _load_history(self, tip: str) -> None:
        output = self._run(
            [
                "git",
                "rev-list",
                f"--max-count={self.history_batch}",
                f"--format={_COMMIT_FORMAT}",
                tip,
            ]
        )
        before = len(self.graph)
        for commit in parse_rev_list(output):
            self.graph.add(commit)
        self.logger.debug("Loaded %d new commits behind %s", len(self.graph) - before, tip[:12])

    def _run(self, args: Iterable[str]) -> str:
        args = list(args)
        self.logger.debug("Running %s", " ".join(args))
        try:
            return self._runner(args, cwd=self.path)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"{args[1]} exited with status {exc.returncode}"
            raise WalkSetupError(f"revision walk setup failed: {detail}") from exc
        except OSError as exc:
            raise WalkSetupError(f"revision walk setup failed: {exc}") from exc

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        # Decoded by hand: text mode would turn a lone CR inside a patch line into LF.
        completed = subprocess.run(list(args), cwd=str(cwd), capture_output=True)
        stdout = completed.stdout.decode("utf-8", "surrogateescape")
        if completed.returncode != 0:
            raise subprocess.CalledProcessError(
                completed.returncode,
                completed.args,
                output=stdout,
                stderr=completed.stderr.decode("utf-8", "surrogateescape"),
            )
        return stdout


def parse_rev_list(output: str) -> Iterable[Commit]:
    """Parse `git rev-list --format` output produced with the commit format above."""
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if record.startswith("commit "):
            _, _, record = record.partition("\n")
        if not record.strip():
            continue
        fields = record.split(_FIELD_SEP)
        if len(fields) != 5:
            raise WalkSetupError(f"revision walk setup failed: malformed commit record {record!r}")
        oid, parents, author, timestamp, summary = fields
        yield Commit(
            oid=oid,
            parents=tuple(parents.split()),
            author=author,
            timestamp=int(timestamp) if timestamp.isdigit() else 0,
            summary=summary,
        )


__all__ = ["AUTO_ABBREV", "CommitSource", "FULL_ABBREV", "GitRepository", "HISTORY_BATCH", "parse_rev_list"]

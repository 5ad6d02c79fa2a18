"""Content fingerprints for single-parent commits.

A fingerprint identifies a change independently of where it was applied: two
commits whose diffs differ only in line numbers, surrounding context, blob ids
or commit metadata hash to the same value.
"""

from __future__ import annotations

import hashlib
import re
from typing import Dict, List, Protocol

from .models import Commit, Fingerprint

_FILE_HEADER = "diff --git "
_BINARY_HEADER = "GIT binary patch"
_WHITESPACE = re.compile(r"\s+")

# Extended header lines that carry blob ids or similarity scores.
_DROPPED_PREFIXES = ("index ", "similarity index ", "dissimilarity index ")


class DiffSource(Protocol):
    def diff(self, commit: Commit, parent: Commit) -> str:
        """Return the textual patch turning `parent` into `commit`."""

    def commit(self, oid: str) -> Commit:
        """Return the commit stored under `oid`."""


def canonicalize_patch(patch: str, *, ignore_whitespace: bool = True) -> bytes:
    """Return the canonical byte stream hashed into a fingerprint."""
    sections: Dict[str, List[str]] = {}
    current: List[str] | None = None
    in_hunk = False
    in_binary = False

    # Only LF ends a patch line; CR, FF and friends are part of the content.
    for line in patch.split("\n"):
        if line.startswith(_FILE_HEADER):
            key = line[len(_FILE_HEADER):]
            current = sections.setdefault(key, [])
            in_hunk = False
            in_binary = False
            continue
        if current is None:
            # Anything before the first file header is commit metadata.
            continue
        if in_binary:
            if line:
                current.append(line)
            continue
        if line.startswith("@@"):
            in_hunk = True
            current.append("@@")
            continue
        if in_hunk:
            if line[:1] in {"+", "-"}:
                current.append(_normalise_change(line, ignore_whitespace))
            continue
        if line.startswith(_BINARY_HEADER):
            in_binary = True
            current.append(_BINARY_HEADER)
            continue
        if line.startswith(("--- ", "+++ ")) or line.startswith(_DROPPED_PREFIXES):
            continue
        if line:
            current.append(line)

    chunks: List[bytes] = []
    for key in sorted(sections):
        chunks.append(f"file {key}\n".encode("utf-8", "surrogateescape"))
        for entry in sections[key]:
            chunks.append(entry.encode("utf-8", "surrogateescape") + b"\n")
    return b"".join(chunks)


def fingerprint_patch(patch: str, *, ignore_whitespace: bool = True) -> Fingerprint:
    """Hash the canonical form of `patch`."""
    digest = hashlib.sha256()
    digest.update(canonicalize_patch(patch, ignore_whitespace=ignore_whitespace))
    return Fingerprint(digest.hexdigest())


def _normalise_change(line: str, ignore_whitespace: bool) -> str:
    if not ignore_whitespace:
        return line
    return line[0] + _WHITESPACE.sub("", line[1:])


class PatchFingerprinter:
    """Computes fingerprints by diffing a commit against its only parent."""

    def __init__(self, source: DiffSource, *, ignore_whitespace: bool = True) -> None:
        self._source = source
        self._ignore_whitespace = ignore_whitespace

    def fingerprint(self, commit: Commit) -> Fingerprint:
        if len(commit.parents) != 1:
            raise ValueError(
                f"commit {commit.oid} has {len(commit.parents)} parents; "
                "fingerprints are defined for single-parent commits only"
            )
        parent = self._source.commit(commit.parents[0])
        patch = self._source.diff(commit, parent)
        return fingerprint_patch(patch, ignore_whitespace=self._ignore_whitespace)


__all__ = ["DiffSource", "PatchFingerprinter", "canonicalize_patch", "fingerprint_patch"]

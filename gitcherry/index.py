"""Fingerprint membership index built from the upstream side of a range."""

from __future__ import annotations

from typing import Dict, Optional

from .models import Commit, Fingerprint


class FingerprintIndex:
    """Maps fingerprints to the first upstream commit that produced them."""

    def __init__(self) -> None:
        self._origins: Dict[Fingerprint, Commit] = {}
        self._frozen = False

    def insert(self, fingerprint: Fingerprint, source_commit: Commit) -> None:
        if self._frozen:
            raise RuntimeError("fingerprint index is read-only once classification starts")
        # Equivalent commits can already exist upstream; keep the first one seen.
        self._origins.setdefault(fingerprint, source_commit)

    def contains(self, fingerprint: Fingerprint) -> bool:
        return fingerprint in self._origins

    def origin(self, fingerprint: Fingerprint) -> Optional[Commit]:
        """Return the upstream commit recorded for `fingerprint`, if any."""
        return self._origins.get(fingerprint)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._origins

    def __len__(self) -> int:
        return len(self._origins)


__all__ = ["FingerprintIndex"]

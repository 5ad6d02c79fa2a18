from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from tests._fixtures.memory_repo import MemoryRepository
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a real git repository rooted at the pytest tmp_path."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    return RepoBuilder(tmp_path)


@pytest.fixture
def memory_repo() -> MemoryRepository:
    """Provide an empty in-memory commit source."""
    return MemoryRepository()

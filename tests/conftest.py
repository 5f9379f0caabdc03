"""Common test fixtures."""

import os
from pathlib import Path
from typing import Callable, Optional

import pytest

from treesync.config import CheckModel, SyncConfig
from treesync.sync.change_detector import ChangeDetector
from treesync.sync.decision_engine import DecisionEngine
from treesync.sync.tree_loader import TreeLoader

# fixed modification time so files written in different tests compare equal
FIXED_MTIME = 1_700_000_000


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep TREESYNC_* variables from the caller's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("TREESYNC_"):
            monkeypatch.delenv(key)


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path: Path) -> Path:
    path = tmp_path / "dest"
    path.mkdir()
    return path


@pytest.fixture
def make_file() -> Callable[..., Path]:
    """Create a file with given content and, by default, a fixed mtime."""

    def _make_file(path: Path, content: str = "test content", mtime: Optional[int] = FIXED_MTIME):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _make_file


@pytest.fixture
def make_config(source_dir: Path, dest_dir: Path) -> Callable[..., SyncConfig]:
    def _make_config(**overrides) -> SyncConfig:
        values = dict(src_path=source_dir, dest_path=dest_dir, pause_on_exit=False)
        values.update(overrides)
        return SyncConfig(**values)

    return _make_config


@pytest.fixture
def tree_loader() -> TreeLoader:
    return TreeLoader()


@pytest.fixture
def recursive_engine() -> DecisionEngine:
    return DecisionEngine(ChangeDetector(CheckModel.SIMPLE), recursive=True)


@pytest.fixture
def shallow_engine() -> DecisionEngine:
    return DecisionEngine(ChangeDetector(CheckModel.SIMPLE), recursive=False)

"""Shared test fixtures."""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from diskcleaner.core.classifier import categorize
from diskcleaner.core.progress import ProgressChannel

DAY = 24 * 60 * 60


def make_stat(size: int = 0, mtime: float | None = None) -> os.stat_result:
    """Build a fake ``os.stat_result`` for a regular file."""
    mtime = time.time() if mtime is None else mtime
    return os.stat_result((0o100644, 0, 0, 1, 0, 0, size, mtime, mtime, mtime))


def age(path: Path, days: float) -> None:
    """Backdate a file's modification time by *days*."""
    stamp = time.time() - days * DAY
    os.utime(path, (stamp, stamp))


class RecordingChannel(ProgressChannel):
    """Progress channel that remembers every published snapshot."""

    def __init__(self) -> None:
        super().__init__()
        self.updates: list = []

    def update(self, state) -> None:
        self.updates.append(state)
        super().update(state)


@pytest.fixture
def isolate_config(tmp_path, monkeypatch):
    """Redirect the config file to a temp directory."""
    config_home = tmp_path / "config_home"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "diskcleaner" / "config.json"


@pytest.fixture
def sample_root(tmp_path):
    """Small tree: a temp file, a cache file, a log and a copy of the cache file."""
    root = tmp_path / "root"
    (root / "cache").mkdir(parents=True)
    (root / "log").mkdir()
    (root / "other").mkdir()
    (root / "a.tmp").write_bytes(b"t" * 10)
    (root / "cache" / "b.dat").write_bytes(b"0123456789")
    (root / "other" / "c.dat").write_bytes(b"0123456789")
    (root / "log" / "app.log").write_bytes(b"hello")
    return root.resolve()


@pytest.fixture
def relative_categorize(monkeypatch, sample_root):
    """Classify scanned files by their path below ``sample_root``.

    ``tmp_path`` lives under /tmp, which would otherwise put every file
    in TEMPORARY_FILES.
    """

    def _categorize(path, metadata=None, now=None):
        rel = "/" + Path(path).relative_to(sample_root).as_posix()
        return categorize(rel, metadata, now)

    monkeypatch.setattr("diskcleaner.core.scanner.categorize", _categorize)


@pytest.fixture
def fake_trash(tmp_path, monkeypatch):
    """Replace send2trash with a move into a temp directory."""
    trash_dir = tmp_path / "trash"
    trash_dir.mkdir()
    trashed: list[Path] = []

    def _send2trash(path):
        src = Path(path)
        src.rename(trash_dir / f"{len(trashed)}-{src.name}")
        trashed.append(src)

    monkeypatch.setattr("diskcleaner.core.cleaner.send2trash", _send2trash)
    return trash_dir, trashed

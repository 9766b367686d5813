"""Tests for duplicate detection."""

from __future__ import annotations

import os
import threading

import pytest

import diskcleaner.core.duplicates as duplicates_mod
from conftest import RecordingChannel
from diskcleaner.core.duplicates import DuplicateFinder, keep_oldest_first
from diskcleaner.core.progress import ProgressChannel
from diskcleaner.models.progress import FindingDuplicates
from diskcleaner.utils import file_digest


@pytest.fixture
def hash_calls(monkeypatch):
    """Count which paths get hashed."""
    calls: list[str] = []
    lock = threading.Lock()

    def _counting_digest(path):
        with lock:
            calls.append(os.path.basename(path))
        return file_digest(path)

    monkeypatch.setattr(duplicates_mod, "file_digest", _counting_digest)
    return calls


def _find(files, channel=None):
    return DuplicateFinder().find_duplicates(files, channel or ProgressChannel())


class TestDuplicateFinder:
    def test_identical_content_grouped(self, sample_root):
        b = sample_root / "cache" / "b.dat"
        c = sample_root / "other" / "c.dat"
        groups = _find([b, c])
        assert len(groups) == 1
        assert set(groups[0]) == {b, c}

    def test_different_sizes_never_grouped(self, sample_root):
        assert _find([sample_root / "a.tmp", sample_root / "log" / "app.log"]) == []

    def test_same_size_different_content(self, tmp_path):
        x = tmp_path / "x.bin"
        y = tmp_path / "y.bin"
        x.write_bytes(b"aaaa")
        y.write_bytes(b"aaab")
        assert _find([x, y]) == []

    def test_names_and_timestamps_do_not_matter(self, tmp_path):
        first = tmp_path / "report.pdf"
        second = tmp_path / "nested" / "copy of report (1).pdf"
        second.parent.mkdir()
        first.write_bytes(b"%PDF" * 1000)
        second.write_bytes(b"%PDF" * 1000)
        os.utime(first, (1_000_000, 1_000_000))
        groups = _find([first, second])
        assert [set(g) for g in groups] == [{first, second}]

    def test_multiple_groups(self, tmp_path):
        files = {}
        for name, content in [("a1", b"AAAA"), ("a2", b"AAAA"), ("a3", b"AAAA"), ("b1", b"BBBB"), ("b2", b"BBBB"), ("c", b"CCCC")]:
            files[name] = tmp_path / name
            files[name].write_bytes(content)

        groups = _find(list(files.values()))
        assert sorted(sorted(p.name for p in g) for g in groups) == [["a1", "a2", "a3"], ["b1", "b2"]]

    def test_unique_sizes_are_never_hashed(self, sample_root, hash_calls):
        (sample_root / "unique.bin").write_bytes(b"u" * 77)
        files = [
            sample_root / "cache" / "b.dat",
            sample_root / "other" / "c.dat",
            sample_root / "log" / "app.log",
            sample_root / "unique.bin",
        ]
        _find(files)
        assert sorted(hash_calls) == ["b.dat", "c.dat"]

    def test_no_candidates_skips_hashing(self, sample_root, hash_calls):
        assert _find([sample_root / "log" / "app.log"]) == []
        assert hash_calls == []

    def test_same_path_twice_is_not_a_duplicate(self, sample_root):
        b = sample_root / "cache" / "b.dat"
        assert _find([b, b]) == []

    def test_missing_file_is_dropped(self, sample_root):
        b = sample_root / "cache" / "b.dat"
        c = sample_root / "other" / "c.dat"
        groups = _find([b, c, sample_root / "gone.dat"])
        assert [set(g) for g in groups] == [{b, c}]

    def test_unreadable_file_is_dropped(self, tmp_path, monkeypatch):
        paths = [tmp_path / n for n in ("one", "two", "three")]
        for p in paths:
            p.write_bytes(b"same")

        def _digest(path):
            if os.path.basename(path) == "two":
                raise PermissionError(13, "Permission denied", str(path))
            return file_digest(path)

        monkeypatch.setattr(duplicates_mod, "file_digest", _digest)
        groups = _find(paths)
        assert [set(g) for g in groups] == [{paths[0], paths[2]}]

    def test_progress_reports_hashed_over_candidates(self, sample_root, monkeypatch):
        monkeypatch.setattr(duplicates_mod, "PROGRESS_INTERVAL", 1)
        channel = RecordingChannel()
        files = [sample_root / "cache" / "b.dat", sample_root / "other" / "c.dat", sample_root / "log" / "app.log"]
        _find(files, channel)

        snapshots = [s for s in channel.updates if isinstance(s, FindingDuplicates)]
        assert snapshots[0] == FindingDuplicates(files_processed=0, total_files=2)
        assert {s.files_processed for s in snapshots} == {0, 1, 2}
        assert all(s.total_files == 2 for s in snapshots)


class TestKeepOldestFirst:
    def test_oldest_copy_first(self, tmp_path):
        new = tmp_path / "new"
        old = tmp_path / "old"
        new.write_bytes(b"x")
        old.write_bytes(b"x")
        os.utime(old, (1_000_000, 1_000_000))
        assert keep_oldest_first([new, old]) == [old, new]

    def test_missing_file_sorts_last(self, tmp_path):
        present = tmp_path / "present"
        present.write_bytes(b"x")
        assert keep_oldest_first([tmp_path / "gone", present]) == [present, tmp_path / "gone"]

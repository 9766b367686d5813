"""Tests for file removal."""

from __future__ import annotations

import pytest

from conftest import RecordingChannel
from diskcleaner.config import Config
from diskcleaner.core.cleaner import Cleaner
from diskcleaner.core.progress import ProgressChannel
from diskcleaner.models.progress import Cleaning


def _no_permanent_delete(*args, **kwargs):
    raise AssertionError("permanent deletion used in trash mode")


class TestTrashMode:
    def test_moves_to_trash(self, sample_root, fake_trash, monkeypatch):
        monkeypatch.setattr(Cleaner, "_delete_permanently", staticmethod(_no_permanent_delete))
        trash_dir, trashed = fake_trash
        target = sample_root / "a.tmp"

        cleaned = Cleaner(Config(use_trash=True)).clean_files([target], ProgressChannel())

        assert cleaned == 10
        assert not target.exists()
        assert trashed == [target]
        assert [p.read_bytes() for p in trash_dir.iterdir()] == [b"t" * 10]

    def test_non_empty_folder_is_not_trashed(self, sample_root, fake_trash):
        _, trashed = fake_trash
        folder = sample_root / "proj"
        folder.mkdir()
        (folder / "main.c").write_bytes(b"x" * 900)

        assert Cleaner(Config(use_trash=True)).clean_files([folder], ProgressChannel()) == 0
        assert (folder / "main.c").exists()
        assert trashed == []

    def test_empty_folder_is_trashed(self, sample_root, fake_trash):
        _, trashed = fake_trash
        empty = sample_root / "empty"
        empty.mkdir()
        assert Cleaner(Config(use_trash=True)).clean_files([empty], ProgressChannel()) == 0
        assert trashed == [empty]
        assert not empty.exists()

    def test_trash_failure_is_skipped(self, sample_root, monkeypatch):
        def _refuse(path):
            raise PermissionError(13, "Permission denied", path)

        monkeypatch.setattr("diskcleaner.core.cleaner.send2trash", _refuse)
        target = sample_root / "a.tmp"
        assert Cleaner(Config()).clean_files([target], ProgressChannel()) == 0
        assert target.exists()


class TestPermanentMode:
    def test_deletes_and_sums_sizes(self, sample_root, monkeypatch):
        monkeypatch.setattr("diskcleaner.core.cleaner.send2trash", _no_permanent_delete)
        files = [sample_root / "a.tmp", sample_root / "log" / "app.log"]

        cleaned = Cleaner(Config(use_trash=False)).clean_files(files, ProgressChannel())

        assert cleaned == 15
        assert not any(f.exists() for f in files)

    def test_missing_file_skipped_without_abort(self, sample_root):
        files = [sample_root / "gone.tmp", sample_root / "a.tmp", sample_root / "cache" / "b.dat"]
        cleaned = Cleaner(Config(use_trash=False)).clean_files(files, ProgressChannel())
        assert cleaned == 20
        assert not (sample_root / "cache" / "b.dat").exists()

    def test_failed_delete_excluded_from_total(self, sample_root, monkeypatch):
        stuck = sample_root / "log" / "app.log"
        real = Cleaner._delete_permanently

        def _flaky(path, is_dir):
            if path == stuck:
                raise PermissionError(13, "Permission denied", str(path))
            real(path, is_dir)

        monkeypatch.setattr(Cleaner, "_delete_permanently", staticmethod(_flaky))
        files = [stuck, sample_root / "a.tmp"]
        assert Cleaner(Config(use_trash=False)).clean_files(files, ProgressChannel()) == 10
        assert stuck.exists()

    def test_empty_folder_removed_as_zero_bytes(self, sample_root):
        empty = sample_root / "empty"
        empty.mkdir()
        assert Cleaner(Config(use_trash=False)).clean_files([empty], ProgressChannel()) == 0
        assert not empty.exists()

    def test_non_empty_folder_is_not_removed(self, sample_root):
        folder = sample_root / "cache"
        assert Cleaner(Config(use_trash=False)).clean_files([folder], ProgressChannel()) == 0
        assert folder.exists()


class TestCleanerProgress:
    def test_progress_per_file(self, sample_root):
        channel = RecordingChannel()
        files = [sample_root / "a.tmp", sample_root / "gone", sample_root / "log" / "app.log"]
        Cleaner(Config(use_trash=False)).clean_files(files, channel)
        assert channel.updates == [Cleaning(1, 3), Cleaning(2, 3), Cleaning(3, 3)]

    def test_empty_list(self):
        assert Cleaner(Config()).clean_files([], ProgressChannel()) == 0


class TestEstimate:
    def test_estimate_skips_missing_and_directories(self, sample_root):
        files = [sample_root / "a.tmp", sample_root / "missing", sample_root / "cache"]
        assert Cleaner.estimate_cleanup_size(files) == 10


@pytest.mark.parametrize("use_trash", [True, False])
def test_use_trash_taken_from_config(use_trash):
    assert Cleaner(Config(use_trash=use_trash)).use_trash is use_trash

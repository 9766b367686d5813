"""File removal: move to trash or delete permanently."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from send2trash import send2trash

from diskcleaner.config import Config
from diskcleaner.core.progress import ProgressChannel
from diskcleaner.models.progress import Cleaning

log = logging.getLogger(__name__)


class Cleaner:
    """Removes files one at a time, continuing past individual failures."""

    def __init__(self, config: Config) -> None:
        self.use_trash = config.use_trash

    def clean_files(self, files: list[Path], progress: ProgressChannel) -> int:
        """Remove *files* and return the number of bytes reclaimed.

        Each path's size is read before removal; a path whose metadata
        cannot be read is skipped.  Failed removals are logged and do not
        count towards the total.  Directories (empty folders) are removed
        with ``rmdir`` and count as zero bytes; one that is no longer empty
        is skipped in both modes.

        Args:
            files: Paths to remove.
            progress: Channel receiving a ``Cleaning`` snapshot per file.
        """
        log.info("Starting cleanup of %d files (%s)", len(files), "trash" if self.use_trash else "permanent")

        total_cleaned = 0
        total = len(files)

        for index, file in enumerate(files, 1):
            progress.update(Cleaning(files_processed=index, total_files=total))
            path = Path(file)

            try:
                st = path.lstat()
            except OSError as e:
                log.warning("Could not get metadata for %s: %s", path, e)
                continue

            is_dir = stat.S_ISDIR(st.st_mode)
            size = 0 if is_dir else st.st_size
            try:
                if is_dir and not self._is_empty_dir(path):
                    log.warning("Skipping non-empty directory: %s", path)
                    continue
                if self.use_trash:
                    self._move_to_trash(path)
                else:
                    self._delete_permanently(path, is_dir)
            except OSError as e:
                log.error("Failed to clean %s: %s", path, e)
                continue

            total_cleaned += size
            log.info("Successfully cleaned: %s (%d bytes)", path, size)

        log.info("Cleanup completed. Total cleaned: %d bytes", total_cleaned)
        return total_cleaned

    @staticmethod
    def _is_empty_dir(path: Path) -> bool:
        with os.scandir(path) as it:
            return next(it, None) is None

    @staticmethod
    def _move_to_trash(path: Path) -> None:
        send2trash(str(path))

    @staticmethod
    def _delete_permanently(path: Path, is_dir: bool) -> None:
        if is_dir:
            path.rmdir()
        else:
            path.unlink()

    @staticmethod
    def estimate_cleanup_size(files: list[Path]) -> int:
        """Sum what cleaning *files* would reclaim, ignoring unreadable ones."""
        total = 0
        for file in files:
            try:
                st = Path(file).lstat()
            except OSError:
                log.debug("Cannot stat: %s", file)
                continue
            if not stat.S_ISDIR(st.st_mode):
                total += st.st_size
        return total

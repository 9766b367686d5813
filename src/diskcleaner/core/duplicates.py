"""Duplicate file detection by size bucketing and content hashing."""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from diskcleaner.core.progress import ProgressChannel
from diskcleaner.models.progress import FindingDuplicates
from diskcleaner.utils import file_digest

log = logging.getLogger(__name__)

# Publish a progress snapshot every N hashed files.
PROGRESS_INTERVAL = 10

_DEFAULT_WORKERS = 4


class DuplicateFinder:
    """Finds groups of byte-identical files.

    Files are first bucketed by size, which only needs a ``stat``; only
    buckets with two or more members are hashed.  The returned groups and
    the paths inside them come in no particular order.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self.max_workers = max_workers or min(_DEFAULT_WORKERS, os.cpu_count() or 1)

    def find_duplicates(self, files: list[Path], progress: ProgressChannel) -> list[list[Path]]:
        """Return groups of two or more files with identical content.

        Files whose size or content cannot be read are logged and left out.

        Args:
            files: Candidate file paths. A path listed twice is considered once.
            progress: Channel receiving throttled ``FindingDuplicates`` snapshots.
        """
        log.info("Starting duplicate detection for %d files", len(files))

        candidates = self._same_size_candidates(files)
        log.info("Found %d files with matching sizes", len(candidates))
        if not candidates:
            return []

        total = len(candidates)
        by_hash: dict[tuple[int, str], list[Path]] = {}
        lock = threading.Lock()
        processed = 0
        progress.update(FindingDuplicates(files_processed=0, total_files=total))

        def _hash_one(item: tuple[Path, int]) -> None:
            nonlocal processed
            path, size = item
            try:
                digest = file_digest(path)
            except OSError as e:
                log.warning("Failed to hash file %s: %s", path, e)
                digest = None

            with lock:
                processed += 1
                current = processed
                if digest is not None:
                    by_hash.setdefault((size, digest), []).append(path)

            if current % PROGRESS_INTERVAL == 0 or current == total:
                progress.update(FindingDuplicates(files_processed=current, total_files=total))

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for future in [executor.submit(_hash_one, item) for item in candidates]:
                future.result()

        duplicates = [group for group in by_hash.values() if len(group) > 1]
        log.info("Found %d groups of duplicate files", len(duplicates))
        return duplicates

    @staticmethod
    def _same_size_candidates(files: list[Path]) -> list[tuple[Path, int]]:
        """Bucket *files* by size and keep only buckets with two or more members."""
        by_size: dict[int, list[Path]] = {}
        seen: set[Path] = set()
        for file in files:
            path = Path(file)
            if path in seen:
                continue
            seen.add(path)
            try:
                size = path.stat().st_size
            except OSError as e:
                log.warning("Cannot stat %s: %s", path, e)
                continue
            by_size.setdefault(size, []).append(path)

        return [(path, size) for size, paths in by_size.items() if len(paths) > 1 for path in paths]


def keep_oldest_first(group: list[Path]) -> list[Path]:
    """Order a duplicate group so the copy to keep comes first.

    ``find_duplicates`` makes no ordering promise, so callers that treat
    the first path as the one to keep should sort with this.  The oldest
    copy by modification time wins; ties and unreadable files fall back to
    path order.
    """

    def _key(path: Path) -> tuple[float, str]:
        try:
            return path.stat().st_mtime, str(path)
        except OSError:
            return float("inf"), str(path)

    return sorted(group, key=_key)

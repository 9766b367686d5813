"""Directory tree scanner: filtering, classification and aggregation."""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path

from diskcleaner.config import Config
from diskcleaner.core.classifier import categorize
from diskcleaner.core.progress import ProgressChannel
from diskcleaner.models.category import FileCategory
from diskcleaner.models.progress import Scanning
from diskcleaner.models.scan_result import ScanResult

log = logging.getLogger(__name__)

_SECONDS_PER_DAY = 24 * 60 * 60

# Publish a progress snapshot every N inspected files.
PROGRESS_INTERVAL = 100

_DEFAULT_WORKERS = 4


class ScanError(Exception):
    """Raised when the scan root cannot be resolved or listed."""


class _ScanAggregate:
    """Totals shared by all directory workers of one scan."""

    def __init__(self, progress: ProgressChannel) -> None:
        self._progress = progress
        self._lock = threading.Lock()
        self._visited: set[tuple[int, int]] = set()
        self.files_by_category: dict[FileCategory, list[Path]] = {}
        self.total_files = 0
        self.total_size = 0
        self.files_seen = 0
        self.last_path = ""

    def first_visit(self, st: os.stat_result) -> bool:
        """Remember a directory identity; False if it was already walked."""
        key = (st.st_dev, st.st_ino)
        with self._lock:
            if key in self._visited:
                return False
            self._visited.add(key)
            return True

    def saw_file(self, path: str) -> None:
        with self._lock:
            self.files_seen += 1
            self.last_path = path
            seen = self.files_seen
        if seen % PROGRESS_INTERVAL == 0:
            self._progress.update(Scanning(current_path=path, files_processed=seen))

    def add(self, category: FileCategory, path: Path, size: int) -> None:
        with self._lock:
            self.files_by_category.setdefault(category, []).append(path)
            self.total_files += 1
            self.total_size += size

    def add_empty_dir(self, path: Path) -> None:
        with self._lock:
            self.files_by_category.setdefault(FileCategory.EMPTY_FOLDERS, []).append(path)

    def publish_final(self) -> None:
        with self._lock:
            state = Scanning(current_path=self.last_path, files_processed=self.files_seen)
        self._progress.update(state)


class Scanner:
    """Walks a directory tree and groups the files it keeps by category.

    Each directory is listed by a worker from a small thread pool; the
    subdirectories it finds are submitted back to the pool, so independent
    subtrees are traversed concurrently.
    """

    def __init__(self, config: Config, max_workers: int | None = None) -> None:
        self.config = config
        self.max_workers = max_workers or min(_DEFAULT_WORKERS, os.cpu_count() or 1)

    def scan(self, root: Path | str, progress: ProgressChannel) -> ScanResult:
        """Scan *root* recursively.

        Unreadable entries below the root are logged and skipped.

        Args:
            root: Directory to scan.
            progress: Channel receiving throttled ``Scanning`` snapshots.

        Returns:
            The aggregated scan result.

        Raises:
            ScanError: If *root* does not exist, is not a directory, or
                cannot be listed.
        """
        start = time.monotonic()
        try:
            root_path = Path(root).resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise ScanError(f"Cannot resolve scan root {root}: {e}") from e
        if not root_path.is_dir():
            raise ScanError(f"Scan root is not a directory: {root_path}")
        try:
            with os.scandir(root_path) as it:
                top_entries = list(it)
        except OSError as e:
            raise ScanError(f"Cannot list scan root {root_path}: {e}") from e

        log.info("Starting scan of path: %s", root_path)
        aggregate = _ScanAggregate(progress)
        aggregate.first_visit(root_path.stat())
        progress.update(Scanning(current_path=str(root_path), files_processed=0))
        now = time.time()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            pending: set[Future[list[Path]]] = {
                executor.submit(self._process_entries, root_path, top_entries, aggregate, now, True)
            }
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    for subdir in future.result():
                        pending.add(executor.submit(self._scan_dir, subdir, aggregate, now))

        aggregate.publish_final()
        duration = time.monotonic() - start
        files_by_category = {
            category: sorted(paths) for category, paths in aggregate.files_by_category.items()
        }

        log.info("Scan completed in %.2fs", duration)
        log.info(
            "Processed %d files, kept %d, total size: %d bytes",
            aggregate.files_seen,
            aggregate.total_files,
            aggregate.total_size,
        )
        return ScanResult(
            total_files=aggregate.total_files,
            total_size=aggregate.total_size,
            files_by_category=files_by_category,
            scan_duration=duration,
        )

    def _scan_dir(self, directory: Path, aggregate: _ScanAggregate, now: float) -> list[Path]:
        """List one directory below the root; return its subdirectories."""
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            log.debug("Cannot list %s: %s", directory, e)
            return []
        return self._process_entries(directory, entries, aggregate, now, False)

    def _process_entries(
        self,
        directory: Path,
        entries: list[os.DirEntry],
        aggregate: _ScanAggregate,
        now: float,
        is_root: bool,
    ) -> list[Path]:
        if not entries and not is_root:
            if self._keep_empty_dir(directory):
                aggregate.add_empty_dir(directory)
            return []

        follow = self.config.follow_symlinks
        subdirs: list[Path] = []
        for entry in entries:
            if self.config.is_path_excluded(entry.path):
                log.debug("Excluded: %s", entry.path)
                continue
            try:
                if entry.is_dir(follow_symlinks=follow):
                    if follow and not aggregate.first_visit(entry.stat()):
                        log.debug("Skipping already visited directory: %s", entry.path)
                        continue
                    subdirs.append(Path(entry.path))
                elif entry.is_file(follow_symlinks=follow):
                    self._process_file(entry, aggregate, now)
            except OSError as e:
                log.warning("Error accessing file %s: %s", entry.path, e)
        return subdirs

    def _process_file(self, entry: os.DirEntry, aggregate: _ScanAggregate, now: float) -> None:
        aggregate.saw_file(entry.path)
        st = entry.stat(follow_symlinks=self.config.follow_symlinks)

        if st.st_size < self.config.min_file_size:
            return
        if _age_days(st.st_mtime, now) > self.config.max_file_age_days:
            return
        if not self.config.include_hidden_files and entry.name.startswith("."):
            return

        category = categorize(entry.path, st, now)
        aggregate.add(category, Path(entry.path), st.st_size)

    def _keep_empty_dir(self, directory: Path) -> bool:
        if not self.config.include_hidden_files and directory.name.startswith("."):
            return False
        return True


def _age_days(mtime: float, now: float) -> int:
    elapsed = now - mtime
    if elapsed <= 0:
        return 0
    return int(elapsed // _SECONDS_PER_DAY)

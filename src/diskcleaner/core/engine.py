"""Background execution of scan, duplicate search and cleanup."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, TypeVar

from diskcleaner.config import Config
from diskcleaner.core.cleaner import Cleaner
from diskcleaner.core.duplicates import DuplicateFinder
from diskcleaner.core.progress import ProgressChannel
from diskcleaner.core.scanner import Scanner
from diskcleaner.models.progress import Cleaning, FindingDuplicates, ProgressState, Scanning
from diskcleaner.models.scan_result import ScanResult

log = logging.getLogger(__name__)

T = TypeVar("T")


class CleanerEngine:
    """Runs each operation on a background worker and reports through a channel.

    The ``start_*`` methods claim the progress channel synchronously (raising
    ``OperationInProgressError`` if it is occupied) and return a ``Future``.
    Observers may poll ``progress`` instead of waiting on the future; the
    terminal ``Complete`` or ``Error`` state is written only after the
    operation's own workers have all finished.
    """

    def __init__(self, config: Config, progress: ProgressChannel | None = None) -> None:
        self.config = config
        self.progress = progress or ProgressChannel()
        self._executor = ThreadPoolExecutor(max_workers=3, thread_name_prefix="diskcleaner")
        self._last_scan: ScanResult | None = None

    @property
    def last_scan(self) -> ScanResult | None:
        """Result of the most recent successful scan."""
        return self._last_scan

    def start_scan(self, root: Path | str) -> Future[ScanResult]:
        """Scan *root* in the background."""
        scanner = Scanner(self.config)

        def _run() -> ScanResult:
            result = scanner.scan(root, self.progress)
            self._last_scan = result
            self.progress.set_scan_complete(result)
            return result

        return self._start(Scanning(current_path=str(root)), "Scan", _run)

    def start_find_duplicates(self, files: list[Path]) -> Future[list[list[Path]]]:
        """Search *files* for duplicates in the background."""
        finder = DuplicateFinder()
        files = list(files)

        def _run() -> list[list[Path]]:
            duplicates = finder.find_duplicates(files, self.progress)
            self.progress.set_duplicates_complete(duplicates)
            return duplicates

        return self._start(FindingDuplicates(), "Duplicate scan", _run)

    def start_clean(self, files: list[Path]) -> Future[int]:
        """Remove *files* in the background."""
        cleaner = Cleaner(self.config)
        files = list(files)

        def _run() -> int:
            cleaned = cleaner.clean_files(files, self.progress)
            self.progress.set_cleanup_complete(cleaned)
            return cleaned

        return self._start(Cleaning(total_files=len(files)), "Cleanup", _run)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; optionally wait for running operations."""
        self._executor.shutdown(wait=wait)

    def _start(self, initial: ProgressState, label: str, body: Callable[[], T]) -> Future[T]:
        self.progress.begin(initial)

        def _supervised() -> T:
            try:
                return body()
            except Exception as e:
                log.exception("%s failed", label)
                self.progress.set_error(f"{label} failed: {e}")
                raise

        try:
            return self._executor.submit(_supervised)
        except RuntimeError:
            self.progress.reset()
            raise

    def __enter__(self) -> CleanerEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

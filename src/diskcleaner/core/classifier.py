"""Path classification into cleanup categories.

Rules are evaluated top to bottom and the first match wins, so their
order in ``RULES`` is part of the behaviour.  Only the size and age
rules look at file metadata; everything else depends on the path string.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import PurePath
from typing import Callable

from diskcleaner.models.category import FileCategory

LARGE_FILE_BYTES = 100 * 1024 * 1024
OLD_FILE_DAYS = 30
_SECONDS_PER_DAY = 24 * 60 * 60

_TEMP_EXTENSIONS = frozenset({"tmp", "temp"})
_TEMP_DIR_MARKERS = ("/tmp/", "\\temp\\", "/var/tmp/", "\\windows\\temp\\")
_CACHE_MARKERS = ("cache", ".cache", "/var/cache/", "\\appdata\\local\\")
_LOG_EXTENSIONS = frozenset({"log", "out", "err"})
_LOG_DIR_MARKERS = ("/var/log/", "\\logs\\")
_BROWSER_MARKERS = ("browser", "firefox", "chrome", "safari", "cookies", "history")
_DOWNLOAD_MARKERS = ("download", "downloads")
_RECYCLE_MARKERS = ("recycle", "trash", ".trash", "$recycle.bin")
_JUNK_EXTENSIONS = frozenset({"bak", "old", "backup"})
_JUNK_FILENAMES = frozenset({"thumbs.db", ".ds_store", "desktop.ini"})


@dataclass(frozen=True, slots=True)
class PathFacts:
    """Lower-cased views of a path plus optional metadata, shared by all rules."""

    path_str: str
    filename: str
    extension: str
    metadata: os.stat_result | None
    now: float

    @classmethod
    def of(cls, path: PurePath | str, metadata: os.stat_result | None, now: float | None = None) -> PathFacts:
        pure = PurePath(path)
        return cls(
            path_str=str(pure).lower(),
            filename=pure.name.lower(),
            extension=pure.suffix[1:].lower(),
            metadata=metadata,
            now=time.time() if now is None else now,
        )

    def contains_any(self, markers: tuple[str, ...]) -> bool:
        return any(marker in self.path_str for marker in markers)


def _is_temporary(f: PathFacts) -> bool:
    return (
        f.extension in _TEMP_EXTENSIONS
        or f.filename.startswith(("~", ".#"))
        or f.contains_any(_TEMP_DIR_MARKERS)
    )


def _is_cache(f: PathFacts) -> bool:
    return f.extension == "cache" or f.contains_any(_CACHE_MARKERS)


def _is_log(f: PathFacts) -> bool:
    return f.extension in _LOG_EXTENSIONS or f.contains_any(_LOG_DIR_MARKERS)


def _is_browser_data(f: PathFacts) -> bool:
    return f.contains_any(_BROWSER_MARKERS) or (f.extension == "sqlite" and "mozilla" in f.path_str)


def _is_download(f: PathFacts) -> bool:
    return f.contains_any(_DOWNLOAD_MARKERS)


def _is_recycle_bin(f: PathFacts) -> bool:
    return f.contains_any(_RECYCLE_MARKERS)


def _is_system_junk(f: PathFacts) -> bool:
    return (
        f.extension in _JUNK_EXTENSIONS
        or f.filename.startswith("core.")
        or f.filename in _JUNK_FILENAMES
    )


def _is_large(f: PathFacts) -> bool:
    return f.metadata is not None and f.metadata.st_size > LARGE_FILE_BYTES


def _is_old(f: PathFacts) -> bool:
    if f.metadata is None:
        return False
    elapsed = f.now - f.metadata.st_mtime
    # mtime in the future counts as brand new
    return elapsed > 0 and int(elapsed // _SECONDS_PER_DAY) > OLD_FILE_DAYS


Rule = tuple[Callable[[PathFacts], bool], FileCategory]

RULES: tuple[Rule, ...] = (
    (_is_temporary, FileCategory.TEMPORARY_FILES),
    (_is_cache, FileCategory.CACHE_FILES),
    (_is_log, FileCategory.LOG_FILES),
    (_is_browser_data, FileCategory.BROWSER_DATA),
    (_is_download, FileCategory.DOWNLOADS),
    (_is_recycle_bin, FileCategory.RECYCLE_BIN),
    (_is_system_junk, FileCategory.SYSTEM_JUNK),
    (_is_large, FileCategory.LARGE_FILES),
    (_is_old, FileCategory.OLD_FILES),
)

DEFAULT_CATEGORY = FileCategory.SYSTEM_JUNK


def categorize(
    path: PurePath | str,
    metadata: os.stat_result | None = None,
    now: float | None = None,
) -> FileCategory:
    """Classify *path* into a cleanup category.

    Args:
        path: File path; only its string form is inspected for name rules.
        metadata: ``os.stat`` result for the file, or None when unreadable.
            Without it the size and age rules never match.
        now: Reference timestamp for the age rule (defaults to the current time).

    Returns:
        The category of the first matching rule, or ``SYSTEM_JUNK``.
    """
    facts = PathFacts.of(path, metadata, now)
    for predicate, category in RULES:
        if predicate(facts):
            return category
    return DEFAULT_CATEGORY

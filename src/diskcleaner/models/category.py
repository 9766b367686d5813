"""File cleanup categories."""

from __future__ import annotations

from enum import Enum


class FileCategory(Enum):
    """Closed set of labels a scanned file can be grouped under."""

    TEMPORARY_FILES = "temporary_files"
    CACHE_FILES = "cache_files"
    LOG_FILES = "log_files"
    BROWSER_DATA = "browser_data"
    SYSTEM_JUNK = "system_junk"
    EMPTY_FOLDERS = "empty_folders"
    LARGE_FILES = "large_files"
    OLD_FILES = "old_files"
    DOWNLOADS = "downloads"
    RECYCLE_BIN = "recycle_bin"

    @classmethod
    def all(cls) -> list[FileCategory]:
        """All categories in display order."""
        return list(cls)

    @property
    def label(self) -> str:
        """Human-readable name, e.g. 'Temporary Files'."""
        return self.value.replace("_", " ").title()

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def is_safe_to_delete(self) -> bool:
        """Whether files in this category may be removed without explicit confirmation."""
        return self in _SAFE_CATEGORIES


_DESCRIPTIONS: dict[FileCategory, str] = {
    FileCategory.TEMPORARY_FILES: "Temporary files that can be safely deleted",
    FileCategory.CACHE_FILES: "Application cache files",
    FileCategory.LOG_FILES: "Log files from applications and system",
    FileCategory.BROWSER_DATA: "Browser cache, cookies, and temporary data",
    FileCategory.SYSTEM_JUNK: "System junk files and backups",
    FileCategory.EMPTY_FOLDERS: "Empty directories",
    FileCategory.LARGE_FILES: "Large files over 100MB",
    FileCategory.OLD_FILES: "Files older than 30 days",
    FileCategory.DOWNLOADS: "Files in download directories",
    FileCategory.RECYCLE_BIN: "Files in trash/recycle bin",
}

_SAFE_CATEGORIES = frozenset(
    {
        FileCategory.TEMPORARY_FILES,
        FileCategory.CACHE_FILES,
        FileCategory.LOG_FILES,
        FileCategory.SYSTEM_JUNK,
        FileCategory.EMPTY_FOLDERS,
        FileCategory.RECYCLE_BIN,
    }
)

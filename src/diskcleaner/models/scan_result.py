"""Scan result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from diskcleaner.models.category import FileCategory


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Result of scanning a directory tree.

    ``total_files`` and ``total_size`` cover only files that passed every
    scan filter and were classified, so they always agree with the
    per-category lists.  Files skipped by the size, age, hidden or
    exclusion filters are not counted here; the scan's ``Scanning``
    progress snapshots count every regular file inspected instead.  Empty
    folders appear under their category but add nothing to either total.

    ``files_by_category`` only holds categories that received at least one
    path.  Path order within a category is not meaningful.
    """

    total_files: int = 0
    total_size: int = 0
    files_by_category: dict[FileCategory, list[Path]] = field(default_factory=dict)
    scan_duration: float = 0.0

    def files_in(self, category: FileCategory) -> list[Path]:
        """Paths classified under *category* (empty if none)."""
        return list(self.files_by_category.get(category, ()))

    def files_in_categories(self, categories: list[FileCategory] | set[FileCategory]) -> list[Path]:
        """Concatenate the paths of several categories, in listing order."""
        files: list[Path] = []
        for category in FileCategory.all():
            if category in categories:
                files.extend(self.files_by_category.get(category, ()))
        return files

    def category_counts(self) -> dict[FileCategory, int]:
        return {category: len(paths) for category, paths in self.files_by_category.items()}

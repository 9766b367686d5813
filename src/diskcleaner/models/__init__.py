"""Diskcleaner data models."""

from diskcleaner.models.category import FileCategory
from diskcleaner.models.progress import (
    Cleaning,
    Complete,
    Error,
    FindingDuplicates,
    Idle,
    Operation,
    ProgressState,
    Scanning,
)
from diskcleaner.models.scan_result import ScanResult

__all__ = [
    "Cleaning",
    "Complete",
    "Error",
    "FileCategory",
    "FindingDuplicates",
    "Idle",
    "Operation",
    "ProgressState",
    "ScanResult",
    "Scanning",
]

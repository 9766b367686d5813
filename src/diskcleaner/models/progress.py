"""Progress state variants published by running operations.

Every variant is immutable; the progress channel replaces its value
wholesale on each transition instead of patching fields in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from diskcleaner.models.scan_result import ScanResult


class Operation(Enum):
    """The three long-running operations."""

    SCAN = "scan"
    FIND_DUPLICATES = "find_duplicates"
    CLEAN = "clean"


@dataclass(frozen=True, slots=True)
class Idle:
    """Nothing running, nothing waiting to be consumed."""


@dataclass(frozen=True, slots=True)
class Scanning:
    current_path: str = ""
    files_processed: int = 0


@dataclass(frozen=True, slots=True)
class FindingDuplicates:
    files_processed: int = 0
    total_files: int = 0


@dataclass(frozen=True, slots=True)
class Cleaning:
    files_processed: int = 0
    total_files: int = 0


@dataclass(frozen=True, slots=True)
class Complete:
    """Terminal state of a finished operation.

    Only the field belonging to ``operation`` is populated; the other
    two stay ``None``.
    """

    operation: Operation
    scan_result: ScanResult | None = None
    duplicates: list[list[Path]] | None = None
    cleaned_bytes: int | None = None


@dataclass(frozen=True, slots=True)
class Error:
    """Terminal state of a failed operation."""

    message: str


ProgressState = Union[Idle, Scanning, FindingDuplicates, Cleaning, Complete, Error]

BUSY_STATES = (Scanning, FindingDuplicates, Cleaning)

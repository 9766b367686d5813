"""Shared progress state between background operations and an observer."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from diskcleaner.models.progress import (
    BUSY_STATES,
    Complete,
    Error,
    Idle,
    Operation,
    ProgressState,
)
from diskcleaner.models.scan_result import ScanResult

log = logging.getLogger(__name__)


class OperationInProgressError(Exception):
    """Raised when an operation starts while the channel is still occupied."""


class ProgressChannel:
    """Single-slot, lock-guarded holder of the current ``ProgressState``.

    Workers publish snapshots with :meth:`update` and finish with one of the
    ``set_*`` methods; an observer polls :meth:`read` and consumes terminal
    states with :meth:`take_finished`.  The lock is only held while the slot
    is read or replaced.

    Operations are serialized: :meth:`begin` refuses to start while another
    operation is running or while a ``Complete`` state has not been consumed,
    so a finished result can never be overwritten before it is seen.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state: ProgressState = Idle()

    def read(self) -> ProgressState:
        """Return the current state (never blocks on I/O)."""
        with self._lock:
            return self._state

    @property
    def state(self) -> ProgressState:
        return self.read()

    def is_busy(self) -> bool:
        """True while a scan, duplicate search or cleanup is running."""
        with self._lock:
            return isinstance(self._state, BUSY_STATES)

    def reset(self) -> None:
        """Force the channel back to Idle, discarding any unconsumed result."""
        with self._lock:
            self._state = Idle()

    def begin(self, initial: ProgressState) -> None:
        """Claim the channel for a new operation.

        Args:
            initial: The in-progress state to publish.

        Raises:
            OperationInProgressError: If an operation is running or its
                ``Complete`` result has not been consumed yet.
        """
        with self._lock:
            current = self._state
            if isinstance(current, BUSY_STATES):
                raise OperationInProgressError(f"Another operation is running ({type(current).__name__})")
            if isinstance(current, Complete):
                raise OperationInProgressError(
                    f"Result of the previous {current.operation.value} operation has not been consumed"
                )
            self._state = initial
        log.debug("Progress channel claimed: %s", type(initial).__name__)

    def update(self, state: ProgressState) -> None:
        """Publish an in-progress snapshot."""
        with self._lock:
            self._state = state

    def set_scan_complete(self, result: ScanResult) -> None:
        with self._lock:
            self._state = Complete(Operation.SCAN, scan_result=result)

    def set_duplicates_complete(self, duplicates: list[list[Path]]) -> None:
        with self._lock:
            self._state = Complete(Operation.FIND_DUPLICATES, duplicates=duplicates)

    def set_cleanup_complete(self, cleaned_bytes: int) -> None:
        with self._lock:
            self._state = Complete(Operation.CLEAN, cleaned_bytes=cleaned_bytes)

    def set_error(self, message: str) -> None:
        with self._lock:
            self._state = Error(message)

    def take_finished(self) -> Complete | Error | None:
        """Consume a terminal state, moving the channel back to Idle.

        Returns:
            The ``Complete`` or ``Error`` state, or None if the channel is
            idle or an operation is still running.
        """
        with self._lock:
            current = self._state
            if isinstance(current, (Complete, Error)):
                self._state = Idle()
                return current
            return None

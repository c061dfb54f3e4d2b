"""Session statistics accumulator."""

from __future__ import annotations

import threading

from objector.model.session_result import SessionStats


class StatsAggregator:
    """Folds per-pass counters into monotonically non-decreasing totals.

    Written only by the scheduler's timeline; the lock keeps ``snapshot()``
    consistent for readers on other threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._objects_scanned = 0
        self._matches_found = 0

    def accumulate(self, objects_scanned: int, matches_found: int) -> None:
        if objects_scanned < 0 or matches_found < 0:
            raise ValueError(
                f"pass counters must be non-negative, got "
                f"objects_scanned={objects_scanned}, matches_found={matches_found}"
            )
        with self._lock:
            self._objects_scanned += objects_scanned
            self._matches_found += matches_found

    def snapshot(self) -> SessionStats:
        with self._lock:
            return SessionStats(
                objects_scanned=self._objects_scanned,
                matches_found=self._matches_found,
            )

"""Scan scheduler — drives one-shot and periodic passes under a deadline.

State machine::

    IDLE ──start()──▶ RUNNING ──deadline──▶ COMPLETED
                         └──────cancel()───▶ CANCELLED

Passes run on the thread that called ``start()`` and never overlap. The
wait between passes is the only suspension point; ``cancel()`` (from any
thread or a signal handler) wakes it immediately. A pass already in flight
is allowed to finish first.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

import schedule

from objector.core.config import (
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_PERIOD,
    DEFAULT_TIMEOUT,
)
from objector.core.session import MonitorSession
from objector.errors import SchedulerStateError
from objector.model import SessionState
from objector.model.session_result import SessionResult

logger = logging.getLogger(__name__)


class RootSource(Protocol):
    """Anything that can produce the live root of the graph for one pass."""

    def evaluate(self) -> Any:
        ...


class StaticRoot:
    """Root source over an in-process graph.

    Every pass sees the same live object, so mutations made between passes
    are picked up.
    """

    def __init__(self, root: Any, label: str = ""):
        self.root = root
        self.label = label

    def evaluate(self) -> Any:
        return self.root

    def __repr__(self) -> str:
        return f"StaticRoot({type(self.root).__name__})"


class ScanScheduler:
    """Runs a session's passes on a fixed period until deadline or cancel."""

    def __init__(
        self,
        session: MonitorSession,
        *,
        period: float = DEFAULT_PERIOD,
        deadline: float = DEFAULT_TIMEOUT,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        on_degraded: Optional[Callable[[int], None]] = None,
        target: str = "",
    ):
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.session = session
        self.period = period
        self.deadline = deadline
        self.failure_threshold = failure_threshold
        self.on_degraded = on_degraded
        self.target = target

        self._state = SessionState.IDLE
        self._state_lock = threading.Lock()
        self._cancelled = threading.Event()
        self._passes_run = 0
        self._failed_passes = 0
        self._consecutive_failures = 0
        self._degraded = False
        self._started_at = ""
        self._result: Optional[SessionResult] = None

    # ── state ───────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def degraded(self) -> bool:
        return self._degraded

    @property
    def result(self) -> Optional[SessionResult]:
        """The final result once a terminal state is reached, else None."""
        return self._result

    def cancel(self) -> None:
        """Request cancellation. Safe from any thread or signal handler."""
        self._cancelled.set()

    def _begin(self) -> None:
        with self._state_lock:
            if self._state is not SessionState.IDLE:
                raise SchedulerStateError(self._state.value, "start")
            self._state = SessionState.RUNNING
        self._started_at = datetime.now(timezone.utc).isoformat()

    # ── entry points ────────────────────────────────────────────────

    def run_once(self, source: RootSource) -> SessionResult:
        """One-shot mode: a single pass, then complete."""
        self._begin()
        if not self._cancelled.is_set():
            self._run_pass(source)
        return self._finish()

    def start(self, source: RootSource) -> SessionResult:
        """Periodic mode: pass now, then every ``period`` until done.

        Blocks until the deadline elapses or ``cancel()`` is called, and
        returns the final result.
        """
        self._begin()
        deadline_at = time.monotonic() + self.deadline
        logger.info(
            "Monitoring %s every %.3gs for %.3gs",
            self.target or source,
            self.period,
            self.deadline,
        )

        if not self._cancelled.is_set():
            self._run_pass(source)

        jobs = schedule.Scheduler()
        jobs.every(self.period).seconds.do(self._run_pass, source)
        try:
            while not self._cancelled.is_set():
                remaining = deadline_at - time.monotonic()
                if remaining <= 0:
                    break
                idle = jobs.idle_seconds
                wait = remaining if idle is None else min(max(idle, 0.0), remaining)
                if self._cancelled.wait(wait):
                    break
                if time.monotonic() >= deadline_at:
                    break
                jobs.run_pending()
        finally:
            jobs.clear()
        return self._finish()

    # ── internals ───────────────────────────────────────────────────

    def _run_pass(self, source: RootSource) -> None:
        self._passes_run += 1
        try:
            root = source.evaluate()
            self.session.run_pass(root)
        except Exception as exc:
            self._failed_passes += 1
            self._consecutive_failures += 1
            logger.warning(
                "Pass %d failed (%d consecutive): %s",
                self._passes_run,
                self._consecutive_failures,
                exc,
            )
            logger.debug("Pass failure detail", exc_info=True)
            if self._consecutive_failures == self.failure_threshold:
                self._degraded = True
                logger.error(
                    "Session degraded: %d consecutive pass failures",
                    self._consecutive_failures,
                )
                if self.on_degraded is not None:
                    self.on_degraded(self._consecutive_failures)
            return
        self._consecutive_failures = 0

    def _finish(self) -> SessionResult:
        with self._state_lock:
            if self._result is not None:
                return self._result
            self._state = (
                SessionState.CANCELLED if self._cancelled.is_set() else SessionState.COMPLETED
            )
            self._result = SessionResult(
                findings=self.session.findings,
                stats=self.session.snapshot(),
                state=self._state,
                passes_run=self._passes_run,
                failed_passes=self._failed_passes,
                degraded=self._degraded,
                target=self.target,
                started_at=self._started_at,
                finished_at=datetime.now(timezone.utc).isoformat(),
            )
        logger.info(
            "Session %s after %d passes (%d failed)",
            self._state.value,
            self._passes_run,
            self._failed_passes,
        )
        if self.session.reporter is not None:
            self.session.reporter.summarize(self._result)
        return self._result

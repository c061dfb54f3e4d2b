"""Exception hierarchy for objector.

Configuration problems are fatal and surface before the first pass runs.
Everything raised while a session is running is recovered by the scheduler.
"""

from __future__ import annotations


class ObjectorError(Exception):
    """Base class for all objector errors."""


class ConfigError(ObjectorError, ValueError):
    """Raised when monitor configuration is invalid."""


class PatternConfigError(ConfigError):
    """Raised when a detection rule cannot be compiled."""

    def __init__(self, name: str, pattern: str, reason: str) -> None:
        self.name = name
        self.pattern = pattern
        super().__init__(f"pattern {name!r} ({pattern!r}) is invalid: {reason}")


class SnapshotError(ObjectorError):
    """Raised when a runtime snapshot payload is malformed."""


class DriverError(ObjectorError):
    """Raised when the browser runtime cannot be launched or navigated."""


class SchedulerStateError(RuntimeError):
    """Raised on an illegal scheduler state transition."""

    def __init__(self, current: str, action: str) -> None:
        self.current = current
        super().__init__(f"cannot {action} a scheduler in state {current!r}")

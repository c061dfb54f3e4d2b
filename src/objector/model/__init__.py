"""Enums shared across the engine and reporting layers."""

from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    """Lifecycle of a monitoring session. Terminal states are absorbing."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.COMPLETED, SessionState.CANCELLED)


class ValueKind(str, Enum):
    """How the scanner treats a host value."""

    SCALAR = "scalar"
    COMPOSITE = "composite"
    OPAQUE = "opaque"

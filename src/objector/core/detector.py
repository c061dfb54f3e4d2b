"""Match detector — classifies one scalar value against the active rules."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional

from objector.model.finding import Finding
from objector.patterns import (
    CUSTOM_STRING,
    CUSTOM_STRING_DESCRIPTION,
    PatternRegistry,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MatchDetector:
    """Yields zero or one Finding per value.

    With a custom literal the literal is the only rule (case-sensitive
    substring). Otherwise rules are tried in registration order and the
    first match wins; later rules are not evaluated for that value.
    """

    def __init__(
        self,
        registry: PatternRegistry,
        custom_literal: Optional[str] = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ):
        # Registry is read-only once a session starts.
        self._rules = registry.rules_in_order()
        self._literal = custom_literal or None
        self._clock = clock

    @property
    def custom_literal(self) -> Optional[str]:
        return self._literal

    def classify(self, value: Any, path: str) -> Optional[Finding]:
        if not isinstance(value, str):
            return None

        if self._literal is not None:
            if self._literal not in value:
                return None
            return Finding(
                pattern_name=CUSTOM_STRING,
                path=path,
                value=value,
                description=CUSTOM_STRING_DESCRIPTION,
                timestamp=self._clock(),
                matched=self._literal,
            )

        for rule in self._rules:
            m = rule.search(value)
            if m is None:
                continue
            return Finding(
                pattern_name=rule.name,
                path=path,
                value=value,
                description=rule.description,
                timestamp=self._clock(),
                matched=m.group(0),
            )
        return None

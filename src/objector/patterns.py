"""Detection rule registry.

Single source of truth for the rules a session evaluates. Registration order
is match precedence: the first rule whose regex matches a value wins.

Structure:
  DEFAULT_PATTERNS     - the built-in rules, in precedence order
  CUSTOM_STRING        - label reported for literal-substring matches
  PatternRegistry      - ordered, name-unique rule collection
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from objector.errors import PatternConfigError

# ── Rule names (public) ─────────────────────────────────────────────
AWS_ACCESS_KEY = "AWS Access Key"
AWS_SECRET_KEY = "AWS Secret Key"
PRIVATE_KEY = "Private Key"
JWT_TOKEN = "JWT Token"
API_KEY = "API Key"

CUSTOM_STRING = "Custom String"
CUSTOM_STRING_DESCRIPTION = "Custom String Match"


@dataclass(frozen=True, slots=True)
class Pattern:
    """A named, compiled detection rule."""

    name: str
    matcher: re.Pattern[str]
    description: str = ""

    def search(self, value: str) -> re.Match[str] | None:
        return self.matcher.search(value)


# (name, regex, description) in precedence order.
DEFAULT_PATTERNS: tuple[tuple[str, str, str], ...] = (
    (
        AWS_ACCESS_KEY,
        r"\b(?:AKIA|ASIA)[A-Z0-9]{16}\b",
        "AWS Access Key ID",
    ),
    (
        AWS_SECRET_KEY,
        r"\b[A-Za-z0-9/+=]{40}(?![A-Za-z0-9/+=])",
        "AWS Secret Access Key",
    ),
    (
        PRIVATE_KEY,
        r"-----BEGIN (?:RSA|OPENSSH|DSA|EC|PGP) PRIVATE KEY-----",
        "Private Key Header",
    ),
    (
        JWT_TOKEN,
        r"eyJ[A-Za-z0-9_=-]+\.[A-Za-z0-9_=-]+\.?[A-Za-z0-9_.+/=-]*$",
        "JWT Token",
    ),
    (
        API_KEY,
        r"\b[a-zA-Z0-9]{32,}\b",
        "Generic API Key",
    ),
)


class PatternRegistry:
    """Ordered collection of named detection rules.

    Re-registering an existing name replaces its regex and description but
    keeps the rule's original precedence slot.
    """

    def __init__(self) -> None:
        self._rules: dict[str, Pattern] = {}

    def register(
        self,
        name: str,
        pattern: str | re.Pattern[str],
        description: str = "",
    ) -> "PatternRegistry":
        """Add or replace the rule *name*. Returns ``self`` for chaining.

        Raises ``PatternConfigError`` if *pattern* does not compile.
        """
        if not name:
            raise PatternConfigError(name, str(pattern), "rule name must be non-empty")
        if isinstance(pattern, re.Pattern):
            matcher = pattern
        else:
            try:
                matcher = re.compile(pattern)
            except re.error as exc:
                raise PatternConfigError(name, pattern, str(exc)) from exc
        self._rules[name] = Pattern(name=name, matcher=matcher, description=description)
        return self

    def rules_in_order(self) -> tuple[Pattern, ...]:
        """Snapshot of the rules in precedence order."""
        return tuple(self._rules.values())

    def get(self, name: str) -> Pattern | None:
        return self._rules.get(name)

    def names(self) -> list[str]:
        return list(self._rules)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.rules_in_order())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules


def default_registry() -> PatternRegistry:
    """Return a fresh registry holding the built-in rules."""
    registry = PatternRegistry()
    for name, regex, description in DEFAULT_PATTERNS:
        registry.register(name, regex, description)
    return registry


def _assert_default_pattern_invariants() -> None:
    """Fail fast on invariant violations.

    Called at import time so a broken built-in rule never reaches a session.
    """
    names = [name for name, _, _ in DEFAULT_PATTERNS]
    if len(names) != len(set(names)):
        raise AssertionError(f"Duplicate default pattern names: {names}")
    if CUSTOM_STRING in names:
        raise AssertionError(f"{CUSTOM_STRING!r} is reserved for literal matches")
    for name, regex, _ in DEFAULT_PATTERNS:
        try:
            re.compile(regex)
        except re.error as exc:
            raise AssertionError(f"Default pattern {name!r} does not compile: {exc}")


_assert_default_pattern_invariants()

"""Duration parsing for CLI flags and config files ("20s", "1.5m", "500ms")."""

from __future__ import annotations

import re

from objector.errors import ConfigError

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)\s*(ms|s|m|h)?\s*$")

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(raw: str | int | float, *, field: str = "duration") -> float:
    """Return *raw* as seconds. Bare numbers are seconds.

    Raises ``ConfigError`` for anything unparseable or negative.
    """
    if isinstance(raw, bool):
        raise ConfigError(f"{field}: expected a duration, got {raw!r}")
    if isinstance(raw, (int, float)):
        seconds = float(raw)
    else:
        m = _DURATION_RE.match(str(raw))
        if m is None:
            raise ConfigError(f"{field}: cannot parse duration {raw!r} (use e.g. 20s, 500ms, 2m)")
        seconds = float(m.group(1)) * _UNIT_SECONDS[m.group(2) or "s"]
    if seconds < 0:
        raise ConfigError(f"{field}: duration must not be negative, got {raw!r}")
    return seconds

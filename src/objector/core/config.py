"""Scan and monitor configuration dataclasses.

Constructed once at session start and read-only afterwards. Every validation
error is raised here, before any pass runs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable

from objector.errors import ConfigError
from objector.patterns import PatternRegistry, default_registry
from objector.utils.durations import parse_duration

# Volatile or huge built-in subtrees of a browser global scope.
DEFAULT_IGNORED_NAMES: frozenset[str] = frozenset({
    "performance",
    "localStorage",
    "sessionStorage",
    "indexedDB",
    "webkitStorageInfo",
    "chrome",
    "document",
    "history",
})

DEFAULT_MAX_DEPTH = 5
DEFAULT_PERIOD = 1.0          # seconds between passes
DEFAULT_TIMEOUT = 20.0        # session deadline, seconds
DEFAULT_FAILURE_THRESHOLD = 3
DEFAULT_MAX_NODES = 50_000    # in-page snapshot bound
DEFAULT_NAVIGATION_TIMEOUT = 30.0

CONFIG_ENV_VAR = "OBJECTOR_CONFIG"


def _names(raw: Iterable[str]) -> frozenset[str]:
    """One name or an iterable of names; a bare string is never split."""
    if isinstance(raw, str):
        return frozenset({raw})
    return frozenset(raw)


def _name_set(raw: Any, field: str) -> frozenset[str]:
    if not isinstance(raw, (str, list, tuple, set, frozenset)):
        raise ConfigError(f"{field} must be a name or a list of names, got {raw!r}")
    return _names(raw if isinstance(raw, str) else map(str, raw))


@dataclass(frozen=True)
class ScanOptions:
    """Immutable per-session traversal options.

    When ``custom_literal`` is set it is the only rule evaluated; the
    registered patterns are ignored for the whole session.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    ignored_names: frozenset[str] = DEFAULT_IGNORED_NAMES
    custom_literal: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ConfigError(f"max_depth must be an integer, got {self.max_depth!r}")
        if self.max_depth < 0:
            raise ConfigError(f"max_depth must be >= 0, got {self.max_depth}")
        if not isinstance(self.ignored_names, frozenset):
            object.__setattr__(self, "ignored_names", _names(self.ignored_names))
        if self.custom_literal is not None and not isinstance(self.custom_literal, str):
            raise ConfigError(
                f"custom_string must be a string, got {type(self.custom_literal).__name__} "
                f"{self.custom_literal!r}"
            )
        if self.custom_literal == "":
            # An empty literal would match every string.
            object.__setattr__(self, "custom_literal", None)


@dataclass(frozen=True)
class PatternSpec:
    """A user-supplied detection rule, compiled when the registry is built."""

    name: str
    pattern: str
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "PatternSpec":
        if not isinstance(data, dict):
            raise ConfigError(f"pattern entry must be a mapping, got {data!r}")
        unknown = set(data) - {"name", "pattern", "description"}
        if unknown:
            raise ConfigError(f"pattern entry has unknown keys: {sorted(unknown)}")
        try:
            return cls(
                name=str(data["name"]),
                pattern=str(data["pattern"]),
                description=str(data.get("description", "")),
            )
        except KeyError as exc:
            raise ConfigError(f"pattern entry is missing {exc.args[0]!r}") from exc


@dataclass(frozen=True)
class MonitorConfig:
    """Immutable monitor configuration.

    Can be loaded from a YAML file or constructed programmatically; CLI flags
    are layered on with :meth:`with_overrides`.
    """

    scan: ScanOptions = field(default_factory=ScanOptions)
    period: float = DEFAULT_PERIOD
    timeout: float = DEFAULT_TIMEOUT
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    patterns: tuple[PatternSpec, ...] = ()
    replace_default_patterns: bool = False
    headers: dict[str, str] = field(default_factory=dict)
    headless: bool = True
    navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT
    max_nodes: int = DEFAULT_MAX_NODES

    def __post_init__(self) -> None:
        if self.period <= 0:
            raise ConfigError(f"period must be positive, got {self.period}")
        if self.timeout < 0:
            raise ConfigError(f"timeout must not be negative, got {self.timeout}")
        if self.failure_threshold < 1:
            raise ConfigError(f"failure_threshold must be >= 1, got {self.failure_threshold}")
        if self.max_nodes < 1:
            raise ConfigError(f"max_nodes must be >= 1, got {self.max_nodes}")

    def build_registry(self) -> PatternRegistry:
        """Compile the session's rule set. Raises ``PatternConfigError``."""
        registry = PatternRegistry() if self.replace_default_patterns else default_registry()
        for spec in self.patterns:
            registry.register(spec.name, spec.pattern, spec.description)
        if not len(registry) and self.scan.custom_literal is None:
            raise ConfigError("no detection rules configured")
        return registry

    def with_overrides(
        self,
        *,
        max_depth: int | None = None,
        ignored_names: Iterable[str] | None = None,
        extra_ignored_names: Iterable[str] | None = None,
        custom_literal: str | None = None,
        period: float | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        headless: bool | None = None,
    ) -> "MonitorConfig":
        """Return a copy with every non-None argument applied."""
        scan = self.scan
        names = _names(ignored_names) if ignored_names is not None else scan.ignored_names
        if extra_ignored_names:
            names = names | _names(extra_ignored_names)
        scan = ScanOptions(
            max_depth=scan.max_depth if max_depth is None else max_depth,
            ignored_names=names,
            custom_literal=scan.custom_literal if custom_literal is None else custom_literal,
        )
        changes: dict[str, Any] = {"scan": scan}
        if period is not None:
            changes["period"] = period
        if timeout is not None:
            changes["timeout"] = timeout
        if headers:
            changes["headers"] = {**self.headers, **headers}
        if headless is not None:
            changes["headless"] = headless
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MonitorConfig":
        """Build a config from the YAML/dict layout."""
        allowed = {
            "max_depth", "ignored_names", "extra_ignored_names", "custom_string",
            "period", "timeout", "failure_threshold", "patterns",
            "replace_default_patterns", "headers", "headless",
            "navigation_timeout", "max_nodes",
        }
        unknown = set(data) - allowed
        if unknown:
            raise ConfigError(f"unknown config keys: {sorted(unknown)}")

        ignored = data.get("ignored_names")
        names = DEFAULT_IGNORED_NAMES if ignored is None else _name_set(ignored, "ignored_names")
        names = names | _name_set(data.get("extra_ignored_names") or (), "extra_ignored_names")

        headers = data.get("headers") or {}
        if not isinstance(headers, dict):
            raise ConfigError("headers must be a mapping of header name to value")

        patterns = data.get("patterns") or []
        if not isinstance(patterns, list):
            raise ConfigError("patterns must be a list")

        try:
            return cls(
                scan=ScanOptions(
                    max_depth=data.get("max_depth", DEFAULT_MAX_DEPTH),
                    ignored_names=names,
                    custom_literal=data.get("custom_string"),
                ),
                period=parse_duration(data.get("period", DEFAULT_PERIOD), field="period"),
                timeout=parse_duration(data.get("timeout", DEFAULT_TIMEOUT), field="timeout"),
                failure_threshold=int(data.get("failure_threshold", DEFAULT_FAILURE_THRESHOLD)),
                patterns=tuple(PatternSpec.from_dict(p) for p in patterns),
                replace_default_patterns=bool(data.get("replace_default_patterns", False)),
                headers={str(k): str(v) for k, v in headers.items()},
                headless=bool(data.get("headless", True)),
                navigation_timeout=parse_duration(
                    data.get("navigation_timeout", DEFAULT_NAVIGATION_TIMEOUT),
                    field="navigation_timeout",
                ),
                max_nodes=int(data.get("max_nodes", DEFAULT_MAX_NODES)),
            )
        except ConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"invalid config value: {exc}") from exc

    @classmethod
    def from_yaml(cls, path: Path | str) -> "MonitorConfig":
        """Load configuration from a YAML file."""
        import yaml

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as exc:
            raise ConfigError(f"cannot read config {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"config {path} is not valid YAML: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError(f"config {path} must contain a mapping at the top level")
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "MonitorConfig":
        """Load *path*, else ``$OBJECTOR_CONFIG``, else defaults."""
        path = path or os.environ.get(CONFIG_ENV_VAR)
        if path:
            return cls.from_yaml(path)
        return cls()

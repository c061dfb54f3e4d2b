"""Finding — one reported occurrence of a detected secret."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True, slots=True)
class Finding:
    """Immutable record of a value that matched a detection rule.

    Corresponds to ``findings[]`` in ``session_result.schema.json``.
    """

    pattern_name: str
    path: str
    value: str
    description: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    matched: str = ""

    @property
    def seen_key(self) -> tuple[str, str]:
        """Identity used for cross-pass deduplication."""
        return make_seen_key(self.path, self.value)

    # ── serialisation ───────────────────────────────────────────────

    def to_dict(self) -> dict:
        d: dict = {
            "pattern": self.pattern_name,
            "path": self.path,
            "value": self.value,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.matched:
            d["matched"] = self.matched
        return d


def make_seen_key(path: str, value: str) -> tuple[str, str]:
    """Dedup key for a finding: the (path, value) pair, not the value alone."""
    return (path, value)

"""SessionResult — the artifact handed back when a monitoring session ends."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from objector import __version__
from objector.model import SessionState
from objector.model.finding import Finding


@dataclass(frozen=True, slots=True)
class SessionStats:
    """Running totals for a session. Instances are snapshots, never mutated."""

    objects_scanned: int = 0
    matches_found: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "objects_scanned": self.objects_scanned,
            "matches_found": self.matches_found,
        }


@dataclass(slots=True)
class SessionResult:
    """Assembled session outcome matching ``session_result.schema.json``.

    Built once by the scheduler when the session reaches a terminal state.
    """

    findings: list[Finding] = field(default_factory=list)
    stats: SessionStats = field(default_factory=SessionStats)
    state: SessionState = SessionState.COMPLETED
    passes_run: int = 0
    failed_passes: int = 0
    degraded: bool = False
    target: str = ""
    started_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )
    finished_at: str = ""
    tool_version: str = __version__

    # ── serialisation ───────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Produce the JSON form matching the schema."""
        by_pattern: dict[str, int] = {}
        for f in self.findings:
            by_pattern[f.pattern_name] = by_pattern.get(f.pattern_name, 0) + 1

        return {
            "schema_version": "session_result_v1",
            "session": {
                "target": self.target,
                "state": self.state.value,
                "started_at": self.started_at,
                "finished_at": self.finished_at,
                "tool_version": self.tool_version,
                "passes_run": self.passes_run,
                "failed_passes": self.failed_passes,
                "degraded": self.degraded,
            },
            "stats": self.stats.to_dict(),
            "summary": {
                "findings_total": len(self.findings),
                "by_pattern": by_pattern,
            },
            "findings": [f.to_dict() for f in self.findings],
        }

"""Monitor session — the state that lives for one whole monitoring run.

A session owns its Deduplicator, StatsAggregator and first-seen findings.
Nothing here is process-wide; independent sessions share no state.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Optional

from objector.core.config import MonitorConfig, ScanOptions
from objector.core.dedup import Deduplicator
from objector.core.detector import MatchDetector, utcnow
from objector.core.host import ObjectHost
from objector.core.scanner import GraphScanner
from objector.core.stats import StatsAggregator
from objector.model.finding import Finding
from objector.model.session_result import SessionStats
from objector.patterns import PatternRegistry

if TYPE_CHECKING:
    from objector.reports import Reporter

logger = logging.getLogger(__name__)


class MonitorSession:
    """Session context passed by reference into every scheduled pass."""

    def __init__(
        self,
        registry: PatternRegistry,
        options: ScanOptions,
        *,
        root_label: str = "",
        reporter: Optional[Reporter] = None,
        host: Optional[ObjectHost] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.options = options
        self.root_label = root_label
        self.reporter = reporter
        self.scanner = GraphScanner(
            MatchDetector(registry, options.custom_literal, clock=clock),
            host=host,
        )
        self.dedup = Deduplicator()
        self.stats = StatsAggregator()
        self._findings: list[Finding] = []

    @classmethod
    def from_config(cls, config: MonitorConfig, **kwargs: Any) -> "MonitorSession":
        """Build a session from *config*. Raises ``ConfigError`` on bad rules."""
        return cls(config.build_registry(), config.scan, **kwargs)

    @property
    def findings(self) -> list[Finding]:
        """Admitted findings in first-seen order (a copy)."""
        return list(self._findings)

    def snapshot(self) -> SessionStats:
        return self.stats.snapshot()

    def _deliver(self, finding: Finding) -> bool:
        if self.reporter is None:
            return True
        try:
            self.reporter.report(finding)
        except Exception as exc:
            logger.warning("Reporter failed on %s, will retry next pass: %s", finding.path, exc)
            logger.debug("Reporter failure detail", exc_info=True)
            return False
        return True

    def run_pass(self, root: Any) -> list[Finding]:
        """Scan *root* once; report and return only never-seen findings."""
        scan_pass = self.scanner.scan(root, self.root_label, self.options)
        admitted: list[Finding] = []
        try:
            for finding in scan_pass:
                if not self.dedup.admit(finding):
                    continue
                if not self._deliver(finding):
                    # Not seen until delivered; a later pass retries it.
                    self.dedup.forget(finding)
                    continue
                self._findings.append(finding)
                admitted.append(finding)
        finally:
            self.stats.accumulate(scan_pass.objects_scanned, len(admitted))
        logger.debug(
            "pass scanned %d objects, %d matches, %d new",
            scan_pass.objects_scanned,
            scan_pass.matches_found,
            len(admitted),
        )
        return admitted

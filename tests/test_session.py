"""Tests for MonitorSession, Deduplicator and StatsAggregator."""

from __future__ import annotations

import logging
import threading
from typing import Any

import pytest

from objector.core.config import MonitorConfig, ScanOptions
from objector.core.dedup import Deduplicator
from objector.core.session import MonitorSession
from objector.core.stats import StatsAggregator
from objector.errors import ConfigError
from objector.model.finding import Finding, make_seen_key
from objector.model.session_result import SessionStats
from objector.patterns import default_registry
from objector.reports import CollectingReporter

AWS_KEY = "AKIA" + "Q" * 16


def _finding(path: str = "a", value: str = AWS_KEY) -> Finding:
    return Finding(pattern_name="AWS Access Key", path=path, value=value, description="")


class TestDeduplicator:

    def test_admits_once(self) -> None:
        dedup = Deduplicator()
        assert dedup.admit(_finding()) is True
        assert dedup.admit(_finding()) is False
        assert dedup.seen_count == 1

    def test_key_is_path_and_value(self) -> None:
        dedup = Deduplicator()
        assert dedup.admit(_finding("a")) is True
        assert dedup.admit(_finding("b")) is True
        assert dedup.admit(_finding("a", "other")) is True
        assert dedup.seen_count == 3

    def test_separator_characters_do_not_collide(self) -> None:
        """("a.b", "c") and ("a", "b.c") stay distinct keys."""
        assert make_seen_key("a.b", "c") != make_seen_key("a", "b.c")
        dedup = Deduplicator()
        assert dedup.admit(_finding("a.b", "c")) is True
        assert dedup.admit(_finding("a", "b.c")) is True

    def test_pattern_and_timestamp_not_part_of_key(self) -> None:
        dedup = Deduplicator()
        dedup.admit(_finding())
        other = Finding(pattern_name="API Key", path="a", value=AWS_KEY, description="x")
        assert other in dedup
        assert dedup.admit(other) is False


    def test_forget_allows_readmission(self) -> None:
        dedup = Deduplicator()
        dedup.admit(_finding())
        dedup.forget(_finding())
        assert _finding() not in dedup
        assert dedup.admit(_finding()) is True


class TestStatsAggregator:

    def test_accumulates(self) -> None:
        stats = StatsAggregator()
        stats.accumulate(10, 2)
        stats.accumulate(5, 0)
        assert stats.snapshot() == SessionStats(objects_scanned=15, matches_found=2)

    def test_snapshot_is_immutable_copy(self) -> None:
        stats = StatsAggregator()
        snap = stats.snapshot()
        stats.accumulate(1, 1)
        assert snap == SessionStats()

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            StatsAggregator().accumulate(-1, 0)

    def test_concurrent_accumulate(self) -> None:
        stats = StatsAggregator()

        def work() -> None:
            for _ in range(1000):
                stats.accumulate(1, 1)

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert stats.snapshot() == SessionStats(objects_scanned=4000, matches_found=4000)


class TestMonitorSession:

    @pytest.fixture
    def reporter(self) -> CollectingReporter:
        return CollectingReporter()

    @pytest.fixture
    def session(self, reporter: CollectingReporter) -> MonitorSession:
        return MonitorSession(
            default_registry(),
            ScanOptions(ignored_names=()),
            reporter=reporter,
        )

    def test_repeat_pass_reports_nothing_new(self, session, reporter) -> None:
        root = {"a": AWS_KEY}
        assert [f.path for f in session.run_pass(root)] == ["a"]
        assert session.run_pass(root) == []
        assert [f.path for f in reporter.findings] == ["a"]

    def test_stats_count_objects_every_pass_but_matches_once(self, session) -> None:
        root = {"a": AWS_KEY, "b": {}}
        session.run_pass(root)
        session.run_pass(root)
        assert session.snapshot() == SessionStats(objects_scanned=4, matches_found=1)

    def test_new_value_at_same_path_is_new_finding(self, session) -> None:
        root: dict[str, Any] = {"a": AWS_KEY}
        session.run_pass(root)
        root["a"] = "AKIA" + "Z" * 16
        assert [f.value for f in session.run_pass(root)] == [root["a"]]
        assert len(session.findings) == 2

    def test_findings_property_returns_copy(self, session) -> None:
        session.run_pass({"a": AWS_KEY})
        session.findings.clear()
        assert len(session.findings) == 1

    def test_reporter_failure_is_retried_next_pass(self, caplog) -> None:
        """A finding the reporter rejects is not marked seen; the rest of the pass is reported."""

        class FailsOnce(CollectingReporter):
            calls = 0

            def report(self, finding: Finding) -> None:
                self.calls += 1
                if self.calls == 1:
                    raise OSError("stdout closed")
                super().report(finding)

        reporter = FailsOnce()
        session = MonitorSession(default_registry(), ScanOptions(), reporter=reporter)
        root = {"a": AWS_KEY, "b": "AKIA" + "Z" * 16}

        with caplog.at_level(logging.WARNING, logger="objector.core.session"):
            first = session.run_pass(root)
        assert [f.path for f in first] == ["b"]
        assert "Reporter failed on a" in caplog.text
        assert session.snapshot().matches_found == 1

        second = session.run_pass(root)
        assert [f.path for f in second] == ["a"]
        assert [f.path for f in reporter.findings] == ["b", "a"]
        assert sorted(f.path for f in session.findings) == ["a", "b"]
        assert session.snapshot().matches_found == 2
        assert session.run_pass(root) == []

    def test_sessions_share_no_state(self) -> None:
        a = MonitorSession(default_registry(), ScanOptions())
        b = MonitorSession(default_registry(), ScanOptions())
        a.run_pass({"k": AWS_KEY})
        assert [f.path for f in b.run_pass({"k": AWS_KEY})] == ["k"]

    def test_from_config_rejects_bad_pattern(self) -> None:
        from objector.core.config import PatternSpec

        config = MonitorConfig(patterns=(PatternSpec("Broken", "(["),))
        with pytest.raises(ConfigError):
            MonitorSession.from_config(config)

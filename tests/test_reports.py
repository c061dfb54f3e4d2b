"""Tests for the console and JSON reporters."""

from __future__ import annotations

import io
import json

from rich.console import Console

from objector.model.finding import Finding
from objector.model.session_result import SessionResult, SessionStats
from objector.reports.console import ConsoleReporter
from objector.reports.json_reporter import JsonReporter

AWS_KEY = "AKIA" + "Q" * 16


def _finding(path: str = "config.aws") -> Finding:
    return Finding(
        pattern_name="AWS Access Key",
        path=path,
        value=AWS_KEY,
        description="AWS Access Key ID",
        matched=AWS_KEY,
    )


def _console() -> tuple[Console, io.StringIO]:
    buf = io.StringIO()
    return Console(file=buf, width=160, force_terminal=False, color_system=None), buf


class TestConsoleReporter:

    def test_rows_streamed_without_live(self) -> None:
        console, buf = _console()
        with ConsoleReporter(console, live=False) as reporter:
            reporter.report(_finding("a"))
            reporter.report(_finding("b"))
        out = buf.getvalue()
        assert out.count("Pattern") == 1
        assert "AWS Access Key" in out
        assert len(reporter.table.rows) == 2

    def test_summary_panel(self) -> None:
        console, buf = _console()
        reporter = ConsoleReporter(console, live=False)
        result = SessionResult(
            findings=[_finding()],
            stats=SessionStats(objects_scanned=42, matches_found=1),
            passes_run=4,
            failed_passes=3,
            degraded=True,
        )
        reporter.summarize(result)
        out = buf.getvalue()
        assert "Monitoring Statistics" in out
        assert "Total Objects Scanned: 42" in out
        assert "Total Matches Found:   1" in out
        assert "3/4" in out
        assert "degraded" in out

    def test_empty_session_prints_empty_table(self) -> None:
        console, buf = _console()
        ConsoleReporter(console, live=False).summarize(SessionResult())
        out = buf.getvalue()
        assert "Pattern" in out
        assert "Failed Passes" not in out

    def test_live_mode_starts_and_stops(self) -> None:
        console, buf = _console()
        reporter = ConsoleReporter(console, live=True)
        with reporter:
            assert reporter._live is not None
            reporter.report(_finding())
        assert reporter._live is None
        assert "AWS Access Key" in buf.getvalue()


class TestJsonReporter:

    def test_writes_validated_document(self) -> None:
        buf = io.StringIO()
        reporter = JsonReporter(buf)
        reporter.report(_finding())
        assert buf.getvalue() == ""
        reporter.summarize(SessionResult(findings=[_finding()], target="https://example.com"))
        text = buf.getvalue()
        assert text.endswith("\n")
        data = json.loads(text)
        assert data["session"]["target"] == "https://example.com"
        assert data["summary"]["by_pattern"] == {"AWS Access Key": 1}

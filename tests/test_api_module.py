"""Tests for objector.api — programmatic entrypoints.

Validates the public API surface used without CLI coupling.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest

import objector
from objector.api import monitor, monitor_url, scan_object
from objector.contracts.load import validate_instance
from objector.core.config import MonitorConfig, PatternSpec, ScanOptions
from objector.core.scheduler import StaticRoot
from objector.errors import ConfigError
from objector.model import SessionState
from objector.reports import CollectingReporter

AWS_KEY = "AKIA" + "Q" * 16


# ── scan_object ─────────────────────────────────────────────────────


class TestScanObject:
    """scan_object runs one pass and returns a schema-valid result."""

    def test_finds_nested_secret(self) -> None:
        result = scan_object({"aws": {"key": AWS_KEY}})
        assert [f.path for f in result.findings] == ["aws.key"]
        assert result.state is SessionState.COMPLETED
        assert result.passes_run == 1

    def test_result_matches_schema(self) -> None:
        result = scan_object({"aws": {"key": AWS_KEY}}, root_label="window")
        data = result.to_dict()
        validate_instance(data, "session_result.schema.json")
        assert data["session"]["target"] == "window"
        assert data["findings"][0]["path"] == "window.aws.key"
        assert data["findings"][0]["matched"] == AWS_KEY

    def test_reporter_receives_findings(self) -> None:
        reporter = CollectingReporter()
        result = scan_object({"a": AWS_KEY, "b": AWS_KEY}, reporter=reporter)
        assert reporter.findings == result.findings
        assert reporter.results == [result]

    def test_extra_pattern(self) -> None:
        config = MonitorConfig(
            patterns=(PatternSpec("Stripe Key", r"sk_live_[0-9a-zA-Z]{8}"),),
        )
        result = scan_object({"stripe": "sk_live_abcd1234"}, config=config)
        assert [f.pattern_name for f in result.findings] == ["Stripe Key"]

    def test_bad_pattern_raises_before_scanning(self) -> None:
        config = MonitorConfig(patterns=(PatternSpec("Broken", "(["),))
        with pytest.raises(ConfigError):
            scan_object({}, config=config)

    def test_package_reexports(self) -> None:
        assert objector.scan_object is scan_object
        assert objector.__version__ == objector.SessionResult().tool_version


# ── monitor ─────────────────────────────────────────────────────────


class TestMonitor:

    def test_hook_can_cancel(self) -> None:
        root: dict[str, Any] = {"a": AWS_KEY}

        class Source(StaticRoot):
            scheduler = None

            def evaluate(self) -> Any:
                self.scheduler.cancel()
                return super().evaluate()

        source = Source(root)
        config = MonitorConfig(scan=ScanOptions(ignored_names=()), period=0.01, timeout=30)
        result = monitor(
            source,
            config=config,
            scheduler_hook=lambda s: setattr(source, "scheduler", s),
            target="in-process",
        )
        assert result.state is SessionState.CANCELLED
        assert result.target == "in-process"
        assert [f.path for f in result.findings] == ["a"]


# ── monitor_url ─────────────────────────────────────────────────────


class TestMonitorUrl:

    def test_drives_page_as_root_source(self) -> None:
        driver = MagicMock()
        driver.evaluate.return_value = {"app": {"key": AWS_KEY}}
        driver.__enter__.return_value = driver
        config = MonitorConfig(period=0.01, timeout=0)

        with patch("objector.driver.page.PageDriver", return_value=driver) as factory:
            result = monitor_url("https://example.com", config=config)

        factory.assert_called_once()
        assert factory.call_args.args == ("https://example.com",)
        assert factory.call_args.kwargs["scan_options"] is config.scan
        driver.__exit__.assert_called_once()
        assert result.target == "https://example.com"
        assert [f.path for f in result.findings] == ["app.key"]

    def test_bad_config_never_launches_browser(self) -> None:
        config = MonitorConfig(patterns=(PatternSpec("Broken", "(["),))
        with patch("objector.driver.page.PageDriver") as factory:
            with pytest.raises(ConfigError):
                monitor_url("https://example.com", config=config)
        factory.assert_not_called()

"""Reporters — where admitted findings and the final result are sent."""

from __future__ import annotations

from typing import Protocol

from objector.model.finding import Finding
from objector.model.session_result import SessionResult


class Reporter(Protocol):
    """Receives each new finding once, then the session result once."""

    def report(self, finding: Finding) -> None:
        ...

    def summarize(self, result: SessionResult) -> None:
        ...


class CollectingReporter:
    """Keeps everything in memory; useful for programmatic callers."""

    def __init__(self) -> None:
        self.findings: list[Finding] = []
        self.results: list[SessionResult] = []

    def report(self, finding: Finding) -> None:
        self.findings.append(finding)

    def summarize(self, result: SessionResult) -> None:
        self.results.append(result)


def __getattr__(name: str):
    if name == "ConsoleReporter":
        from .console import ConsoleReporter
        return ConsoleReporter
    if name == "JsonReporter":
        from .json_reporter import JsonReporter
        return JsonReporter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["Reporter", "CollectingReporter", "ConsoleReporter", "JsonReporter"]

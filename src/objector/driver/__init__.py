"""Runtime drivers that produce live object graphs for the scanner.

``PageDriver`` needs a Chromium build (``playwright install chromium``); it
is imported lazily so the snapshot codec works without touching Playwright.
"""

from __future__ import annotations

from objector.driver.headers import parse_headers
from objector.driver.snapshot import SNAPSHOT_SCRIPT, decode_snapshot

__all__ = ["SNAPSHOT_SCRIPT", "decode_snapshot", "parse_headers", "PageDriver"]


def __getattr__(name: str):
    if name == "PageDriver":
        from .page import PageDriver
        return PageDriver
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

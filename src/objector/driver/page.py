"""Headless-browser runtime driver (Playwright, sync API).

Launches Chromium, injects extra request headers, opens the target page and
evaluates the snapshot script on demand. The driver must be used from the
thread that opened it; the scheduler runs every pass on that thread.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from playwright.sync_api import Browser, Page, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from objector.core.config import DEFAULT_MAX_NODES, DEFAULT_NAVIGATION_TIMEOUT, ScanOptions
from objector.driver.snapshot import SNAPSHOT_SCRIPT, decode_snapshot, snapshot_arguments
from objector.errors import DriverError

logger = logging.getLogger(__name__)

_CHROMIUM_ARGS = [
    "--disable-gpu",
    "--no-sandbox",
    "--disable-dev-shm-usage",
]


class PageDriver:
    """Root source backed by a live browser page.

    Usage::

        with PageDriver(url, scan_options=opts) as driver:
            root = driver.evaluate()
    """

    def __init__(
        self,
        url: str,
        *,
        scan_options: Optional[ScanOptions] = None,
        headers: Optional[dict[str, str]] = None,
        headless: bool = True,
        navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT,
        max_nodes: int = DEFAULT_MAX_NODES,
    ):
        self.url = url
        self.scan_options = scan_options or ScanOptions()
        self.headers = dict(headers or {})
        self.headless = headless
        self.navigation_timeout = navigation_timeout
        self.max_nodes = max_nodes

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None

    def __enter__(self) -> "PageDriver":
        self.open()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def open(self) -> None:
        """Launch the browser and load the page. Raises ``DriverError``."""
        timeout_ms = self.navigation_timeout * 1000
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self.headless,
                args=_CHROMIUM_ARGS,
            )
            context = self._browser.new_context(extra_http_headers=self.headers or None)
            self._page = context.new_page()
            logger.info("Navigating to %s", self.url)
            self._page.goto(self.url, wait_until="domcontentloaded", timeout=timeout_ms)
            self._page.wait_for_selector("body", state="attached", timeout=timeout_ms)
        except PlaywrightError as exc:
            self.close()
            raise DriverError(f"cannot open {self.url}: {exc}") from exc

    def evaluate(self) -> dict[str, Any]:
        """Snapshot the page's global scope and decode it.

        Playwright errors and ``SnapshotError`` propagate; the scheduler
        treats either as a failed pass.
        """
        if self._page is None:
            raise DriverError("driver is not open")
        payload = self._page.evaluate(
            SNAPSHOT_SCRIPT,
            snapshot_arguments(
                self.scan_options.max_depth,
                self.scan_options.ignored_names,
                self.max_nodes,
            ),
        )
        if isinstance(payload, dict) and payload.get("truncated"):
            logger.debug("Snapshot truncated at %d nodes", self.max_nodes)
        return decode_snapshot(payload)

    def close(self) -> None:
        if self._browser is not None:
            try:
                self._browser.close()
            except PlaywrightError as exc:
                logger.debug("Browser close failed: %s", exc)
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None
        self._page = None

    def __repr__(self) -> str:
        return f"PageDriver({self.url!r})"

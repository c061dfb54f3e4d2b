"""
objector.api
============

Programmatic entrypoints for using objector as a library.

Goals:
  - No argparse / CLI dependencies
  - One call per use case: one-shot scan, periodic monitor, browser monitor
  - Results are ``SessionResult`` objects whose ``to_dict()`` matches
    ``session_result.schema.json``

Non-goals:
  - Owning presentation — pass a reporter to receive findings as they land

Usage::

    from objector.api import scan_object, monitor, monitor_url

    result = scan_object({"aws": {"key": "AKIA..."}})
    result = monitor(StaticRoot(app_state), config=MonitorConfig(timeout=5))
    result = monitor_url("https://example.com")
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from objector.core.config import MonitorConfig
from objector.core.scheduler import RootSource, ScanScheduler, StaticRoot
from objector.core.session import MonitorSession
from objector.model.session_result import SessionResult
from objector.reports import Reporter

logger = logging.getLogger(__name__)

# Label used for the page's global scope in reported paths.
PAGE_ROOT_LABEL = ""


def _scheduler(
    config: MonitorConfig,
    *,
    root_label: str,
    reporter: Optional[Reporter],
    on_degraded: Optional[Callable[[int], None]],
    target: str,
) -> ScanScheduler:
    # Builds the registry first so a bad rule fails before any pass.
    session = MonitorSession.from_config(config, root_label=root_label, reporter=reporter)
    return ScanScheduler(
        session,
        period=config.period,
        deadline=config.timeout,
        failure_threshold=config.failure_threshold,
        on_degraded=on_degraded,
        target=target,
    )


def scan_object(
    root: Any,
    *,
    root_label: str = "",
    config: Optional[MonitorConfig] = None,
    reporter: Optional[Reporter] = None,
) -> SessionResult:
    """Scan an in-process object graph once and return the result."""
    config = config or MonitorConfig()
    scheduler = _scheduler(
        config,
        root_label=root_label,
        reporter=reporter,
        on_degraded=None,
        target=root_label or type(root).__name__,
    )
    return scheduler.run_once(StaticRoot(root, root_label))


def monitor(
    source: RootSource,
    *,
    root_label: str = "",
    config: Optional[MonitorConfig] = None,
    reporter: Optional[Reporter] = None,
    on_degraded: Optional[Callable[[int], None]] = None,
    scheduler_hook: Optional[Callable[[ScanScheduler], None]] = None,
    target: str = "",
) -> SessionResult:
    """Re-scan *source* every ``config.period`` until ``config.timeout``.

    *scheduler_hook* receives the scheduler before it starts, so callers
    can keep a handle for ``cancel()``.
    """
    config = config or MonitorConfig()
    scheduler = _scheduler(
        config,
        root_label=root_label,
        reporter=reporter,
        on_degraded=on_degraded,
        target=target or repr(source),
    )
    if scheduler_hook is not None:
        scheduler_hook(scheduler)
    return scheduler.start(source)


def monitor_url(
    url: str,
    *,
    config: Optional[MonitorConfig] = None,
    reporter: Optional[Reporter] = None,
    on_degraded: Optional[Callable[[int], None]] = None,
    scheduler_hook: Optional[Callable[[ScanScheduler], None]] = None,
) -> SessionResult:
    """Open *url* in a headless browser and monitor its global scope.

    Raises ``DriverError`` if the page cannot be opened and ``ConfigError``
    if the configuration is invalid; both happen before any pass.
    """
    from objector.driver.page import PageDriver

    config = config or MonitorConfig()
    # Validate rules before paying for a browser launch.
    config.build_registry()
    with PageDriver(
        url,
        scan_options=config.scan,
        headers=config.headers,
        headless=config.headless,
        navigation_timeout=config.navigation_timeout,
        max_nodes=config.max_nodes,
    ) as driver:
        return monitor(
            driver,
            root_label=PAGE_ROOT_LABEL,
            config=config,
            reporter=reporter,
            on_degraded=on_degraded,
            scheduler_hook=scheduler_hook,
            target=url,
        )

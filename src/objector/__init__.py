"""objector — finds leaked credentials in live JavaScript object graphs."""

__all__ = [
    "__version__",
    "scan_object",
    "monitor",
    "monitor_url",
    "Finding",
    "SessionResult",
    "SessionStats",
    "ScanOptions",
    "MonitorConfig",
    "PatternRegistry",
    "default_registry",
]
__version__ = "0.3.0"

# Programmatic entrypoints — see objector.api.
from objector.api import monitor, monitor_url, scan_object  # noqa: E402, F401
from objector.core.config import MonitorConfig, ScanOptions  # noqa: E402, F401
from objector.model.finding import Finding  # noqa: E402, F401
from objector.model.session_result import SessionResult, SessionStats  # noqa: E402, F401
from objector.patterns import PatternRegistry, default_registry  # noqa: E402, F401

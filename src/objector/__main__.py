"""CLI entry-point for objector.

Usage:
    objector -u <URL>
    objector -u <URL> --timeout 30s
    objector -u <URL> --headers "Authorization: Bearer token"
    objector -u <URL> --string "my-secret-key"
    objector -u <URL> --config objector.yaml --json
    objector --snapshot captured_scope.json
    python -m objector ...
"""

from __future__ import annotations

import argparse
import contextlib
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional

import yaml

from objector import __version__
from objector.api import monitor_url, scan_object
from objector.core.config import MonitorConfig
from objector.core.scheduler import ScanScheduler
from objector.driver.headers import parse_headers
from objector.errors import ConfigError, DriverError
from objector.model.session_result import SessionResult
from objector.patterns import DEFAULT_PATTERNS
from objector.utils.durations import parse_duration
from objector.utils.exit_codes import ExitCode

logger = logging.getLogger("objector")

_EPILOG = "detected patterns:\n" + "\n".join(
    f"  • {name:<15} {description}" for name, _, description in DEFAULT_PATTERNS
)


def _duration(raw: str) -> float:
    try:
        return parse_duration(raw)
    except ConfigError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="objector",
        description=(
            "Monitor a page's JavaScript objects and report exposed credentials, "
            "API keys and other sensitive values."
        ),
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    target = parser.add_argument_group("target")
    target.add_argument("-u", "--url", help="Target URL to monitor")
    target.add_argument(
        "--snapshot",
        type=Path,
        metavar="FILE",
        help="Scan a captured object graph (JSON or YAML) once instead of a live page",
    )

    scan = parser.add_argument_group("scanning")
    scan.add_argument("--timeout", type=_duration, help="Monitoring deadline (default: 20s)")
    scan.add_argument("--period", type=_duration, help="Time between passes (default: 1s)")
    scan.add_argument("--string", dest="custom_string", metavar="TEXT",
                      help="Search for this literal only (disables the default patterns)")
    scan.add_argument("--max-depth", type=int, help="Maximum traversal depth (default: 5)")
    scan.add_argument("--ignore", action="append", metavar="NAME", default=[],
                      help="Extra member name whose subtree is skipped (repeatable)")
    scan.add_argument("--config", type=Path, metavar="FILE",
                      help="YAML config file (default: $OBJECTOR_CONFIG)")

    browser = parser.add_argument_group("browser")
    browser.add_argument("--headers", metavar="HEADERS",
                         help="Extra request headers, 'Name: value,Other: value'")
    browser.add_argument("--no-headless", action="store_true", help="Show the browser window")

    output = parser.add_argument_group("output")
    output.add_argument("--json", action="store_true", help="Print the session result as JSON")
    output.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    output.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _load_config(args: argparse.Namespace) -> MonitorConfig:
    config = MonitorConfig.load(args.config)
    config = config.with_overrides(
        max_depth=args.max_depth,
        extra_ignored_names=args.ignore,
        custom_literal=args.custom_string,
        period=args.period,
        timeout=args.timeout,
        headers=parse_headers(args.headers),
        headless=False if args.no_headless else None,
    )
    # Compile the rules now so a bad pattern fails before any pass.
    config.build_registry()
    return config


def _load_snapshot(path: Path) -> Any:
    """Load a captured graph; YAML for .yaml/.yml, JSON otherwise."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def _make_reporter(args: argparse.Namespace):
    if args.json:
        from objector.reports.json_reporter import JsonReporter

        return JsonReporter()
    from objector.reports.console import ConsoleReporter

    return ConsoleReporter()


@contextlib.contextmanager
def _cancel_on_sigint(holder: dict[str, Optional[ScanScheduler]]):
    """Route Ctrl-C to ``scheduler.cancel()`` so the final report still prints."""

    def _handler(signum: int, frame: Any) -> None:
        scheduler = holder.get("scheduler")
        if scheduler is None:
            raise KeyboardInterrupt
        logger.info("Interrupted, finishing current pass")
        scheduler.cancel()

    try:
        previous = signal.signal(signal.SIGINT, _handler)
    except ValueError:
        # Not the main thread; leave signal handling alone.
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _run(args: argparse.Namespace, config: MonitorConfig) -> SessionResult:
    reporter = _make_reporter(args)
    with contextlib.ExitStack() as stack:
        if hasattr(reporter, "__enter__"):
            stack.enter_context(reporter)

        if args.snapshot is not None:
            root = _load_snapshot(args.snapshot)
            return scan_object(root, config=config, reporter=reporter)

        holder: dict[str, Optional[ScanScheduler]] = {"scheduler": None}
        stack.enter_context(_cancel_on_sigint(holder))
        return monitor_url(
            args.url,
            config=config,
            reporter=reporter,
            scheduler_hook=lambda s: holder.__setitem__("scheduler", s),
        )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if not args.url and args.snapshot is None:
        parser.print_usage(sys.stderr)
        print("error: a target is required: use -u/--url or --snapshot.", file=sys.stderr)
        return ExitCode.ERROR

    try:
        config = _load_config(args)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return ExitCode.ERROR

    try:
        result = _run(args, config)
    except DriverError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return ExitCode.ERROR
    except KeyboardInterrupt:
        # Ctrl-C before the first pass started, e.g. during browser launch.
        print("error: interrupted before monitoring started", file=sys.stderr)
        return ExitCode.ERROR
    except (OSError, ValueError, yaml.YAMLError) as exc:
        # Unreadable or unparseable --snapshot file.
        print(f"error: cannot load snapshot: {exc}", file=sys.stderr)
        return ExitCode.ERROR

    return ExitCode.FINDINGS if result.findings else ExitCode.SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())

"""Console reporter — live findings table and final statistics (rich)."""

from __future__ import annotations

from typing import Any, Optional

from rich import box
from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from objector.model.finding import Finding
from objector.model.session_result import SessionResult

_COLUMNS = (
    # (header, width, style)
    ("Pattern", 15, "bold red"),
    ("Path", 30, ""),
    ("Value", 40, ""),
    ("Description", 30, ""),
)


def _new_table(*, show_header: bool = True) -> Table:
    table = Table(box=box.SQUARE, show_header=show_header, show_lines=True, header_style="bold")
    for header, width, style in _COLUMNS:
        table.add_column(header, width=width, style=style or None, overflow="fold")
    return table


class ConsoleReporter:
    """Streams findings into a table as they are admitted.

    On a terminal the table is redrawn live under a spinner; otherwise each
    finding is printed as its own row so output can be piped. Use as a
    context manager so the live display is always torn down.
    """

    def __init__(self, console: Optional[Console] = None, *, live: Optional[bool] = None):
        self.console = console or Console()
        self.live_enabled = self.console.is_terminal if live is None else live
        self.table = _new_table()
        self._live: Optional[Live] = None
        self._spinner = Spinner("dots", text=" Scanning for secrets...")
        self._rows_printed = 0

    def __enter__(self) -> "ConsoleReporter":
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()

    def _renderable(self, *, scanning: bool = True) -> RenderableType:
        if scanning:
            return Group(self.table, self._spinner)
        return self.table

    def start(self) -> None:
        if self.live_enabled and self._live is None:
            self._live = Live(
                self._renderable(),
                console=self.console,
                refresh_per_second=10,
            )
            self._live.start()

    def stop(self) -> None:
        if self._live is not None:
            self._live.update(self._renderable(scanning=False), refresh=True)
            self._live.stop()
            self._live = None

    def report(self, finding: Finding) -> None:
        row = (finding.pattern_name, finding.path, finding.value, finding.description)
        self.table.add_row(*row)
        if self._live is not None:
            self._live.update(self._renderable())
            return
        single = _new_table(show_header=self._rows_printed == 0)
        single.add_row(*row)
        self.console.print(single)
        self._rows_printed += 1

    def summarize(self, result: SessionResult) -> None:
        self.stop()
        if not self.live_enabled and not result.findings:
            self.console.print(self.table)

        lines = Text()
        lines.append(f"Total Objects Scanned: {result.stats.objects_scanned}\n")
        lines.append(f"Total Matches Found:   {result.stats.matches_found}")
        if result.failed_passes:
            lines.append(f"\nFailed Passes:         {result.failed_passes}/{result.passes_run}")
        if result.degraded:
            lines.append("\nSession degraded: the page stopped answering", style="yellow")
        self.console.print(
            Panel(
                lines,
                title="Monitoring Statistics",
                title_align="left",
                box=box.SQUARE,
                width=52,
            )
        )

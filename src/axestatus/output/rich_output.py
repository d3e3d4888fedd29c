from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from axestatus.output.fields import ERROR, LOADING, MISSING, format_raw_value
from axestatus.output.view import DetailView, MatrixView, MessageView

if TYPE_CHECKING:
    from rich.console import Console

    from axestatus.output.view import View


def _styled(cell: str) -> str:
    if cell == LOADING:
        return f"[yellow]{cell}[/yellow]"
    if cell == ERROR:
        return f"[red]{cell}[/red]"
    if cell == MISSING:
        return f"[dim]{cell}[/dim]"
    return escape(cell)


class RichOutput:
    """Rich-based terminal output helpers for *axestatus*."""

    def __init__(self, console: Console) -> None:
        self._con = console

    def view(self, view: View) -> None:
        """Print any view model produced by :func:`~axestatus.output.view.build_view`."""
        if isinstance(view, MessageView):
            if view.is_error:
                self.error(view.message)
            else:
                self.info(f"[yellow]{escape(view.message)}[/yellow]")
        elif isinstance(view, MatrixView):
            self.matrix(view)
        elif isinstance(view, DetailView):
            self.detail(view)

    # ------------------------------------------------------------------
    # Matrix (one column per device)
    # ------------------------------------------------------------------

    def matrix(self, view: MatrixView) -> None:
        """Print one table per section with a column per device."""
        for section in view.sections:
            table = Table(title=section.title)
            table.add_column("Field", style="bold")
            for header in view.headers:
                table.add_column(_styled(header))

            for label, cells in section.rows:
                table.add_row(label, *(_styled(c) for c in cells))

            self._con.print(table)

    # ------------------------------------------------------------------
    # Detail (focused device)
    # ------------------------------------------------------------------

    def detail(self, view: DetailView) -> None:
        """Print a panel and one ``Label: value`` line per field of the focused device."""
        heading = f"[bold]{escape(view.title)}[/bold]  [dim]{escape(view.address)}[/dim]"
        self._con.print(Panel(heading, expand=False))
        if view.error:
            self.error(view.error)

        for section in view.sections:
            self.info(f"\n[bold underline]{section.title}[/bold underline]")
            for label, (cell,) in section.rows:
                self._con.print(f"  [bold]{label}:[/bold] {_styled(cell)}", highlight=False)

        if view.choices:
            others = escape(", ".join(c for c in view.choices if c != view.address))
            self.info(f"[dim]Other devices: {others} (use --device to switch)[/dim]")

    # ------------------------------------------------------------------
    # Raw record dump
    # ------------------------------------------------------------------

    def raw_record(self, address: str, record: dict[str, Any]) -> None:
        """Print every field the device reported, sorted by name."""
        table = Table(title=f"System Info: {escape(address)}")
        table.add_column("Field", style="cyan")
        table.add_column("Value")

        for key in sorted(record):
            table.add_row(escape(key), escape(format_raw_value(record[key])))

        self._con.print(table)

    # ------------------------------------------------------------------
    # Message helpers
    # ------------------------------------------------------------------

    def error(self, message: str) -> None:
        """Print a bold red error line; *message* is shown verbatim."""
        self._con.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def info(self, message: str) -> None:
        """Print an informational message (plain)."""
        self._con.print(message)

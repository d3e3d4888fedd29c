"""Full-screen Textual dashboard for one or more Bitaxe devices.

One :class:`DataTable` per field section.  With several devices the tables
show a column per device (matrix view); in focus view they show the selected
device only and ``n`` / ``p`` switch between devices without re-fetching.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar

from rich.markup import escape
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.widgets import DataTable, Footer, Header, Static

from axestatus.api.client import DeviceClient
from axestatus.fleet.state import FleetState
from axestatus.output.fields import FIELD_SECTIONS
from axestatus.output.view import (
    DetailView,
    FocusSelection,
    MatrixView,
    MessageView,
    build_view,
    resolve_mode,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from axestatus.output.view import View

logger = logging.getLogger(__name__)


class DashboardTUI(App[None]):
    """Live dashboard over a :class:`~axestatus.fleet.state.FleetState`.

    The fleet notifies the app after every slot change and the app redraws
    from the current snapshot, so devices fill in one by one as they answer.
    A timer calls :meth:`FleetState.refresh` every *refresh_interval*
    seconds (``0`` disables polling; ``r`` refreshes on demand).
    """

    TITLE = "axestatus"

    CSS = """
    #message {
        padding: 1 2;
        display: none;
    }
    #sections {
        height: 1fr;
    }
    .section-panel {
        height: auto;
        border: solid $primary;
        padding: 0;
    }
    .section-panel DataTable {
        height: auto;
    }
    #general-panel { border: solid #f1c40f; }
    #system-panel { border: solid #3498db; }
    #network-panel { border: solid #2ecc71; }
    #focus-bar {
        height: auto;
        background: $panel;
        padding: 0 1;
        display: none;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [  # type: ignore[assignment]
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("n", "next_device", "Next device"),
        Binding("p", "prev_device", "Prev device"),
        Binding("v", "toggle_view", "Matrix/Focus"),
    ]

    def __init__(
        self,
        addresses: Sequence[str],
        *,
        mode: str = "auto",
        refresh_interval: float = 30.0,
        fetcher: Callable[[str], Awaitable[dict[str, Any]]] | None = None,
    ) -> None:
        super().__init__()
        self._addresses = list(addresses)
        self._view_mode = mode
        self._refresh_interval = refresh_interval
        self._fetcher = fetcher
        self._client: DeviceClient | None = None
        self._fleet: FleetState | None = None
        self._focus_selection = FocusSelection(self._addresses)
        self._last_update: datetime | None = None
        self._saved_root_handlers: list[logging.Handler] = []
        self._live = False

    @property
    def fleet(self) -> FleetState:
        assert self._fleet is not None, "fleet is created on mount"
        return self._fleet

    @property
    def focus_selection(self) -> FocusSelection:
        return self._focus_selection

    @property
    def view_mode(self) -> str:
        return self._view_mode

    # -- Compose layout -------------------------------------------------------

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Static(id="message")
        with VerticalScroll(id="sections"):
            for section_id in FIELD_SECTIONS:
                with Vertical(id=f"{section_id}-panel", classes="section-panel"):
                    yield DataTable(
                        id=f"{section_id}-table", cursor_type="none", zebra_stripes=True
                    )
        yield Static(id="focus-bar")
        yield Footer()

    def on_mount(self) -> None:
        for section_id, (title, _fields) in FIELD_SECTIONS.items():
            self.query_one(f"#{section_id}-panel", Vertical).border_title = title

        self._detach_console_logging()

        fetcher = self._fetcher
        if fetcher is None:
            self._client = DeviceClient()
            fetcher = self._client.get_system_info
        self._fleet = FleetState(fetcher)
        self._fleet.add_listener(self._on_fleet_change)
        self._live = True
        self.set_addresses(self._addresses)

        if self._refresh_interval > 0:
            self.set_interval(self._refresh_interval, self.action_refresh)

    async def on_unmount(self) -> None:
        self._live = False
        if self._client is not None:
            await self._client.close()
            self._client = None
        self._restore_console_logging()

    # -- Console logging ------------------------------------------------------

    def _detach_console_logging(self) -> None:
        """Remove root stream handlers so log lines don't corrupt the screen."""
        self._saved_root_handlers = logging.root.handlers[:]
        logging.root.handlers = [
            h
            for h in logging.root.handlers
            if not isinstance(h, logging.StreamHandler) or isinstance(h, logging.FileHandler)
        ]

    def _restore_console_logging(self) -> None:
        if self._saved_root_handlers:
            logging.root.handlers = self._saved_root_handlers
            self._saved_root_handlers = []

    # -- State ------------------------------------------------------------------

    def set_addresses(self, addresses: Sequence[str]) -> None:
        """Switch to a new address list: reset every slot and fetch again."""
        self._addresses = list(addresses)
        self._focus_selection.sync(self._addresses)
        logger.info("Watching %d device(s)", len(self._addresses))
        self.fleet.reconcile(self._addresses)

    def _on_fleet_change(self) -> None:
        if not self._live:
            return
        self._last_update = datetime.now().astimezone()
        self.redraw()

    # -- Actions ----------------------------------------------------------------

    def action_refresh(self) -> None:
        self.fleet.refresh()

    def action_next_device(self) -> None:
        self._switch_focus(1)

    def action_prev_device(self) -> None:
        self._switch_focus(-1)

    def action_toggle_view(self) -> None:
        snapshot = self.fleet.snapshot()
        if not snapshot:
            return
        current = resolve_mode(self._view_mode, snapshot)
        self._view_mode = "focus" if current == "matrix" else "matrix"
        self.redraw()

    def _switch_focus(self, step: int) -> None:
        """Move the focus and redraw from held state; no fetch is issued."""
        if len(self._focus_selection.choices) < 2:
            return
        self._view_mode = "focus"
        self._focus_selection.cycle(step)
        self.redraw()

    # -- Rendering --------------------------------------------------------------

    def redraw(self) -> None:
        """Redraw every widget from the fleet's current snapshot."""
        snapshot = self.fleet.snapshot()
        view = build_view(snapshot, mode=self._view_mode, focus=self._focus_selection.current)
        ready = sum(slot.ready for _address, slot in snapshot)
        self._update_header(total=len(snapshot), ready=ready)
        self._update_message(view)
        self._update_tables(view)
        self._update_focus_bar(view)

    def _update_header(self, *, total: int, ready: int) -> None:
        self.title = f"axestatus  {ready}/{total} online"
        if self._last_update is not None:
            self.sub_title = f"Updated {self._last_update:%H:%M:%S}"

    def _update_message(self, view: View) -> None:
        message = self.query_one("#message", Static)
        sections = self.query_one("#sections", VerticalScroll)
        if isinstance(view, MessageView):
            style = "bold red" if view.is_error else "yellow"
            message.update(f"[{style}]{escape(view.message)}[/{style}]")
            message.display = True
            sections.display = False
            return
        message.display = False
        sections.display = True

    def _update_tables(self, view: View) -> None:
        if isinstance(view, MessageView):
            return

        headers = view.headers if isinstance(view, MatrixView) else ("Value",)
        for section in view.sections:
            table = self.query_one(f"#{section.key}-table", DataTable)
            table.clear(columns=True)
            table.add_column("Field", width=14)
            for header in headers:
                table.add_column(Text(header))
            for label, cells in section.rows:
                table.add_row(label, *(Text(cell) for cell in cells))

    def _update_focus_bar(self, view: View) -> None:
        bar = self.query_one("#focus-bar", Static)
        if not isinstance(view, DetailView):
            bar.update("")
            bar.display = False
            return

        parts = [escape(f"{view.title} ({view.address})")]
        if view.choices:
            position = view.choices.index(view.address) + 1
            parts.append(f"device {position}/{len(view.choices)}  n/p to switch")
        if view.error:
            parts.append(f"[red]{escape(view.error)}[/red]")
        bar.update("  |  ".join(parts))
        bar.display = True

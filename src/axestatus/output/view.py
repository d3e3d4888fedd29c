"""Host-independent view models built from a fleet snapshot.

:func:`build_view` decides *what* to show (a message, a device matrix, or a
single-device detail list); Rich, JSON, and the Textual dashboard decide
*how* to draw it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from axestatus.fleet.state import failure_message
from axestatus.output.fields import FIELD_SECTIONS, format_field, header_label

if TYPE_CHECKING:
    from collections.abc import Sequence

    from axestatus.fleet.state import DeviceSlot, FleetSnapshot

VIEW_MODES = ("auto", "matrix", "focus")

NO_ADDRESSES_MESSAGE = (
    "No Bitaxe addresses configured. Set BITAXE_ADDRESSES (or pass --addresses)"
    " to a comma-separated list of at least one device IP or hostname."
)


class FocusSelection:
    """The device shown in focus mode.

    Always one of the configured addresses (or ``None`` when there are none).
    Only changed by :meth:`set_focus` / :meth:`cycle`, and re-validated by
    :meth:`sync` when the address list changes.
    """

    def __init__(self, addresses: Sequence[str] = ()) -> None:
        self._choices: tuple[str, ...] = ()
        self._current: str | None = None
        self.sync(addresses)

    @property
    def current(self) -> str | None:
        return self._current

    @property
    def choices(self) -> tuple[str, ...]:
        """Distinct addresses in configuration order."""
        return self._choices

    def sync(self, addresses: Sequence[str]) -> None:
        """Adopt a new address list, keeping the focus if it is still present."""
        self._choices = tuple(dict.fromkeys(addresses))
        if self._current not in self._choices:
            self._current = self._choices[0] if self._choices else None

    def set_focus(self, address: str) -> None:
        if address not in self._choices:
            raise ValueError(f"{address!r} is not a configured address")
        self._current = address

    def cycle(self, step: int = 1) -> str | None:
        """Move the focus *step* places through :attr:`choices`, wrapping around."""
        if not self._choices:
            return None
        index = self._choices.index(self._current) if self._current in self._choices else 0
        self._current = self._choices[(index + step) % len(self._choices)]
        return self._current


# ---------------------------------------------------------------------------
# View models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Section:
    """One titled group of rows; each row is ``(label, cells)``."""

    key: str
    title: str
    rows: tuple[tuple[str, tuple[str, ...]], ...]


@dataclass(frozen=True)
class MessageView:
    """A single line instead of a table (empty config, total failure)."""

    message: str
    is_error: bool = False


@dataclass(frozen=True)
class MatrixView:
    """One column per device, one row per field."""

    headers: tuple[str, ...]
    sections: tuple[Section, ...]


@dataclass(frozen=True)
class DetailView:
    """Key/value detail for the focused device (one cell per row)."""

    address: str
    title: str
    sections: tuple[Section, ...]
    error: str | None = None
    choices: tuple[str, ...] = ()


View = MessageView | MatrixView | DetailView


def _sections(columns: Sequence[tuple[str, DeviceSlot]]) -> tuple[Section, ...]:
    sections: list[Section] = []
    for key, (title, fields) in FIELD_SECTIONS.items():
        rows = tuple(
            (label, tuple(format_field(slot, field, address) for address, slot in columns))
            for field, label in fields
        )
        sections.append(Section(key=key, title=title, rows=rows))
    return tuple(sections)


def resolve_mode(mode: str, snapshot: FleetSnapshot) -> str:
    """Turn ``"auto"`` into ``"matrix"`` (several devices) or ``"focus"`` (one)."""
    if mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode: {mode!r}")
    if mode == "auto":
        return "matrix" if len(snapshot) > 1 else "focus"
    return mode


def build_view(
    snapshot: FleetSnapshot,
    *,
    mode: str = "auto",
    focus: str | None = None,
) -> View:
    """Build the view model for *snapshot*.

    * No addresses → an instructive :class:`MessageView`.
    * Every device failed → a :class:`MessageView` with the first device's
      failure, instead of a table full of error cells.
    * Otherwise a :class:`MatrixView` or a :class:`DetailView` for *focus*
      (defaults to the first address).
    """
    if not snapshot:
        return MessageView(NO_ADDRESSES_MESSAGE)

    if all(slot.failed for _address, slot in snapshot):
        address, slot = snapshot[0]
        assert slot.failure is not None
        return MessageView(failure_message(address, slot.failure), is_error=True)

    if resolve_mode(mode, snapshot) == "matrix":
        return MatrixView(
            headers=tuple(header_label(slot, address) for address, slot in snapshot),
            sections=_sections(snapshot),
        )

    target = next((pair for pair in snapshot if pair[0] == focus), snapshot[0])
    address, slot = target
    error: str | None = None
    if slot.failed and slot.failure is not None:
        error = failure_message(address, slot.failure)
    choices = tuple(dict.fromkeys(a for a, _slot in snapshot))
    return DetailView(
        address=address,
        title=header_label(slot, address),
        sections=_sections([target]),
        error=error,
        choices=choices if len(choices) > 1 else (),
    )

"""Per-device fetch state for the configured fleet.

:class:`FleetState` owns one :class:`DeviceSlot` per configured address and
fans out one fetch task per slot.  Slots are immutable; every change swaps a
whole slot in, so a reader calling :meth:`FleetState.snapshot` never sees a
half-updated slot.

Every fetch is tagged with the generation of the address list it was issued
for.  Results that come back after a newer :meth:`~FleetState.reconcile` are
dropped instead of overwriting the new slots.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from functools import partial
from typing import TYPE_CHECKING, Any

from axestatus.api.errors import (
    DeviceError,
    DeviceUnreachableError,
    HttpStatusError,
    InvalidAddressError,
    ResponseParseError,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

logger = logging.getLogger(__name__)

_UNREACHABLE_MARKERS = ("fetch failed", "network error")


@dataclass(frozen=True, slots=True)
class DeviceFailure:
    """Why the last fetch for a device failed."""

    kind: str  # "unreachable" | "http" | "parse" | "address" | "unknown"
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> DeviceFailure:
        if isinstance(exc, DeviceUnreachableError):
            kind = "unreachable"
        elif isinstance(exc, HttpStatusError):
            kind = "http"
        elif isinstance(exc, ResponseParseError):
            kind = "parse"
        elif isinstance(exc, InvalidAddressError):
            kind = "address"
        else:
            kind = "unknown"
        return cls(kind=kind, message=str(exc) or "Unknown error")


@dataclass(frozen=True, slots=True)
class DeviceSlot:
    """Fetch state of one configured address."""

    in_flight: bool = False
    record: dict[str, Any] | None = None
    failure: DeviceFailure | None = None

    @property
    def failed(self) -> bool:
        """``True`` when the slot settled on a failure."""
        return not self.in_flight and self.failure is not None

    @property
    def ready(self) -> bool:
        """``True`` when the slot settled on a telemetry record."""
        return not self.in_flight and self.failure is None and self.record is not None


FleetSnapshot = tuple[tuple[str, DeviceSlot], ...]


def failure_message(address: str, failure: DeviceFailure) -> str:
    """Return the user-facing text for *failure*.

    Connection-level problems are rewritten into a hint naming the device.
    """
    lowered = failure.message.lower()
    if failure.kind == "unreachable" or any(m in lowered for m in _UNREACHABLE_MARKERS):
        return f"Could not connect to Bitaxe at {address}. Please check it's online."
    return failure.message


class FleetState:
    """Aggregate fetch state for every configured device.

    *fetcher* is an async callable taking an address and returning the
    decoded telemetry record, normally
    :meth:`~axestatus.api.client.DeviceClient.get_system_info`.  All fetch
    tasks run on the current event loop; callbacks registered with
    :meth:`add_listener` fire after every state change.
    """

    def __init__(self, fetcher: Callable[[str], Awaitable[dict[str, Any]]]) -> None:
        self._fetcher = fetcher
        self._addresses: tuple[str, ...] = ()
        self._slots: list[DeviceSlot] = []
        self._generation: int = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._pending: dict[int, asyncio.Task[None]] = {}
        self._listeners: list[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def addresses(self) -> tuple[str, ...]:
        return self._addresses

    def snapshot(self) -> FleetSnapshot:
        """Return the ordered ``(address, slot)`` pairs as of now."""
        return tuple(zip(self._addresses, self._slots, strict=True))

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register *callback* to be called after every state change."""
        self._listeners.append(callback)

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def reconcile(self, addresses: Sequence[str]) -> None:
        """Replace the fleet with *addresses* and fetch every one of them.

        All previous state is discarded; each slot starts as loading with no
        data.  Must be called from a running event loop.
        """
        self._generation += 1
        self._addresses = tuple(addresses)
        self._slots = [DeviceSlot(in_flight=True) for _ in self._addresses]
        self._pending = {}
        logger.debug(
            "Reconciled fleet to %d address(es), generation %d",
            len(self._addresses),
            self._generation,
        )
        self._launch(range(len(self._addresses)))
        self._notify()

    def refresh(self) -> None:
        """Re-fetch every idle address, keeping the data on screen.

        Slots flip to in-flight but keep their previous record or failure
        until the new result lands.  A slot whose fetch is still running is
        left alone so a slow device is not re-requested on every tick.
        """
        indices = [i for i, slot in enumerate(self._slots) if not slot.in_flight]
        if not indices:
            return
        for index in indices:
            self._slots[index] = replace(self._slots[index], in_flight=True)
        logger.debug("Refreshing %d of %d slot(s)", len(indices), len(self._slots))
        self._launch(indices)
        self._notify()

    async def wait(self) -> None:
        """Wait until every fetch of the current generation has settled."""
        if self._pending:
            await asyncio.gather(*self._pending.values(), return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _launch(self, indices: Sequence[int]) -> None:
        generation = self._generation
        for index in indices:
            address = self._addresses[index]
            task = asyncio.create_task(
                self._fetch(generation, index, address),
                name=f"fetch-{address}-g{generation}",
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            self._pending[index] = task
            task.add_done_callback(partial(self._settled, index))

    def _settled(self, index: int, task: asyncio.Task[None]) -> None:
        if self._pending.get(index) is task:
            del self._pending[index]

    async def _fetch(self, generation: int, index: int, address: str) -> None:
        try:
            record = await self._fetcher(address)
        except DeviceError as exc:
            logger.info("Fetch from %s failed: %s", address, exc)
            outcome = DeviceSlot(failure=DeviceFailure.from_exception(exc))
        except Exception as exc:
            logger.warning("Unexpected error fetching %s", address, exc_info=True)
            outcome = DeviceSlot(failure=DeviceFailure.from_exception(exc))
        else:
            outcome = DeviceSlot(record=record)
        self._commit(generation, index, outcome)

    def _commit(self, generation: int, index: int, slot: DeviceSlot) -> None:
        if generation != self._generation:
            logger.debug(
                "Dropping result for slot %d from generation %d (current %d)",
                index,
                generation,
                self._generation,
            )
            return
        self._slots[index] = slot
        self._notify()

    def _notify(self) -> None:
        for callback in self._listeners:
            try:
                callback()
            except Exception:
                logger.warning("Fleet listener %s failed", callback, exc_info=True)

"""Fleet fetch state — per-device slots, generation tracking, snapshots."""

from __future__ import annotations

from axestatus.fleet.state import (
    DeviceFailure,
    DeviceSlot,
    FleetSnapshot,
    FleetState,
    failure_message,
)

__all__ = [
    "DeviceFailure",
    "DeviceSlot",
    "FleetSnapshot",
    "FleetState",
    "failure_message",
]

"""Display schema and cell formatting for Bitaxe telemetry fields."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from axestatus._internal.units import milli_to_base

if TYPE_CHECKING:
    from axestatus.fleet.state import DeviceSlot

LOADING = "Loading"
ERROR = "Error"
MISSING = "-"

# Pseudo-field rendered as the slot's own address.
IP_FIELD = "ip"

# ---------------------------------------------------------------------------
# Section field mapping — declarative schema for tables and the dashboard
# ---------------------------------------------------------------------------

FIELD_SECTIONS: dict[str, tuple[str, list[tuple[str, str]]]] = {
    "general": (
        "General Info",
        [
            (IP_FIELD, "IP"),
            ("hostname", "Hostname"),
            ("hashRate", "Hashrate"),
        ],
    ),
    "system": (
        "System Telemetry",
        [
            ("voltage", "Voltage"),
            ("current", "Current"),
            ("temp", "Temp"),
            ("vrTemp", "VR Temp"),
            ("frequency", "Frequency"),
            ("fanrpm", "Fan RPM"),
        ],
    ),
    "network": (
        "Network Info",
        [
            ("ssid", "SSID"),
            ("wifiStatus", "WiFi Status"),
            ("wifiRSSI", "WiFi RSSI"),
            ("macAddr", "MAC Address"),
        ],
    ),
}

# Device reports these in milli-units (mV, mA).
MILLI_FIELDS = frozenset({"voltage", "current"})

FIELD_LABELS: dict[str, str] = {
    key: label for _title, fields in FIELD_SECTIONS.values() for key, label in fields
}


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def format_field(slot: DeviceSlot, key: str, address: str) -> str:
    """Return the display text for *key* of the device at *address*.

    In-flight and failed slots yield a placeholder for every key.  Zero is a
    real reading and is shown, only absent or empty values become ``"-"``.
    """
    if slot.in_flight:
        return LOADING
    if slot.failure is not None:
        return ERROR
    if key == IP_FIELD:
        return address

    record = slot.record or {}
    value = record.get(key)
    if _is_missing(value):
        return MISSING
    if key in MILLI_FIELDS and isinstance(value, int | float) and not isinstance(value, bool):
        return f"{milli_to_base(value):.2f}"
    return str(value)


def header_label(slot: DeviceSlot, address: str) -> str:
    """Column header for a device: its hostname when known, else the address."""
    if slot.in_flight:
        return LOADING
    if slot.failure is not None:
        return ERROR
    hostname = (slot.record or {}).get("hostname")
    if _is_missing(hostname):
        return address
    return str(hostname)


def format_raw_value(value: Any) -> str:
    """Format any record value for the raw dump (nested values as JSON)."""
    if value is None:
        return MISSING
    if isinstance(value, dict | list):
        return json.dumps(value, separators=(",", ":"))
    return str(value)

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from axestatus.fleet.state import failure_message

if TYPE_CHECKING:
    from axestatus.fleet.state import FleetSnapshot


def serialize_snapshot(snapshot: FleetSnapshot) -> list[dict[str, Any]]:
    """Convert *snapshot* to a JSON-friendly list, one entry per device.

    Each entry carries ``address``, a ``state`` of ``"loading"``, ``"error"``
    or ``"ok"``, and either ``error`` (kind + user-facing message) or the raw
    ``data`` record.
    """
    devices: list[dict[str, Any]] = []
    for address, slot in snapshot:
        entry: dict[str, Any] = {"address": address}
        if slot.in_flight:
            entry["state"] = "loading"
        elif slot.failure is not None:
            entry["state"] = "error"
            entry["error"] = {
                "kind": slot.failure.kind,
                "message": failure_message(address, slot.failure),
            }
        else:
            entry["state"] = "ok"
            entry["data"] = slot.record or {}
        devices.append(entry)
    return devices


def format_json_response(*, data: Any, command: str) -> str:
    """Return a JSON envelope for a successful response.

    The envelope has the shape::

        {
          "ok": true,
          "command": "<command>",
          "data": <payload>,
          "timestamp": "<ISO-8601 UTC>"
        }
    """
    envelope: dict[str, Any] = {
        "ok": True,
        "command": command,
        "data": data,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return json.dumps(envelope, indent=2, default=str)


def format_json_error(
    *,
    code: str,
    message: str,
    command: str,
    **extra: Any,
) -> str:
    """Return a JSON envelope for an error response.

    The envelope has the shape::

        {
          "ok": false,
          "command": "<command>",
          "error": {"code": "...", "message": "...", ...extra},
          "timestamp": "<ISO-8601 UTC>"
        }
    """
    error_body: dict[str, Any] = {"code": code, "message": message, **extra}
    envelope: dict[str, Any] = {
        "ok": False,
        "command": command,
        "error": error_body,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return json.dumps(envelope, indent=2, default=str)

"""Shared helpers for resolving addresses and fetching the fleet once."""

from __future__ import annotations

from typing import TYPE_CHECKING

from axestatus._internal.addresses import resolve_addresses
from axestatus.api.client import DeviceClient
from axestatus.api.errors import ConfigError
from axestatus.fleet.state import FleetState
from axestatus.models.config import AppSettings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from axestatus.cli.main import AppContext
    from axestatus.fleet.state import FleetSnapshot


def get_addresses(app_ctx: AppContext, settings: AppSettings | None = None) -> list[str]:
    """Return the configured address list (``--addresses`` wins over settings)."""
    return resolve_addresses(app_ctx.addresses, settings or AppSettings())


def require_member(address: str | None, addresses: Sequence[str]) -> str | None:
    """Validate a ``--device`` choice against the configured addresses."""
    if address is not None and address not in addresses:
        configured = ", ".join(addresses) or "(none)"
        raise ConfigError(f"Device {address!r} is not configured. Configured: {configured}")
    return address


async def fetch_snapshot(addresses: Sequence[str]) -> FleetSnapshot:
    """Fetch every address once, concurrently, and return the settled snapshot."""
    if not addresses:
        return ()
    async with DeviceClient() as client:
        fleet = FleetState(client.get_system_info)
        fleet.reconcile(addresses)
        await fleet.wait()
        return fleet.snapshot()

"""Device address list parsing and resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from axestatus.models.config import AppSettings


def parse_addresses(raw: str | None) -> list[str]:
    """Split a comma-separated address string into a list of addresses.

    Whitespace around each entry is stripped and empty entries are dropped.
    Order and duplicates are preserved; nothing is validated here, a bad
    entry simply fails to connect later.
    """
    if not raw:
        return []
    return [piece.strip() for piece in raw.split(",") if piece.strip()]


def resolve_addresses(cli_value: str | None, settings: AppSettings) -> list[str]:
    """Resolve the address list from multiple sources in priority order.

    Resolution: ``--addresses`` option > ``BITAXE_ADDRESSES`` env / .env > empty.
    """
    raw = cli_value if cli_value is not None else settings.addresses
    return parse_addresses(raw)

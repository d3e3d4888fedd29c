"""Async HTTP client for the Bitaxe ``/api/system/info`` endpoint."""

from __future__ import annotations

import ipaddress
import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from axestatus.api.errors import (
    DeviceUnreachableError,
    HttpStatusError,
    InvalidAddressError,
    ResponseParseError,
)

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

SYSTEM_INFO_PATH = "/api/system/info"


def system_info_url(address: str) -> str:
    """Return the status endpoint URL for *address* (hostname, IPv4 or IPv6).

    Bare IPv6 literals are bracketed; anything else, including ``host:port``,
    is used as given.
    """
    return f"http://{_url_host(address)}{SYSTEM_INFO_PATH}"


def _url_host(address: str) -> str:
    try:
        parsed = ipaddress.ip_address(address)
    except ValueError:
        return address
    return f"[{address}]" if parsed.version == 6 else address


class DeviceClient:
    """Thin wrapper around :class:`httpx.AsyncClient` for device status reads.

    One client is shared by every device fetch.  Each call issues exactly one
    unauthenticated GET with the transport's default timeout and no retry.
    """

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._client = httpx.AsyncClient(transport=transport)

    async def __aenter__(self) -> DeviceClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def get_system_info(self, address: str) -> dict[str, Any]:
        """Fetch and decode the system info record of the device at *address*.

        Raises :class:`DeviceUnreachableError` on transport failure,
        :class:`InvalidAddressError` when no URL can be built from *address*,
        :class:`HttpStatusError` on a non-2xx answer and
        :class:`ResponseParseError` when the body is not a JSON object.
        """
        url = system_info_url(address)
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url)
        except httpx.TransportError as exc:
            raise DeviceUnreachableError(str(exc) or type(exc).__name__) from exc
        except httpx.InvalidURL as exc:
            raise InvalidAddressError(f"Invalid device address {address!r}: {exc}") from exc

        if not response.is_success:
            raise HttpStatusError(
                f"HTTP {response.status_code}", status_code=response.status_code
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ResponseParseError(str(exc) or "Unknown error") from exc

        if not isinstance(data, dict):
            raise ResponseParseError(f"Expected a JSON object, got {type(data).__name__}")
        logger.debug("%s answered with %d fields", address, len(data))
        return data

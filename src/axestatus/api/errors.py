"""Exception hierarchy for device and configuration errors."""

from __future__ import annotations


class DeviceError(Exception):
    """Base class for errors raised while talking to a device."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeviceUnreachableError(DeviceError):
    """The transport could not reach the device (DNS, refused, timeout)."""


class HttpStatusError(DeviceError):
    """The device answered with a non-2xx status."""


class ResponseParseError(DeviceError):
    """The response body was not a JSON object."""


class InvalidAddressError(DeviceError):
    """The address does not form a valid device URL."""


class ConfigError(Exception):
    """Invalid or missing configuration supplied on the command line."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from rich.console import Console

from axestatus.output.json_output import (
    format_json_error,
    format_json_response,
    serialize_snapshot,
)
from axestatus.output.rich_output import RichOutput

if TYPE_CHECKING:
    from io import TextIOBase

    from axestatus.fleet.state import FleetSnapshot
    from axestatus.output.view import View


class OutputFormatter:
    """Route command results to Rich tables or JSON envelopes.

    The format is *force_format* when given, ``"rich"`` when *stream*
    (default ``sys.stdout``) is a TTY and ``"json"`` when it is piped.
    In ``"quiet"`` mode Rich output goes to stderr and stdout stays empty.
    """

    def __init__(
        self,
        *,
        stream: TextIOBase | Any | None = None,
        force_format: str | None = None,
    ) -> None:
        stream = stream or sys.stdout
        if force_format is not None:
            self._format = force_format
        elif hasattr(stream, "isatty") and stream.isatty():
            self._format = "rich"
        else:
            self._format = "json"
        self._rich = RichOutput(Console(stderr=self._format == "quiet"))

    @property
    def format(self) -> str:  # noqa: A003
        return self._format

    @property
    def is_json(self) -> bool:
        return self._format == "json"

    @property
    def rich(self) -> RichOutput:
        return self._rich

    def output(self, data: Any, *, command: str) -> None:
        """Emit *data* as a JSON envelope; in rich / quiet mode print it as text."""
        if self.is_json:
            print(format_json_response(data=data, command=command))  # noqa: T201
        else:
            self._rich.info(str(data))

    def output_snapshot(self, snapshot: FleetSnapshot, view: View, *, command: str) -> None:
        """Emit the per-device snapshot as JSON, or draw *view* as tables."""
        if self.is_json:
            self.output(serialize_snapshot(snapshot), command=command)
        else:
            self._rich.view(view)

    def output_record(self, address: str, record: dict[str, Any], *, command: str) -> None:
        if self.is_json:
            self.output({"address": address, "data": record}, command=command)
        else:
            self._rich.raw_record(address, record)

    def output_notice(self, *, code: str, message: str, command: str) -> None:
        """Emit an advisory: an error envelope in JSON, a yellow line otherwise.

        Used where nothing went wrong but there is nothing to show, so the
        exit status stays 0.
        """
        if self.is_json:
            print(format_json_error(code=code, message=message, command=command))  # noqa: T201
        else:
            self._rich.info(f"[yellow]{message}[/yellow]")

    def output_error(self, *, code: str, message: str, command: str) -> None:
        if self.is_json:
            print(format_json_error(code=code, message=message, command=command))  # noqa: T201
        else:
            self._rich.error(message)

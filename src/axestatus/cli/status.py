"""One-shot ``status`` and ``raw`` commands."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click

from axestatus.cli._client import fetch_snapshot, get_addresses, require_member
from axestatus.fleet.state import failure_message
from axestatus.models.config import AppSettings
from axestatus.output.view import NO_ADDRESSES_MESSAGE, VIEW_MODES, MessageView, build_view

if TYPE_CHECKING:
    from axestatus.cli.main import AppContext


@click.command("status")
@click.option(
    "--view",
    "view_mode",
    type=click.Choice(VIEW_MODES),
    default=None,
    help="Table layout (default: BITAXE_VIEW or auto)",
)
@click.option("--device", default=None, help="Address to show in focus view")
@click.pass_obj
def status_cmd(app_ctx: AppContext, view_mode: str | None, device: str | None) -> None:
    """Fetch every configured device once and print its status."""
    settings = AppSettings()
    formatter = app_ctx.formatter
    addresses = get_addresses(app_ctx, settings)
    if not addresses:
        formatter.output_notice(
            code="no_addresses", message=NO_ADDRESSES_MESSAGE, command="status"
        )
        return
    require_member(device, addresses)

    snapshot = asyncio.run(fetch_snapshot(addresses))
    view = build_view(snapshot, mode=view_mode or settings.view, focus=device)
    formatter.output_snapshot(snapshot, view, command="status")

    if isinstance(view, MessageView) and view.is_error:
        raise SystemExit(1)


@click.command("raw")
@click.option("--device", default=None, help="Address to dump (default: first configured)")
@click.pass_obj
def raw_cmd(app_ctx: AppContext, device: str | None) -> None:
    """Dump every field reported by one device."""
    formatter = app_ctx.formatter
    addresses = get_addresses(app_ctx)
    if not addresses:
        formatter.output_notice(code="no_addresses", message=NO_ADDRESSES_MESSAGE, command="raw")
        return
    require_member(device, addresses)

    address = device or addresses[0]
    ((_address, slot),) = asyncio.run(fetch_snapshot([address]))

    if slot.failure is not None:
        formatter.output_error(
            code=slot.failure.kind,
            message=failure_message(address, slot.failure),
            command="raw",
        )
        raise SystemExit(1)

    formatter.output_record(address, slot.record or {}, command="raw")

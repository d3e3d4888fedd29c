"""Interactive ``dashboard`` command."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from axestatus.cli._client import get_addresses, require_member
from axestatus.models.config import AppSettings
from axestatus.output.view import VIEW_MODES

if TYPE_CHECKING:
    from axestatus.cli.main import AppContext


@click.command("dashboard")
@click.option(
    "--interval",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds between refreshes, 0 to disable (default: BITAXE_REFRESH_INTERVAL)",
)
@click.option(
    "--view",
    "view_mode",
    type=click.Choice(VIEW_MODES),
    default=None,
    help="Initial layout (default: BITAXE_VIEW or auto)",
)
@click.option("--device", default=None, help="Device to focus first")
@click.pass_obj
def dashboard_cmd(
    app_ctx: AppContext,
    interval: float | None,
    view_mode: str | None,
    device: str | None,
) -> None:
    """Live full-screen dashboard.

    \b
    Keys:
      n / p   next / previous device (focus view)
      v       toggle matrix / focus view
      r       refresh now
      q       quit
    """
    from axestatus.dashboard.tui import DashboardTUI

    settings = AppSettings()
    addresses = get_addresses(app_ctx, settings)
    if addresses:
        require_member(device, addresses)

    app = DashboardTUI(
        addresses,
        mode=view_mode or settings.view,
        refresh_interval=settings.refresh_interval if interval is None else interval,
    )
    if device is not None and addresses:
        app.focus_selection.set_focus(device)
    app.run()

"""Tests for the DashboardTUI Textual app."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from textual.widgets import DataTable, Static

from axestatus.api.errors import DeviceUnreachableError
from axestatus.dashboard.tui import DashboardTUI

RECORDS: dict[str, Any] = {
    "10.0.0.5": {"hostname": "miner1", "voltage": 5000, "current": 1200, "hashRate": 450},
    "10.0.0.6": {"hostname": "miner2", "voltage": 5100, "current": 900, "hashRate": 500},
    "10.0.0.7": DeviceUnreachableError("Connection refused"),
}


class _Fetcher:
    """Records every fetch and answers from ``RECORDS``."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def __call__(self, address: str) -> dict[str, Any]:
        self.calls.append(address)
        result = RECORDS[address]
        if isinstance(result, BaseException):
            raise result
        return dict(result)


async def _settle(app: DashboardTUI, pilot: Any) -> None:
    await app.fleet.wait()
    await pilot.pause()


def _column(app: DashboardTUI, section: str, index: int = 1) -> list[str]:
    table = app.query_one(f"#{section}-table", DataTable)
    return [str(table.get_row_at(row)[index]) for row in range(table.row_count)]


class TestDashboardApp:
    @pytest.mark.asyncio
    async def test_app_starts_and_stops(self) -> None:
        app = DashboardTUI(["10.0.0.5"], fetcher=_Fetcher(), refresh_interval=0)
        async with app.run_test() as pilot:
            assert app.is_running
            await pilot.press("q")

    @pytest.mark.asyncio
    async def test_single_device_focus_view(self) -> None:
        app = DashboardTUI(["10.0.0.5"], fetcher=_Fetcher(), refresh_interval=0)
        async with app.run_test() as pilot:
            await _settle(app, pilot)

            assert _column(app, "general") == ["10.0.0.5", "miner1", "450"]
            assert _column(app, "system") == ["5.00", "1.20", "-", "-", "-", "-"]
            assert "1/1 online" in (app.title or "")

    @pytest.mark.asyncio
    async def test_matrix_view_with_failed_device(self) -> None:
        app = DashboardTUI(["10.0.0.7", "10.0.0.5"], fetcher=_Fetcher(), refresh_interval=0)
        async with app.run_test() as pilot:
            await _settle(app, pilot)

            table = app.query_one("#system-table", DataTable)
            assert len(table.columns) == 3
            assert _column(app, "system", 1)[0] == "Error"
            assert _column(app, "system", 2)[0] == "5.00"

    @pytest.mark.asyncio
    async def test_empty_config_shows_message(self) -> None:
        fetcher = _Fetcher()
        app = DashboardTUI([], fetcher=fetcher, refresh_interval=0)
        async with app.run_test() as pilot:
            await pilot.pause()

            assert app.query_one("#message", Static).display
            assert not app.query_one("#sections").display
            assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_all_failed_shows_message(self) -> None:
        app = DashboardTUI(["10.0.0.7"], fetcher=_Fetcher(), refresh_interval=0)
        async with app.run_test() as pilot:
            await _settle(app, pilot)

            assert app.query_one("#message", Static).display
            assert not app.query_one("#sections").display


class TestFocusSwitching:
    @pytest.mark.asyncio
    async def test_next_device_does_not_fetch(self) -> None:
        fetcher = _Fetcher()
        app = DashboardTUI(
            ["10.0.0.5", "10.0.0.6"], fetcher=fetcher, mode="focus", refresh_interval=0
        )
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            assert _column(app, "general")[1] == "miner1"
            calls_before = list(fetcher.calls)

            await pilot.press("n")
            await pilot.pause()

            assert app.focus_selection.current == "10.0.0.6"
            assert _column(app, "general")[1] == "miner2"
            assert fetcher.calls == calls_before

    @pytest.mark.asyncio
    async def test_prev_wraps_around(self) -> None:
        app = DashboardTUI(
            ["10.0.0.5", "10.0.0.6"], fetcher=_Fetcher(), mode="focus", refresh_interval=0
        )
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            await pilot.press("p")
            await pilot.pause()
            assert app.focus_selection.current == "10.0.0.6"

    @pytest.mark.asyncio
    async def test_switch_from_matrix_enters_focus(self) -> None:
        app = DashboardTUI(["10.0.0.5", "10.0.0.6"], fetcher=_Fetcher(), refresh_interval=0)
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            await pilot.press("n")
            await pilot.pause()

            assert app.view_mode == "focus"
            assert len(app.query_one("#general-table", DataTable).columns) == 2

    @pytest.mark.asyncio
    async def test_single_device_ignores_switch(self) -> None:
        app = DashboardTUI(["10.0.0.5"], fetcher=_Fetcher(), refresh_interval=0)
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            await pilot.press("n")
            await pilot.pause()
            assert app.focus_selection.current == "10.0.0.5"

    @pytest.mark.asyncio
    async def test_toggle_view(self) -> None:
        app = DashboardTUI(["10.0.0.5", "10.0.0.6"], fetcher=_Fetcher(), refresh_interval=0)
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            await pilot.press("v")
            await pilot.pause()
            assert app.view_mode == "focus"
            await pilot.press("v")
            await pilot.pause()
            assert app.view_mode == "matrix"


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh_key_refetches_everything(self) -> None:
        fetcher = _Fetcher()
        app = DashboardTUI(["10.0.0.5", "10.0.0.6"], fetcher=fetcher, refresh_interval=0)
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            await pilot.press("r")
            await _settle(app, pilot)

            assert sorted(fetcher.calls) == ["10.0.0.5", "10.0.0.5", "10.0.0.6", "10.0.0.6"]

    @pytest.mark.asyncio
    async def test_periodic_refresh(self) -> None:
        fetcher = _Fetcher()
        app = DashboardTUI(["10.0.0.5"], fetcher=fetcher, refresh_interval=0.05)
        async with app.run_test() as pilot:
            for _ in range(40):
                if len(fetcher.calls) >= 3:
                    break
                await asyncio.sleep(0.05)
            await pilot.pause()

            assert len(fetcher.calls) >= 3

    @pytest.mark.asyncio
    async def test_set_addresses_resets_focus(self) -> None:
        app = DashboardTUI(
            ["10.0.0.5", "10.0.0.6"], fetcher=_Fetcher(), mode="focus", refresh_interval=0
        )
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            app.focus_selection.set_focus("10.0.0.6")

            app.set_addresses(["10.0.0.5"])
            await _settle(app, pilot)

            assert app.focus_selection.current == "10.0.0.5"
            assert app.fleet.addresses == ("10.0.0.5",)

    @pytest.mark.asyncio
    async def test_device_slower_than_interval_still_shows_data(self) -> None:
        async def slow(address: str) -> dict[str, Any]:
            await asyncio.sleep(0.15)
            return {"hostname": "tortoise"}

        app = DashboardTUI(["10.0.0.5"], fetcher=slow, refresh_interval=0.05)
        async with app.run_test() as pilot:
            for _ in range(30):
                if app.fleet.snapshot()[0][1].record is not None:
                    break
                await asyncio.sleep(0.05)
            await pilot.pause()

            assert app.fleet.snapshot()[0][1].record == {"hostname": "tortoise"}
            assert _column(app, "general")[1] == "tortoise"


class TestMarkupInDeviceValues:
    @pytest.mark.asyncio
    async def test_bracketed_values_render_verbatim(self) -> None:
        async def fetch(address: str) -> dict[str, Any]:
            return {"hostname": f"rig[/b]{address[-1]}", "ssid": "barn[/]wifi"}

        app = DashboardTUI(["10.0.0.5", "10.0.0.6"], fetcher=fetch, refresh_interval=0)
        async with app.run_test() as pilot:
            await _settle(app, pilot)

            table = app.query_one("#network-table", DataTable)
            labels = [str(column.label) for column in table.columns.values()]
            assert labels == ["Field", "rig[/b]5", "rig[/b]6"]
            assert _column(app, "network", 1)[0] == "barn[/]wifi"
            assert _column(app, "network", 2)[0] == "barn[/]wifi"

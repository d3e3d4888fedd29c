"""Shared fixtures for the axestatus test suite."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: object) -> None:
    """Keep real BITAXE_* settings and any local .env out of the tests."""
    for name in (
        "BITAXE_ADDRESSES",
        "BITAXE_OUTPUT_FORMAT",
        "BITAXE_VIEW",
        "BITAXE_REFRESH_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)  # type: ignore[arg-type]

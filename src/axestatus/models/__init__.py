from __future__ import annotations

from axestatus.models.config import AppSettings

__all__ = [
    "AppSettings",
]

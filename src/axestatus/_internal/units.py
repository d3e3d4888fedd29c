"""Unit conversion helpers shared across the codebase."""

from __future__ import annotations


def milli_to_base(value: float) -> float:
    """Convert a milli-unit reading (mV, mA) to its base unit (V, A)."""
    return value / 1000.0

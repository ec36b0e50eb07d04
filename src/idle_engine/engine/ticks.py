"""Conversions between wall-clock durations and engine ticks."""

from __future__ import annotations

from idle_engine.core.constants import TICK_MS


def seconds_to_ticks(seconds: float) -> int:
    """Convert seconds to the nearest whole number of ticks."""
    return round(seconds * 1000 / TICK_MS)


def ms_to_ticks(milliseconds: float) -> int:
    """Convert milliseconds to the nearest whole number of ticks."""
    return round(milliseconds / TICK_MS)


def ticks_to_seconds(ticks: int) -> float:
    """Convert ticks to seconds."""
    return ticks * TICK_MS / 1000


def modified_ticks(base_ticks: float, *, interval_percent: float = 0, flat_ms: float = 0) -> int:
    """Apply percentage and flat interval modifiers to a duration.

    Args:
        base_ticks: Unmodified duration in ticks.
        interval_percent: Additive percentage change; negative is faster.
        flat_ms: Flat change in milliseconds.

    Returns:
        Modified duration, never less than one tick.
    """
    ticks = round(base_ticks * (1 + interval_percent / 100) + flat_ms / TICK_MS)
    return max(1, ticks)


__all__ = [
    "seconds_to_ticks",
    "ms_to_ticks",
    "ticks_to_seconds",
    "modified_ticks",
]

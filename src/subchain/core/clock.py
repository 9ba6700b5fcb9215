# src/subchain/core/clock.py

from __future__ import annotations

from datetime import datetime, timezone

from .ports import Clock


class SystemClock:
    """Wall clock, timezone-aware UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


_default_clock: Clock = SystemClock()


def get_default_clock() -> Clock:
    return _default_clock


def set_default_clock(clock: Clock) -> Clock:
    """
    Replace the clock used by tasks created without an explicit one.
    Returns the previous clock so callers (tests) can restore it.
    """
    global _default_clock
    previous = _default_clock
    _default_clock = clock
    return previous

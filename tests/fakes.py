# tests/fakes.py

from __future__ import annotations

from datetime import datetime, timedelta


class FakeClock:
    """
    Deterministic clock for unit tests.

    Time only moves when the test calls advance().
    """

    def __init__(self, start: datetime) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, *, minutes: float = 0, seconds: float = 0) -> datetime:
        self.current += timedelta(minutes=minutes, seconds=seconds)
        return self.current

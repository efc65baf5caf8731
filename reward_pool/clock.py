"""Time sources for the reward pool (unix seconds)."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Wall-clock time truncated to whole seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Monotonic clock that only moves when told to.

    Used by tests, simulations and persisted local networks, where time is
    advanced explicitly instead of waiting for it to pass.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError("start time must be non-negative")
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        self._now += int(seconds)
        return self._now

    def set_time(self, timestamp: int) -> int:
        if timestamp < self._now:
            raise ValueError(f"cannot move the clock backwards ({timestamp} < {self._now})")
        self._now = int(timestamp)
        return self._now

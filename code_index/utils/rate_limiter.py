"""Minimum-spacing rate limiter for navigations."""

from __future__ import annotations

import time
from typing import Callable


class IntervalLimiter:
    """Enforce a minimum gap between successive dispatch times.

    The gap is measured from one dispatch start to the next, so work that
    already took longer than the interval is not delayed further.

    Args:
        min_interval: Minimum seconds between dispatches.
        clock: Monotonic clock (injectable for tests).
        sleep: Sleep function (injectable for tests).
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_dispatch: float | None = None

    def wait(self) -> float:
        """Block until a dispatch is allowed; return seconds slept."""
        slept = 0.0
        if self._last_dispatch is not None:
            remaining = self._last_dispatch + self.min_interval - self._clock()
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
        self._last_dispatch = self._clock()
        return slept

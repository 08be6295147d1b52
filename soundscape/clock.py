"""Wall-clock source, swappable for tests."""

import time


class Clock:
    def now_ms(self) -> float:
        return time.time() * 1000.0


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start_ms: float = 1_700_000_000_000.0):
        self._now = float(start_ms)

    def now_ms(self) -> float:
        return self._now

    def advance(self, ms: float) -> None:
        self._now += ms

    def set(self, ms: float) -> None:
        self._now = float(ms)


SYSTEM_CLOCK = Clock()

"""
Clock Abstraction

Trial timeouts are measured against a monotonic clock. The clock reports a raw
time value and the unit it is expressed in, so callers can convert elapsed
time to milliseconds regardless of the source.
"""

import time
from enum import Enum
from typing import Protocol


class TimeUnit(Enum):
    """Time units with their length in seconds."""
    NANOSECOND = 1e-9
    MICROSECOND = 1e-6
    MILLISECOND = 1e-3
    SECOND = 1.0

    def convert_to(self, value: float, unit: 'TimeUnit') -> float:
        return value * self.value / unit.value


class Clock(Protocol):

    @property
    def time(self) -> float:
        ...

    @property
    def unit(self) -> TimeUnit:
        ...


class MonotonicClock:
    """time.perf_counter() based clock (seconds)."""

    @property
    def time(self) -> float:
        return time.perf_counter()

    @property
    def unit(self) -> TimeUnit:
        return TimeUnit.SECOND


class LslClock:
    """LSL local clock (seconds), shared with LSL-timestamped streams."""

    def __init__(self):
        from pylsl import local_clock
        self._local_clock = local_clock

    @property
    def time(self) -> float:
        return self._local_clock()

    @property
    def unit(self) -> TimeUnit:
        return TimeUnit.SECOND


def elapsed_ms(clock: Clock, start: float) -> float:
    """Milliseconds elapsed on `clock` since `start`."""
    return clock.unit.convert_to(clock.time - start, TimeUnit.MILLISECOND)

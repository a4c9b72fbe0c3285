import sys
import types

import pytest

from ssvep_classifier.clock import LslClock, MonotonicClock, TimeUnit, elapsed_ms


def test_time_unit_conversion():
    assert TimeUnit.SECOND.convert_to(1.5, TimeUnit.MILLISECOND) == pytest.approx(1500.0)
    assert TimeUnit.MICROSECOND.convert_to(2500.0, TimeUnit.MILLISECOND) == pytest.approx(2.5)


def test_elapsed_ms_on_monotonic_clock():
    clock = MonotonicClock()
    start = clock.time
    assert elapsed_ms(clock, start) >= 0.0


def test_lsl_clock_resolves_local_clock_once(monkeypatch):
    readings = iter([10.0, 10.25, 10.5])
    fake = types.ModuleType("pylsl")
    fake.local_clock = lambda: next(readings)
    monkeypatch.setitem(sys.modules, "pylsl", fake)
    clock = LslClock()

    # Reads keep working once the module can no longer be imported
    monkeypatch.setitem(sys.modules, "pylsl", None)
    start = clock.time
    assert clock.time == 10.25
    assert elapsed_ms(clock, start) == pytest.approx(500.0)
    assert clock.unit is TimeUnit.SECOND

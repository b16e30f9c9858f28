# tests/test_clock.py

from __future__ import annotations

import pytest

from taskchain.core.clock import MonotonicClock, VirtualClock, make_clock


def test_virtual_clock_moves_only_when_advanced() -> None:
    clock = VirtualClock(start=10)
    assert clock.now() == 10
    assert clock.advance(2.5) == 12.5
    assert clock.advance_to(20) == 20
    assert clock.now() == 20


def test_virtual_clock_never_goes_backwards() -> None:
    clock = VirtualClock(start=5)
    with pytest.raises(ValueError):
        clock.advance_to(4)
    with pytest.raises(ValueError):
        clock.advance(-1)
    assert clock.now() == 5


def test_monotonic_clock_starts_near_zero_and_is_non_decreasing() -> None:
    clock = MonotonicClock()
    first = clock.now()
    second = clock.now()
    assert 0 <= first <= second < 5


@pytest.mark.parametrize(
    ("mode", "cls"),
    [("virtual", VirtualClock), ("monotonic", MonotonicClock), (" Virtual ", VirtualClock)],
)
def test_make_clock(mode: str, cls: type) -> None:
    clock = make_clock(mode)
    assert isinstance(clock, cls)
    assert clock.virtual is (cls is VirtualClock)


def test_make_clock_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError, match="unknown clock mode"):
        make_clock("wallclock")

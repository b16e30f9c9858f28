# src/taskchain/core/clock.py

from __future__ import annotations

import time

from .ports import Clock

CLOCK_MODES = ("virtual", "monotonic")


class VirtualClock:
    """Test-controlled clock. Time only moves when advanced explicitly."""

    virtual = True

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, delta: float) -> float:
        if delta < 0:
            raise ValueError(f"cannot advance by a negative delta ({delta!r})")
        return self.advance_to(self._now + delta)

    def advance_to(self, t: float) -> float:
        if t < self._now:
            raise ValueError(f"virtual clock cannot move backwards ({t!r} < {self._now!r})")
        self._now = float(t)
        return self._now

    def __repr__(self) -> str:
        return f"VirtualClock(now={self._now!r})"


class MonotonicClock:
    """Real elapsed seconds since construction (time.monotonic based)."""

    virtual = False

    def __init__(self) -> None:
        self._origin = time.monotonic()

    def now(self) -> float:
        return time.monotonic() - self._origin

    def __repr__(self) -> str:
        return f"MonotonicClock(now={self.now():.3f})"


def make_clock(mode: str) -> Clock:
    key = (mode or "").strip().lower()
    if key == "virtual":
        return VirtualClock()
    if key == "monotonic":
        return MonotonicClock()
    raise ValueError(f"unknown clock mode {mode!r}; expected one of {', '.join(CLOCK_MODES)}")

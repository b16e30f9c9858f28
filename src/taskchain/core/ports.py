# src/taskchain/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the scheduler.

The scheduler depends on a Clock protocol instead of reading time directly.
This keeps virtual (test-controlled) and real time swappable.
"""

from typing import Protocol


class Clock(Protocol):
    """
    Host-supplied time source.

    virtual=True means the dispatch loop may move time forward itself
    (advance_to) instead of waiting for real time to pass.
    """

    virtual: bool

    def now(self) -> float: ...


class AdvanceableClock(Clock, Protocol):
    def advance_to(self, t: float) -> float: ...

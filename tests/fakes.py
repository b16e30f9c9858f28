# tests/fakes.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from taskchain.core.ports import Clock


class ManualRealClock:
    """
    Non-virtual clock whose time is set by the test.

    The scheduler treats it like wall-clock time (it never advances it),
    which lets tests cover real-clock semantics deterministically.
    """

    virtual = False

    def __init__(self, start: float = 0.0) -> None:
        self.t = start

    def now(self) -> float:
        return self.t


@dataclass(slots=True)
class Call:
    label: str
    at: float
    arg: Any = None


@dataclass(slots=True)
class Recorder:
    """
    Builds actions/continuations that record when they ran.

    order gives the labels in execution order; calls keeps the clock time and
    the argument a continuation received.
    """

    clock: Clock
    calls: list[Call] = field(default_factory=list)

    @property
    def order(self) -> list[str]:
        return [c.label for c in self.calls]

    def action(self, label: str, value: Any = None) -> Callable[[], Any]:
        def _run() -> Any:
            self.calls.append(Call(label=label, at=self.clock.now()))
            return value

        _run.__name__ = _run.__qualname__ = label
        return _run

    def failing(self, label: str, error: BaseException) -> Callable[[], Any]:
        def _run() -> Any:
            self.calls.append(Call(label=label, at=self.clock.now()))
            raise error

        _run.__name__ = _run.__qualname__ = label
        return _run

    def continuation(self, label: str, fn: Callable[[Any], Any] = lambda x: x) -> Callable[[Any], Any]:
        def _run(arg: Any) -> Any:
            self.calls.append(Call(label=label, at=self.clock.now(), arg=arg))
            return fn(arg)

        _run.__name__ = _run.__qualname__ = label
        return _run

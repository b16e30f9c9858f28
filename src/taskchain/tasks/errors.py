# src/taskchain/tasks/errors.py

from __future__ import annotations

"""
Scheduler error kinds.

Structural errors (bad delay, unknown handle, double continuation) are raised
synchronously from the offending call. Action failures are never raised by the
dispatch loop: they are captured as ActionFailure records and returned from
Scheduler.run_until_idle().
"""

from collections.abc import Iterator
from typing import Any


class SchedulerError(Exception):
    """Base class for everything the scheduler raises or reports."""


class InvalidDelay(SchedulerError, ValueError):
    def __init__(self, delay: float) -> None:
        super().__init__(f"delay must be a finite number >= 0, got {delay!r}")
        self.delay = delay


class UnknownTask(SchedulerError, LookupError):
    def __init__(self, task_id: int, reason: str = "no such task") -> None:
        super().__init__(f"task {task_id}: {reason}")
        self.task_id = task_id


class ContinuationAlreadySet(SchedulerError):
    def __init__(self, task_id: int, continuation_id: int) -> None:
        super().__init__(f"task {task_id} already continues into task {continuation_id}")
        self.task_id = task_id
        self.continuation_id = continuation_id


class InvalidTransition(SchedulerError):
    """A task state change outside the forward-only lifecycle (scheduler bug)."""

    def __init__(self, task_id: int, current: str, target: str) -> None:
        super().__init__(f"task {task_id}: cannot go from {current} to {target}")
        self.task_id = task_id
        self.current = current
        self.target = target


class ResultUnavailable(SchedulerError):
    def __init__(self, task_id: int, state: str) -> None:
        super().__init__(f"task {task_id} has no result (state={state})")
        self.task_id = task_id
        self.state = state


class ActionFailure(SchedulerError):
    """
    One failed action, as reported by run_until_idle().

    `error` is the exact exception the action raised; it is also chained as
    __cause__ so tracebacks show the original failure.
    """

    def __init__(self, task_id: int, error: BaseException, name: str | None = None) -> None:
        label = f"{name} (task {task_id})" if name else f"task {task_id}"
        super().__init__(f"{label} failed: {error!r}")
        self.task_id = task_id
        self.error = error
        self.name = name
        self.__cause__ = error

    def __iter__(self) -> Iterator[Any]:
        # Unpacks like the (task_id, error) pair callers usually want.
        yield self.task_id
        yield self.error

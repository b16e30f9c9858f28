# src/taskchain/tasks/task_models.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .errors import InvalidTransition

Action = Callable[[], Any]
Continuation = Callable[[Any], Any]


class TaskState(StrEnum):
    """
    Task lifecycle state.

    Transitions only move forward:
    pending -> running -> completed | failed, or pending -> cancelled.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def finished(self) -> bool:
        return self in (TaskState.COMPLETED, TaskState.FAILED, TaskState.CANCELLED)


_ALLOWED: dict[TaskState, frozenset[TaskState]] = {
    TaskState.PENDING: frozenset({TaskState.RUNNING, TaskState.CANCELLED}),
    TaskState.RUNNING: frozenset({TaskState.COMPLETED, TaskState.FAILED}),
    TaskState.COMPLETED: frozenset(),
    TaskState.FAILED: frozenset(),
    TaskState.CANCELLED: frozenset(),
}


@dataclass(slots=True, frozen=True)
class TaskHandle:
    id: int

    def __int__(self) -> int:
        return self.id


@dataclass(slots=True)
class Task:
    id: int
    action: Action
    name: str
    state: TaskState = TaskState.PENDING

    # Unset until the task enters the queue (continuations wait for their parent).
    due_at: float | None = None
    submitted_at: float | None = None
    seq: int | None = None

    parent: int | None = None
    continuation: int | None = None

    result: Any = None
    error: BaseException | None = field(default=None, repr=False)

    @property
    def queued(self) -> bool:
        return self.seq is not None

    def sort_key(self) -> tuple[float, float, int]:
        assert self.due_at is not None and self.submitted_at is not None and self.seq is not None
        return (self.due_at, self.submitted_at, self.seq)

    def transition(self, target: TaskState) -> None:
        if target not in _ALLOWED[self.state]:
            raise InvalidTransition(self.id, self.state.value, target.value)
        self.state = target


def describe_callable(fn: Callable[..., Any]) -> str:
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    return str(name) if name else type(fn).__name__

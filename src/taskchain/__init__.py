"""Deferred task scheduling with promise-style continuations."""

from .core.clock import MonotonicClock, VirtualClock, make_clock
from .tasks.errors import (
    ActionFailure,
    ContinuationAlreadySet,
    InvalidDelay,
    InvalidTransition,
    ResultUnavailable,
    SchedulerError,
    UnknownTask,
)
from .tasks.task_models import Task, TaskHandle, TaskState
from .tasks.task_scheduler import Scheduler, run_scheduler

__all__ = [
    "ActionFailure",
    "ContinuationAlreadySet",
    "InvalidDelay",
    "InvalidTransition",
    "MonotonicClock",
    "ResultUnavailable",
    "Scheduler",
    "SchedulerError",
    "Task",
    "TaskHandle",
    "TaskState",
    "UnknownTask",
    "VirtualClock",
    "make_clock",
    "run_scheduler",
]

# src/taskchain/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from .task_models import Action, Continuation, TaskHandle, TaskState
from .task_scheduler import HandleLike, Scheduler

logger = logging.getLogger(__name__)


def schedule_value(scheduler: Scheduler, delay: float, value: Any, *, name: str | None = None) -> TaskHandle:
    """A task that simply resolves to `value` after `delay`."""
    return scheduler.schedule(delay, lambda: value, name=name or f"value:{value!r}")


def schedule_chain(
    scheduler: Scheduler,
    delay: float,
    action: Action,
    *continuations: Continuation,
) -> list[TaskHandle]:
    """
    Convenience helper: schedule `action` and attach each continuation in order.

    Returns the handles of the head task followed by one handle per continuation,
    so the last handle is the end of the chain.
    """
    handles = [scheduler.schedule(delay, action)]
    for fn in continuations:
        handles.append(scheduler.then(handles[-1], fn))
    return handles


def schedule_timeout(scheduler: Scheduler, handle: HandleLike, timeout: float) -> TaskHandle:
    """
    Cancel `handle` if it is still pending `timeout` time units from now.

    The watchdog task resolves to True when it cancelled the target and False
    when the target had already started or finished.
    """
    target = int(handle)

    def _expire() -> bool:
        cancelled = scheduler.cancel(target)
        if cancelled:
            logger.info("Task %s timed out after %s and was cancelled", target, timeout)
        return cancelled

    return scheduler.schedule(timeout, _expire, name=f"timeout:{target}")


def collect_results(scheduler: Scheduler, handles: Iterable[HandleLike]) -> list[Any]:
    """Results of the completed tasks among `handles`, in the given order."""
    out: list[Any] = []
    for h in handles:
        if scheduler.state(h) is TaskState.COMPLETED:
            out.append(scheduler.result(h))
    return out

# src/taskchain/tasks/task_scheduler.py

from __future__ import annotations

"""
Deferred task scheduler.

A single-threaded dispatch loop that:
- keeps pending tasks in a heap ordered by (due_at, submitted_at, seq),
- runs each task exactly once at or after its due time,
- hands a completed task's result to its continuation (scheduled with zero delay),
- records action failures instead of letting them stop the loop.

Time comes from an injected Clock. With a virtual clock the loop advances time
itself; with a real clock it only runs what is already due.
"""

import asyncio
import functools
import heapq
import inspect
import logging
import math
from typing import Any, cast

from ..core.clock import VirtualClock
from ..core.ports import AdvanceableClock, Clock
from .errors import (
    ActionFailure,
    ContinuationAlreadySet,
    InvalidDelay,
    ResultUnavailable,
    SchedulerError,
    UnknownTask,
)
from .task_models import Action, Continuation, Task, TaskHandle, TaskState, describe_callable

logger = logging.getLogger(__name__)

HandleLike = TaskHandle | int

# Heap entries: (due_at, submitted_at, seq, task_id)
_QueueEntry = tuple[float, float, int, int]


def _unqueued_continuation() -> Any:
    raise SchedulerError("continuation ran before its parent completed")


class Scheduler:
    def __init__(self, clock: Clock | None = None) -> None:
        self._clock: Clock = clock if clock is not None else VirtualClock()
        self._tasks: dict[int, Task] = {}
        self._queue: list[_QueueEntry] = []
        # Continuation callables waiting for their parent's result, by child id.
        self._waiting: dict[int, Continuation] = {}
        self._next_id = 1
        self._next_seq = 0
        self._dispatching = False

    @property
    def clock(self) -> Clock:
        return self._clock

    def now(self) -> float:
        return self._clock.now()

    # ---- submission ----

    def schedule(self, delay: float, action: Action, *, name: str | None = None) -> TaskHandle:
        """
        Queue `action` to run `delay` time units from now.

        Raises InvalidDelay (and creates nothing) for a negative or non-finite (NaN, inf) delay.
        """
        if not math.isfinite(delay) or delay < 0:
            raise InvalidDelay(delay)

        task = self._new_task(action, name)
        self._enqueue(task, float(delay))
        logger.debug(
            "Scheduled task %s (%s) due_at=%s", task.id, task.name, task.due_at
        )
        return TaskHandle(task.id)

    def then(
        self,
        handle: HandleLike,
        continuation: Continuation,
        *,
        name: str | None = None,
    ) -> TaskHandle:
        """
        Attach `continuation` to a live task.

        The returned handle points at a pending continuation task that is only
        queued (with zero delay) once the parent completes successfully; it is
        called with the parent's result. If the parent fails or is cancelled,
        the continuation is cancelled and never runs.
        """
        parent = self._get(handle)
        if parent.state.finished:
            raise UnknownTask(parent.id, f"task is no longer live (state={parent.state.value})")
        if parent.continuation is not None:
            raise ContinuationAlreadySet(parent.id, parent.continuation)

        child = self._new_task(_unqueued_continuation, name or describe_callable(continuation))
        child.parent = parent.id
        parent.continuation = child.id
        self._waiting[child.id] = continuation
        logger.debug("Task %s continues into task %s (%s)", parent.id, child.id, child.name)
        return TaskHandle(child.id)

    def cancel(self, handle: HandleLike) -> bool:
        """
        Cancel a pending task. Returns False if it is already running or finished.

        Cancelling a task also cancels its (still pending) continuation chain.
        """
        task = self._get(handle)
        if task.state is not TaskState.PENDING:
            return False

        task.transition(TaskState.CANCELLED)
        self._waiting.pop(task.id, None)
        logger.debug("Task %s (%s) cancelled", task.id, task.name)
        self._cancel_continuations(task)
        return True

    # ---- dispatch ----

    def run_until_idle(self) -> list[ActionFailure]:
        """
        Dispatch loop.

        Virtual clock: jump to each next due time and drain until the queue is empty.
        Real clock: run everything already due, return once only future tasks remain.

        Returns every action failure observed during this run, in dispatch order.
        """
        if self._dispatching:
            raise SchedulerError("run_until_idle() is not re-entrant")

        failures: list[ActionFailure] = []
        dispatched = 0
        self._dispatching = True
        try:
            while True:
                task = self._pop_due()
                if task is None:
                    break
                dispatched += 1
                failure = self._dispatch(task)
                if failure is not None:
                    failures.append(failure)
        finally:
            self._dispatching = False

        if failures:
            logger.warning(
                "Dispatched %d task(s), %d failed: %s",
                dispatched,
                len(failures),
                ", ".join(str(f.task_id) for f in failures),
            )
        elif dispatched:
            logger.debug("Dispatched %d task(s), clock at %s", dispatched, self.now())
        return failures

    def _pop_due(self) -> Task | None:
        while self._queue:
            due_at, _, _, task_id = self._queue[0]
            task = self._tasks.get(task_id)

            # Lazy removal: cancelled entries stay in the heap until they surface.
            if task is None or task.state is not TaskState.PENDING:
                heapq.heappop(self._queue)
                continue

            if due_at > self._clock.now():
                if not self._clock.virtual:
                    return None
                cast(AdvanceableClock, self._clock).advance_to(due_at)

            heapq.heappop(self._queue)
            return task
        return None

    def _dispatch(self, task: Task) -> ActionFailure | None:
        task.transition(TaskState.RUNNING)
        logger.debug("Running task %s (%s) at t=%s", task.id, task.name, self.now())

        try:
            result = task.action()
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise TypeError(
                    f"action {task.name!r} returned an awaitable; the dispatch loop only runs plain callables"
                )
        except Exception as exc:
            task.error = exc
            task.transition(TaskState.FAILED)
            logger.exception("Task %s (%s) failed", task.id, task.name)
            self._cancel_continuations(task)
            return ActionFailure(task.id, exc, task.name)

        task.result = result
        task.transition(TaskState.COMPLETED)
        self._release_continuation(task)
        return None

    def _release_continuation(self, parent: Task) -> None:
        child_id = parent.continuation
        if child_id is None:
            return
        fn = self._waiting.pop(child_id, None)
        child = self._tasks.get(child_id)
        if fn is None or child is None or child.state is not TaskState.PENDING:
            # Cancelled while waiting for the parent.
            return

        child.action = functools.partial(fn, parent.result)
        self._enqueue(child, 0.0)
        logger.debug("Released continuation %s of task %s at t=%s", child.id, parent.id, child.due_at)

    def _cancel_continuations(self, task: Task) -> None:
        child_id = task.continuation
        while child_id is not None:
            child = self._tasks.get(child_id)
            if child is None or child.state is not TaskState.PENDING:
                return
            child.transition(TaskState.CANCELLED)
            self._waiting.pop(child.id, None)
            logger.debug("Continuation %s cancelled (task %s did not complete)", child.id, task.id)
            child_id = child.continuation

    # ---- queries ----

    def get_task(self, handle: HandleLike) -> Task:
        return self._get(handle)

    def state(self, handle: HandleLike) -> TaskState:
        return self._get(handle).state

    def result(self, handle: HandleLike) -> Any:
        task = self._get(handle)
        if task.state is not TaskState.COMPLETED:
            raise ResultUnavailable(task.id, task.state.value)
        return task.result

    @property
    def pending_count(self) -> int:
        """Pending tasks, including continuations still waiting for their parent."""
        return sum(1 for t in self._tasks.values() if t.state is TaskState.PENDING)

    @property
    def queued_count(self) -> int:
        return sum(1 for t in self._tasks.values() if t.state is TaskState.PENDING and t.queued)

    def next_due_at(self) -> float | None:
        while self._queue:
            due_at, _, _, task_id = self._queue[0]
            task = self._tasks.get(task_id)
            if task is not None and task.state is TaskState.PENDING:
                return due_at
            heapq.heappop(self._queue)
        return None

    def discard_finished(self) -> int:
        """Forget completed, failed and cancelled tasks. Their handles become unknown."""
        done = [tid for tid, t in self._tasks.items() if t.state.finished]
        for tid in done:
            del self._tasks[tid]
        if done:
            logger.debug("Discarded %d finished task(s)", len(done))
        return len(done)

    # ---- internals ----

    def _new_task(self, action: Action, name: str | None) -> Task:
        task = Task(id=self._next_id, action=action, name=name or describe_callable(action))
        self._next_id += 1
        self._tasks[task.id] = task
        return task

    def _enqueue(self, task: Task, delay: float) -> None:
        now = self._clock.now()
        task.submitted_at = now
        task.due_at = now + delay
        task.seq = self._next_seq
        self._next_seq += 1
        heapq.heappush(self._queue, (*task.sort_key(), task.id))

    def _get(self, handle: HandleLike) -> Task:
        task_id = int(handle)
        task = self._tasks.get(task_id)
        if task is None:
            raise UnknownTask(task_id)
        return task


async def run_scheduler(
        scheduler: Scheduler,
        *,
        interval_seconds: float = 0.05,
        stop_when_idle: bool = True,
        discard_finished: bool = False,
) -> list[ActionFailure]:
    """
    Drive a scheduler from an asyncio event loop.

    Repeatedly:
    - drain everything due (run_until_idle),
    - sleep until the next due time, capped at interval_seconds.

    With stop_when_idle=True, returns all failures once nothing is queued.
    Otherwise keeps polling for newly scheduled work; cancel the coroutine/task to stop.
    In that mode failures are only logged, not collected, and long-lived callers
    should pass discard_finished=True so finished task records do not pile up.
    """
    sleep_cap = max(0.001, float(interval_seconds))
    failures: list[ActionFailure] = []

    while True:
        drained = scheduler.run_until_idle()
        if stop_when_idle:
            failures.extend(drained)
        if discard_finished:
            scheduler.discard_finished()

        next_due = scheduler.next_due_at()
        if next_due is None:
            if stop_when_idle:
                return failures
            await asyncio.sleep(sleep_cap)
            continue

        await asyncio.sleep(min(sleep_cap, max(0.0, next_due - scheduler.now())))

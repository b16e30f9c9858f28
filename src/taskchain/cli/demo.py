# src/taskchain/cli/demo.py

"""
Promise walkthrough expressed as scheduler tasks.

Each example mirrors a classic callback/promise shape:
- a callback-style fetch (announce, then hand the data to a callback),
- timer callbacks with a custom and a default function,
- a delayed greeting (timer resolving a value),
- a fetch followed by two chained continuations,
- a fetch whose validation may fail (error handling),
- two flaky requests, weather and user lookup (seeded randomness),
- a dependent fetch (user, then that user's posts),
- three sequential API calls with varying latency,
- a slow job cut off by a timeout.

Delays are in seconds so the same registration works on a virtual or real clock.

Expected failures (DemoError) are not caught in-chain: the scheduler reports
them from the run, and report_failures() prints them afterwards the way a
trailing .catch handler would.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import Any

from ..tasks.errors import ActionFailure
from ..tasks.task_api import schedule_timeout, schedule_value
from ..tasks.task_models import TaskHandle
from ..tasks.task_scheduler import Scheduler

Emit = Callable[[str], None]

logger = logging.getLogger(__name__)


class DemoError(Exception):
    """
    Simulated, expected failure (unavailable service, missing data).

    `label` is the prefix of the printed "<label> error: ..." line.
    """

    def __init__(self, message: str, *, label: str = "Error") -> None:
        super().__init__(message)
        self.label = label


def fetch_data() -> dict[str, Any]:
    return {"id": 1, "name": "John Doe", "email": "john@example.com"}


def fetch_user_data() -> dict[str, Any]:
    user = {"name": "Alice", "age": 25}
    if not user.get("age"):
        raise DemoError("User data is missing age property", label="User data")
    return user


def fetch_user_with_error(rng: random.Random) -> dict[str, Any]:
    if rng.random() > 0.5:
        return {"id": 1, "name": "Charlie", "age": 28}
    raise DemoError("User not found", label="User")


def fetch_user() -> dict[str, Any]:
    return {"id": 1, "name": "Bob", "age": 30}


def fetch_posts(user_id: int) -> list[dict[str, Any]]:
    return [
        {"id": 1, "title": "First Post", "userId": user_id},
        {"id": 2, "title": "Second Post", "userId": user_id},
    ]


def get_weather(rng: random.Random) -> dict[str, Any]:
    if rng.random() > 0.3:
        return {"temperature": 22, "condition": "Sunny"}
    raise DemoError("Weather data unavailable", label="Weather")


def execute_with_delay(
    scheduler: Scheduler,
    emit: Emit,
    fn: Callable[[], Any] | None = None,
    delay: float = 1.0,
) -> TaskHandle:
    """Run `fn` after `delay`; both have defaults, like a timer with default parameters."""
    if fn is None:
        fn = lambda: emit("Default function")  # noqa: E731
    return scheduler.schedule(delay, fn, name=f"execute_with_delay:{delay:g}")


def register_walkthrough(scheduler: Scheduler, emit: Emit, *, rng: random.Random) -> dict[str, TaskHandle]:
    """
    Schedule every example and return the handle at the end of each chain.
    Nothing runs until the caller drives the scheduler.
    """
    handles: dict[str, TaskHandle] = {}

    emit("Fetching data...")
    callback_fetch = scheduler.schedule(2.0, fetch_data, name="fetch_data_callback")
    handles["callback_fetch"] = scheduler.then(
        callback_fetch, lambda data: emit(f"Received data: {data}"), name="display_data"
    )

    handles["custom_delay"] = execute_with_delay(scheduler, emit, lambda: emit("Custom function"), 0.5)
    handles["default_delay"] = execute_with_delay(scheduler, emit)

    greeting = schedule_value(scheduler, 2.0, "Hello, world!", name="greeting")
    handles["greeting"] = scheduler.then(greeting, emit, name="print_greeting")

    def _show_fetched(data: dict[str, Any]) -> str:
        emit(f"Fetched data: {data}")
        return data["name"]

    fetched = scheduler.schedule(1.0, fetch_data)
    name = scheduler.then(fetched, _show_fetched)
    handles["fetch_data"] = scheduler.then(name, lambda n: emit(f"User name: {n}"), name="print_user_name")

    user_data = scheduler.schedule(1.0, fetch_user_data)
    handles["user_data"] = scheduler.then(
        user_data, lambda data: emit(f"User data: {data}"), name="print_user_data"
    )

    weather = scheduler.schedule(1.0, lambda: get_weather(rng), name="weather")
    handles["weather"] = scheduler.then(weather, lambda w: emit(f"Weather: {w}"), name="print_weather")

    user_info = scheduler.schedule(1.0, lambda: fetch_user_with_error(rng), name="fetch_user_with_error")
    handles["user_info"] = scheduler.then(
        user_info, lambda u: emit(f"User info: {u}"), name="print_user_info"
    )

    def _with_posts(user: dict[str, Any]) -> TaskHandle:
        emit(f"User: {user}")
        posts = scheduler.schedule(0.5, lambda: fetch_posts(user["id"]), name="fetch_posts")
        return scheduler.then(posts, lambda p: emit(f"Posts: {p}"), name="print_posts")

    user = scheduler.schedule(1.0, fetch_user)
    handles["user_and_posts"] = scheduler.then(user, _with_posts)

    handles["api_calls"] = _sequential_api_calls(scheduler, emit, rng=rng, count=3)

    slow = scheduler.schedule(5.0, lambda: "slow report", name="slow_report")
    handles["slow_report"] = scheduler.then(slow, emit, name="print_slow_report")
    handles["slow_report_timeout"] = schedule_timeout(scheduler, slow, 3.0)

    logger.debug("Walkthrough registered: %s", ", ".join(handles))
    return handles


def _sequential_api_calls(scheduler: Scheduler, emit: Emit, *, rng: random.Random, count: int) -> TaskHandle:
    emit("Starting API calls...")

    def _call(n: int) -> TaskHandle:
        latency = rng.uniform(0.5, 2.5)
        # Timestamps come from the scheduler clock so virtual runs stay reproducible.
        call = scheduler.schedule(
            latency, lambda: {"data": f"API response at t={scheduler.now():.2f}"}, name=f"api_call_{n}"
        )

        def _next(resp: dict[str, str]) -> TaskHandle | None:
            emit(f"Result {n}: {resp['data']}")
            return _call(n + 1) if n < count else None

        return scheduler.then(call, _next, name=f"print_result_{n}")

    return _call(1)


def report_failures(failures: list[ActionFailure], emit: Emit) -> int:
    """
    Print expected (DemoError) failures the way a .catch handler would.
    Returns the number of unexpected failures.
    """
    unexpected = 0
    for failure in failures:
        if isinstance(failure.error, DemoError):
            emit(f"{failure.error.label} error: {failure.error}")
        else:
            unexpected += 1
            logger.error("Unexpected failure: %s", failure)
    return unexpected

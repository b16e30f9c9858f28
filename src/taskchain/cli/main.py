# src/taskchain/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds the scheduler from settings, registers the promise
walkthrough and drives it:
- virtual clock: a single run_until_idle() (instant, reproducible),
- monotonic clock: run_scheduler() on an asyncio loop (real delays).
"""

from __future__ import annotations

import asyncio
import logging
import random

from ..cli.bootstrap import create_scheduler, ensure_local_dirs
from ..cli.demo import register_walkthrough, report_failures
from ..config import Settings, get_settings
from ..logging_setup import bind_clock, setup_logging
from ..tasks.task_scheduler import Scheduler, run_scheduler

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    ensure_local_dirs(settings)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (clock=%s)...", settings.app_name, settings.clock_mode)

    try:
        scheduler = create_scheduler(settings=settings)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    bind_clock(scheduler.clock)
    try:
        return _run_walkthrough(scheduler, settings)
    finally:
        bind_clock(None)


def _run_walkthrough(scheduler: Scheduler, settings: Settings) -> int:
    def emit(line: str) -> None:
        print(f"[{scheduler.now():6.2f}] {line}")

    register_walkthrough(scheduler, emit, rng=random.Random(settings.demo_seed))

    if scheduler.clock.virtual:
        failures = scheduler.run_until_idle()
    else:
        try:
            failures = asyncio.run(
                run_scheduler(scheduler, interval_seconds=settings.poll_interval_seconds)
            )
        except KeyboardInterrupt:
            logger.info("Interrupted, %d task(s) left pending.", scheduler.pending_count)
            return 130

    unexpected = report_failures(failures, emit)
    emit("Walkthrough completed.")
    logger.info("Bye.")
    return 1 if unexpected else 0


if __name__ == "__main__":
    raise SystemExit(main())

# src/taskchain/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the configured clock into a Scheduler.
"""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..core.clock import make_clock
from ..tasks.task_scheduler import Scheduler

logger = logging.getLogger(__name__)


def ensure_local_dirs(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_scheduler(*, settings: Settings | None = None) -> Scheduler:
    """
    Create a Scheduler from the provided settings.

    Raises ValueError if settings.clock_mode is not a known clock.
    """
    if settings is None:
        settings = get_settings()

    clock = make_clock(settings.clock_mode)
    logger.debug("Scheduler clock: %r", clock)
    return Scheduler(clock)

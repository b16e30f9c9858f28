# src/taskchain/logging_setup.py

"""
Logging for the CLI.

Every record is stamped with the scheduler clock (`task_clock`), so a virtual
run reads in logical time even though it finishes instantly. The console only
shows the walkthrough narration and dispatch problems; per-task dispatch
chatter goes to the log file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from .core.ports import Clock

_SCHEDULER_LOGGER = "taskchain.tasks.task_scheduler"

LOG_FILE_NAME = "taskchain.log"


class _ClockStamp(logging.Filter):
    """Adds record.task_clock; '-' until a scheduler clock is bound."""

    def __init__(self) -> None:
        super().__init__()
        self.clock: Clock | None = None

    def filter(self, record: logging.LogRecord) -> bool:
        record.task_clock = "-" if self.clock is None else f"{self.clock.now():.2f}"
        return True


class _DispatchChatterFilter(logging.Filter):
    """
    Console policy:
    - scheduler logs only from `scheduler_level` up (failures, failed-run summaries)
    - other taskchain logs (CLI, helpers) pass through
    - asyncio only WARNING+ (slow callback notices are useful, debug is not)
    - anything else only ERROR+
    """

    def __init__(self, scheduler_level: int) -> None:
        super().__init__()
        self.scheduler_level = scheduler_level

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == _SCHEDULER_LOGGER:
            return record.levelno >= self.scheduler_level
        if name.startswith("taskchain."):
            return True
        if name == "asyncio":
            return record.levelno >= logging.WARNING
        return record.levelno >= logging.ERROR


_CLOCK_STAMP = _ClockStamp()


def bind_clock(clock: Clock | None) -> None:
    """Stamp subsequent records with `clock` (None resets to '-')."""
    _CLOCK_STAMP.clock = clock


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskchain",
    console_level: int = logging.INFO,
    scheduler_console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install a console handler (filtered) and a file handler (everything) on the root logger.

    Replaces existing root handlers, so call it once at startup. Returns the log file path.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter("[t=%(task_clock)s] %(levelname)s %(name)s: %(message)s"))
    console.addFilter(_CLOCK_STAMP)
    console.addFilter(_DispatchChatterFilter(scheduler_console_level))
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d [t=%(task_clock)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    file_handler.addFilter(_CLOCK_STAMP)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file

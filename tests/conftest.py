# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskchain.core.clock import VirtualClock
from taskchain.tasks.task_scheduler import Scheduler

from .fakes import Recorder


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="taskchain-test",
        log_level="INFO",
        data_dir=tmp_path / "data",
        clock_mode="virtual",
        poll_interval_seconds=0.01,
        demo_seed=7,
    )


@pytest.fixture()
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture()
def scheduler(clock: VirtualClock) -> Scheduler:
    return Scheduler(clock)


@pytest.fixture()
def rec(clock: VirtualClock) -> Recorder:
    return Recorder(clock)

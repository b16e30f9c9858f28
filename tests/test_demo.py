# tests/test_demo.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from taskchain.cli import main as cli_main
from taskchain.cli.bootstrap import create_scheduler
from taskchain.cli.demo import DemoError, execute_with_delay, register_walkthrough, report_failures
from taskchain.tasks.errors import ActionFailure
from taskchain.tasks.task_models import TaskState


def _fixed_rng(value: float) -> SimpleNamespace:
    """Stands in for random.Random: constant draws, constant 1s latency."""
    return SimpleNamespace(random=lambda: value, uniform=lambda a, b: 1.0)


def test_walkthrough_on_virtual_clock(scheduler) -> None:
    lines: list[tuple[float, str]] = []
    handles = register_walkthrough(
        scheduler, lambda line: lines.append((scheduler.now(), line)), rng=_fixed_rng(0.9)
    )

    failures = scheduler.run_until_idle()
    text = [line for _, line in lines]

    assert failures == []
    assert text[:2] == ["Fetching data...", "Starting API calls..."]
    assert (0.5, "Custom function") in lines
    assert (1.0, "Default function") in lines
    assert (2.0, "Received data: {'id': 1, 'name': 'John Doe', 'email': 'john@example.com'}") in lines
    assert (1.0, "User info: {'id': 1, 'name': 'Charlie', 'age': 28}") in lines
    assert (2.0, "Hello, world!") in lines
    assert "User name: John Doe" in text
    assert "User data: {'name': 'Alice', 'age': 25}" in text
    assert "Weather: {'temperature': 22, 'condition': 'Sunny'}" in text
    assert text.index("User: {'id': 1, 'name': 'Bob', 'age': 30}") < next(
        i for i, line in enumerate(text) if line.startswith("Posts: ")
    )

    results = [(t, line) for t, line in lines if line.startswith("Result ")]
    assert [line.split(":")[0] for _, line in results] == ["Result 1", "Result 2", "Result 3"]
    assert [t for t, _ in results] == [1.0, 2.0, 3.0]

    assert "slow report" not in text
    assert scheduler.result(handles["slow_report_timeout"]) is True
    assert scheduler.state(handles["slow_report"]) is TaskState.CANCELLED
    assert scheduler.now() == 3.0


def test_outages_are_reported_after_the_run(scheduler) -> None:
    lines: list[str] = []
    handles = register_walkthrough(scheduler, lines.append, rng=_fixed_rng(0.1))

    failures = scheduler.run_until_idle()

    assert [type(f.error) for f in failures] == [DemoError, DemoError]
    assert [f.name for f in failures] == ["weather", "fetch_user_with_error"]
    assert scheduler.state(handles["weather"]) is TaskState.CANCELLED
    assert scheduler.state(handles["user_info"]) is TaskState.CANCELLED
    assert not any(line.startswith(("Weather: ", "User info: ")) for line in lines)

    # Nothing is printed for them until report_failures runs, after the loop.
    assert not any(" error: " in line for line in lines)
    assert report_failures(failures, lines.append) == 0
    assert lines[-2:] == ["Weather error: Weather data unavailable", "User error: User not found"]


def test_execute_with_delay_defaults(scheduler) -> None:
    lines: list[tuple[float, str]] = []
    emit = lambda line: lines.append((scheduler.now(), line))  # noqa: E731

    default = execute_with_delay(scheduler, emit)
    custom = execute_with_delay(scheduler, emit, lambda: emit("Custom function"), 0.5)

    assert scheduler.get_task(default).due_at == 1.0
    assert scheduler.get_task(custom).name == "execute_with_delay:0.5"
    assert scheduler.run_until_idle() == []
    assert lines == [(0.5, "Custom function"), (1.0, "Default function")]


def test_report_failures_counts_unexpected() -> None:
    emitted: list[str] = []
    failures = [
        ActionFailure(1, DemoError("down", label="Weather"), "weather"),
        ActionFailure(2, ZeroDivisionError("oops"), "math"),
    ]
    assert report_failures(failures, emitted.append) == 1
    assert emitted == ["Weather error: down"]


def test_create_scheduler_uses_configured_clock(settings) -> None:
    assert create_scheduler(settings=settings).clock.virtual is True

    settings.clock_mode = "monotonic"
    assert create_scheduler(settings=settings).clock.virtual is False

    settings.clock_mode = "sundial"
    with pytest.raises(ValueError):
        create_scheduler(settings=settings)


def test_main_runs_walkthrough(monkeypatch, settings, capsys) -> None:
    monkeypatch.setattr(cli_main, "get_settings", lambda: settings)
    monkeypatch.setattr(cli_main, "setup_logging", lambda **_: None)

    assert cli_main.main() == 0

    out = capsys.readouterr().out
    assert "Hello, world!" in out
    assert "Walkthrough completed." in out
    assert settings.data_dir.is_dir()


def test_main_rejects_unknown_clock(monkeypatch, settings) -> None:
    settings.clock_mode = "sundial"
    monkeypatch.setattr(cli_main, "get_settings", lambda: settings)
    monkeypatch.setattr(cli_main, "setup_logging", lambda **_: None)

    assert cli_main.main() == 2

# src/taskchain/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Malformed values fall back to defaults instead of failing at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKCHAIN"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path

    # ---- Scheduler ----
    clock_mode: str
    poll_interval_seconds: float

    # ---- Demo ----
    demo_seed: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskchain").strip() or "taskchain"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskchain"))

        # Unknown modes are rejected later by make_clock() with a clear message.
        clock_mode = _env(_k("CLOCK"), "virtual").strip().lower() or "virtual"

        poll_interval_seconds = _env_float(_k("POLL_INTERVAL"), 0.05)
        if poll_interval_seconds <= 0:
            poll_interval_seconds = 0.05

        demo_seed = _env_int(_k("DEMO_SEED"), 7)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            clock_mode=clock_mode,
            poll_interval_seconds=poll_interval_seconds,
            demo_seed=demo_seed,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS

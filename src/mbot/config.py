# src/mbot/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (Matrix credentials are only read when enabled).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import time
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

ENV_PREFIX = "MBOT"

DEFAULT_SCHEDULE_PATH = "schedules/schedule.md"
DEFAULT_ALLDAY_TIME = time(9, 0)

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_clock(name: str, default: time) -> time:
    """Parse an HH:MM value; anything else falls back to the default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        parsed = time.fromisoformat(raw.strip())
    except ValueError:
        return default
    return parsed.replace(second=0, microsecond=0)


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Checklist / polling ----
    schedule_path: str
    poll_interval_seconds: float
    window_seconds: float
    allday_time: time
    prune_notified: bool

    # ---- Sinks ----
    console_enabled: bool
    matrix_enabled: bool

    # ---- Matrix ----
    matrix_homeserver: str
    matrix_user_id: str
    matrix_password: str
    matrix_rooms: List[str]
    matrix_store_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "mbot").strip() or "mbot"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/mbot"))

        schedule_path = _env(_k("SCHEDULE_PATH"), DEFAULT_SCHEDULE_PATH).strip() or DEFAULT_SCHEDULE_PATH

        poll_interval_seconds = _env_float(_k("POLL_INTERVAL_SECONDS"), 60.0)
        if poll_interval_seconds <= 0:
            poll_interval_seconds = 60.0
        window_seconds = _env_float(_k("WINDOW_SECONDS"), 60.0)
        if window_seconds <= 0:
            window_seconds = 60.0

        allday_time = _env_clock(_k("ALLDAY_TIME"), DEFAULT_ALLDAY_TIME)
        prune_notified = _env_bool(_k("PRUNE_NOTIFIED"), False)

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), False)
        matrix_enabled = _env_bool(_k("MATRIX_ENABLED"), False)

        matrix_homeserver = _env(_k("MATRIX_HOMESERVER")).strip()
        matrix_user_id = _env(_k("MATRIX_USER_ID")).strip()
        matrix_password = _env(_k("MATRIX_PASSWORD")).strip()
        matrix_rooms = _env_list(_k("MATRIX_ROOMS"), [])
        matrix_store_path = _env_path(_k("MATRIX_STORE_PATH"), data_dir / "matrix_store")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            schedule_path=schedule_path,
            poll_interval_seconds=poll_interval_seconds,
            window_seconds=window_seconds,
            allday_time=allday_time,
            prune_notified=prune_notified,
            console_enabled=console_enabled,
            matrix_enabled=matrix_enabled,
            matrix_homeserver=matrix_homeserver,
            matrix_user_id=matrix_user_id,
            matrix_password=matrix_password,
            matrix_rooms=matrix_rooms,
            matrix_store_path=matrix_store_path,
        )


_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings, built from the environment on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS

# tests/conftest.py

from __future__ import annotations

import logging
from datetime import time
from pathlib import Path
from types import SimpleNamespace

import pytest

from mbot.tasks.notified_store import NotificationTracker

from .fakes import FakeDocumentProvider, FakeSink

SAMPLE_SCHEDULE = """\
# Schedule

- [ ] 2024-05-01 14:30 : Renew badge
- [x] 2024-05-01 10:00 : Send weekly report
- [ ] 2024-05-01 : Water plants
Some random markdown heading
- [ ] not-a-date : desc
"""


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="mbot-test",
        log_level="INFO",
        data_dir=tmp_path / "data",
        schedule_path=str(tmp_path / "schedule.md"),
        poll_interval_seconds=60.0,
        window_seconds=60.0,
        allday_time=time(9, 0),
        prune_notified=False,
        console_enabled=False,
        matrix_enabled=False,
        matrix_homeserver="",
        matrix_user_id="",
        matrix_password="",
        matrix_rooms=[],
        matrix_store_path=tmp_path / "data" / "matrix_store",
    )


@pytest.fixture()
def schedule_file(settings: SimpleNamespace) -> Path:
    path = Path(settings.schedule_path)
    path.write_text(SAMPLE_SCHEDULE, "utf-8")
    return path


@pytest.fixture()
def documents() -> FakeDocumentProvider:
    return FakeDocumentProvider(SAMPLE_SCHEDULE)


@pytest.fixture()
def tracker() -> NotificationTracker:
    return NotificationTracker()


@pytest.fixture()
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture()
def restore_root_logging():
    """setup_logging() replaces root handlers; put the originals back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in handlers:
            h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)

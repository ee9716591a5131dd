# tests/test_cli.py

from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from mbot.cli.bootstrap import close_sinks, connect_optional_sinks, create_initial_state
from mbot.cli.main import main
from mbot.connectors.log_notifier import ConsoleNotificationSink, LogNotificationSink

pytestmark = pytest.mark.usefixtures("restore_root_logging")


def test_list_prints_parsed_tasks(settings: SimpleNamespace, schedule_file: Path, capsys) -> None:
    assert main(["--list"], settings=settings) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == [
        "- [ ] 2024-05-01 14:30 : Renew badge",
        "- [x] 2024-05-01 10:00 : Send weekly report",
        "- [ ] 2024-05-01 : Water plants",
    ]
    assert (settings.data_dir / "mbot.log").exists()


def test_schedule_flag_overrides_settings(settings: SimpleNamespace, tmp_path: Path, capsys) -> None:
    other = tmp_path / "other.md"
    other.write_text("- [ ] 2030-01-01 : Other\n", "utf-8")

    assert main(["--list", "--schedule", str(other)], settings=settings) == 0
    assert capsys.readouterr().out.strip() == "- [ ] 2030-01-01 : Other"


def test_missing_document_is_reported(settings: SimpleNamespace, capsys) -> None:
    assert main(["--once"], settings=settings) == 1
    assert "cannot read checklist" in capsys.readouterr().err


def test_once_runs_a_cycle(settings: SimpleNamespace, schedule_file: Path) -> None:
    # Sample tasks are in the past, so nothing fires, but the cycle succeeds.
    assert main(["--once"], settings=settings) == 0


def test_bootstrap_wires_local_sinks(settings: SimpleNamespace) -> None:
    settings.console_enabled = True
    state = create_initial_state(settings=settings)

    assert settings.data_dir.is_dir()
    assert [type(s) for s in state.sink.sinks] == [LogNotificationSink, ConsoleNotificationSink]
    assert len(state.tracker) == 0


@pytest.mark.asyncio
async def test_matrix_misconfiguration_keeps_local_sinks(settings: SimpleNamespace, caplog) -> None:
    settings.matrix_enabled = True
    state = create_initial_state(settings=settings)

    with caplog.at_level(logging.ERROR, logger="mbot"):
        await connect_optional_sinks(state)

    assert [type(s) for s in state.sink.sinks] == [LogNotificationSink]
    assert state.closers == []
    assert "Matrix" in caplog.text


@pytest.mark.asyncio
async def test_close_sinks_runs_closers(settings: SimpleNamespace) -> None:
    state = create_initial_state(settings=settings)
    closed: list[str] = []

    async def closer() -> None:
        closed.append("x")

    state.closers.append(closer)
    await close_sinks(state)

    assert closed == ["x"]
    assert state.closers == []

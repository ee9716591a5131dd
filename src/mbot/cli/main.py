# src/mbot/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- runs the periodic reminder scheduler until SIGINT/SIGTERM (default),
- runs a single cycle (--once),
- or prints the parsed checklist (--list).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from collections.abc import Sequence

from ..cli.bootstrap import close_sinks, connect_optional_sinks, create_initial_state
from ..config import get_settings
from ..core.state import AppState
from ..documents.file_provider import DocumentUnavailable
from ..logging_setup import setup_logging
from ..tasks.task_parser import parse_tasks
from ..tasks.task_scheduler import run_reminder_cycle, run_reminder_scheduler

logger = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="mbot", description="Checklist reminder engine.")
    parser.add_argument("--schedule", metavar="PATH", help="checklist document (default: MBOT_SCHEDULE_PATH)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="run a single reminder cycle and exit")
    mode.add_argument("--list", action="store_true", help="print the parsed tasks and exit")
    return parser.parse_args(argv)


def _report_unavailable(e: DocumentUnavailable) -> None:
    logger.error("Cannot read checklist %s: %s", e.location, e.reason)
    print(f"mbot: cannot read checklist {e.location}: {e.reason}", file=sys.stderr)


def _list_tasks(state: AppState, location: str) -> int:
    try:
        text = state.documents.read_text(location)
    except DocumentUnavailable as e:
        _report_unavailable(e)
        return 1

    for task in parse_tasks(text):
        print(task.to_line())
    return 0


def _cycle_options(state: AppState) -> dict:
    s = state.settings
    return {
        "window_seconds": s.window_seconds,
        "allday_at": s.allday_time,
        "prune": s.prune_notified,
    }


async def _run_once(state: AppState, location: str) -> int:
    await connect_optional_sinks(state)
    try:
        fired = await run_reminder_cycle(
            state.documents,
            state.tracker,
            state.sink,
            location=location,
            **_cycle_options(state),
        )
    except DocumentUnavailable as e:
        _report_unavailable(e)
        return 1
    finally:
        await close_sinks(state)

    logger.info("Single cycle done: %d reminder(s) sent.", len(fired))
    return 0


async def _run_forever(state: AppState, location: str) -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_event.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, _handle_signal, signum)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support signal handlers; Ctrl+C still cancels.
            logger.debug("Signal handler for %s not installed.", signum)

    await connect_optional_sinks(state)
    try:
        await run_reminder_scheduler(
            state.documents,
            state.tracker,
            state.sink,
            location=location,
            interval_seconds=state.settings.poll_interval_seconds,
            stop_event=stop_event,
            **_cycle_options(state),
        )
    finally:
        await close_sinks(state)


def main(argv: Sequence[str] | None = None, *, settings=None) -> int:
    args = _parse_args(argv)
    if settings is None:
        settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)
    logging.getLogger("nio").setLevel(max(console_level, logging.INFO))

    state = create_initial_state(settings=settings)
    location = args.schedule or settings.schedule_path

    if args.list:
        return _list_tasks(state, location)

    if args.once:
        return asyncio.run(_run_once(state, location))

    logger.info(
        "mbot scheduler started (schedule=%s, interval=%.0fs, window=%.0fs)",
        location,
        settings.poll_interval_seconds,
        settings.window_seconds,
    )
    try:
        asyncio.run(_run_forever(state, location))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

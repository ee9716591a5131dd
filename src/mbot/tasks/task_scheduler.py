# src/mbot/tasks/task_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A small polling loop that, on every tick:
- re-reads the checklist through an injected DocumentProvider,
- reparses it into Task objects,
- asks the evaluator which incomplete, not-yet-notified tasks are due,
- hands a ReminderEvent per due task to an injected NotificationSink,
- records the task identity in the NotificationTracker.

Transport concerns (log line, console, Matrix room) belong to the sink, not the scheduler.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, time, timedelta

from ..core.ports import DocumentProvider, NotificationSink, NotifiedRepo
from ..documents.file_provider import DocumentUnavailable
from .reminder_eval import DEFAULT_ALLDAY_AT, DEFAULT_WINDOW_SECONDS, is_due
from .task_models import ReminderEvent
from .task_parser import parse_tasks

logger = logging.getLogger(__name__)


async def run_reminder_cycle(
        documents: DocumentProvider,
        tracker: NotifiedRepo,
        sink: NotificationSink,
        *,
        location: str,
        now: datetime | None = None,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        allday_at: time = DEFAULT_ALLDAY_AT,
        prune: bool = False,
) -> list[ReminderEvent]:
    """
    One read-parse-evaluate-notify pass. Returns the events that were delivered.

    Raises DocumentUnavailable if the checklist cannot be read; nothing is marked then.

    The tracker guard is held for the whole scan. A task whose delivery fails stays
    unmarked and is retried on the next tick while its window is still open.
    """
    text = documents.read_text(location)
    tasks = parse_tasks(text)

    if now is None:
        now = datetime.now()

    fired: list[ReminderEvent] = []

    async with tracker.guard():
        if prune:
            # Anything dated before this day is past its window.
            tracker.prune_before((now - timedelta(seconds=window_seconds)).date())

        for task in tasks:
            if task.completed:
                continue

            key = task.identity_key()
            if tracker.is_notified(key):
                continue

            if not is_due(task, now, window_seconds=window_seconds, allday_at=allday_at):
                continue

            event = ReminderEvent.from_task(task, fired_at=now)
            try:
                await sink.notify(event)
            except Exception:
                logger.exception("Reminder delivery failed key=%r", key)
                continue

            tracker.mark_notified(key, task_date=task.date)
            fired.append(event)

    logger.debug("Cycle at %s: %d tasks parsed, %d reminders sent", now.isoformat(timespec="seconds"), len(tasks), len(fired))
    return fired


async def run_reminder_scheduler(
        documents: DocumentProvider,
        tracker: NotifiedRepo,
        sink: NotificationSink,
        *,
        location: str,
        interval_seconds: float = 60.0,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        allday_at: time = DEFAULT_ALLDAY_AT,
        prune: bool = False,
        stop_event: asyncio.Event | None = None,
        clock: Callable[[], datetime] = datetime.now,
) -> None:
    """
    Fixed-rate polling scheduler.

    The first tick runs immediately, then every interval_seconds. Ticks missed
    because a cycle ran long are skipped, not replayed in a burst.

    Stopping:
    - set stop_event: the in-flight cycle finishes, no further ticks are scheduled;
    - or cancel the coroutine/task.

    An unreadable document is reported at ERROR level and retried on the next tick.
    """
    sleep_s = max(0.01, float(interval_seconds))
    if sleep_s > window_seconds:
        logger.warning(
            "Poll interval %.1fs is longer than the reminder window %.1fs; some reminders may be missed",
            sleep_s,
            window_seconds,
        )

    loop = asyncio.get_running_loop()
    next_tick = loop.time()

    while stop_event is None or not stop_event.is_set():
        try:
            await run_reminder_cycle(
                documents,
                tracker,
                sink,
                location=location,
                now=clock(),
                window_seconds=window_seconds,
                allday_at=allday_at,
                prune=prune,
            )
        except DocumentUnavailable as e:
            logger.error("Cannot read checklist %s: %s (will retry next tick)", e.location, e.reason)
        except Exception:
            logger.exception("Reminder cycle failed")

        next_tick += sleep_s
        behind = loop.time() - next_tick
        if behind > 0:
            skipped = int(behind // sleep_s) + 1
            logger.warning("Reminder cycle overran; skipping %d tick(s)", skipped)
            next_tick += skipped * sleep_s

        delay = max(0.0, next_tick - loop.time())
        if stop_event is None:
            await asyncio.sleep(delay)
            continue

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    logger.info("Reminder scheduler stopped.")

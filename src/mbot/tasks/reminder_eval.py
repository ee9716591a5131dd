# src/mbot/tasks/reminder_eval.py

from __future__ import annotations

"""
Due-ness check for a single task.

A task fires inside a forward-looking acceptance window that opens at its
trigger instant:
- timed task:   trigger = date + time
- all-day task: trigger = date + allday_at (09:00 by default)

The window must be at least as wide as the polling interval, otherwise a tick can
jump over it and the reminder is lost.
"""

from datetime import datetime, time

from .task_models import Task

DEFAULT_WINDOW_SECONDS = 60.0
DEFAULT_ALLDAY_AT = time(9, 0)


def trigger_at(task: Task, *, allday_at: time = DEFAULT_ALLDAY_AT) -> datetime:
    """Instant the task is evaluated against."""
    scheduled = task.datetime()
    if scheduled is not None:
        return scheduled
    return datetime.combine(task.date, allday_at)


def is_due(
        task: Task,
        now: datetime,
        *,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        allday_at: time = DEFAULT_ALLDAY_AT,
) -> bool:
    """
    True iff `now` lies in [trigger, trigger + window).

    Completed tasks are never due. For all-day tasks the date must also be today,
    which the window already implies as long as it stays shorter than a day.
    """
    if task.completed:
        return False

    if task.is_allday and task.date != now.date():
        return False

    elapsed = (now - trigger_at(task, allday_at=allday_at)).total_seconds()
    return 0 <= elapsed < window_seconds

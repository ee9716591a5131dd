# src/mbot/connectors/log_notifier.py

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from ..core.ports import NotificationSink
from ..tasks.task_models import ReminderEvent

logger = logging.getLogger(__name__)

REMINDER_LOGGER = "mbot.reminder"


class LogNotificationSink:
    """Default sink: one INFO record per reminder on the 'mbot.reminder' logger."""

    def __init__(self, logger_name: str = REMINDER_LOGGER) -> None:
        self._log = logging.getLogger(logger_name)

    async def notify(self, event: ReminderEvent) -> None:
        self._log.info(
            "REMINDER: %s | Scheduled: %s",
            event.description,
            event.scheduled_label,
        )


class ConsoleNotificationSink:
    """Prints reminders to stdout, prefixed with the local firing time."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def notify(self, event: ReminderEvent) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        ts = event.fired_at.strftime("%Y-%m-%d %H:%M:%S")
        print(f"[{ts}] {event.to_text()}", file=stream, flush=True)


class FanoutNotificationSink:
    """
    Delivers to every child sink.

    A failing child is logged and does not stop the others. The event only counts as
    undelivered (exception re-raised) if every child failed.
    """

    def __init__(self, sinks: Sequence[NotificationSink]) -> None:
        self.sinks = list(sinks)

    async def notify(self, event: ReminderEvent) -> None:
        if not self.sinks:
            return

        errors: list[Exception] = []
        for sink in self.sinks:
            try:
                await sink.notify(event)
            except Exception as e:
                logger.exception("Sink %s failed for %r", type(sink).__name__, event.key)
                errors.append(e)

        if len(errors) == len(self.sinks):
            raise errors[0]

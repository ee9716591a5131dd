# src/mbot/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

ALLDAY_MARKER = "allday"
ALLDAY_LABEL = "all-day"


def format_clock(value: time) -> str:
    return value.strftime("%H:%M")


@dataclass(slots=True, frozen=True)
class Task:
    """
    One checklist entry.

    Tasks are rebuilt from the document on every polling cycle and never mutated.
    `time is None` means an all-day task.
    """

    completed: bool
    date: date
    time: time | None
    description: str

    @property
    def status_marker(self) -> str:
        return "[x]" if self.completed else "[ ]"

    @property
    def is_allday(self) -> bool:
        return self.time is None

    def datetime(self) -> datetime | None:
        """Scheduled instant, or None for all-day tasks."""
        if self.time is None:
            return None
        return datetime.combine(self.date, self.time)

    def identity_key(self) -> str:
        """
        Deduplication key built from (date, time-or-allday, description).

        Completion state and list position are not part of the key, so a task that is
        ticked off after its reminder fired keeps the same identity.
        """
        slot = format_clock(self.time) if self.time is not None else ALLDAY_MARKER
        return f"{self.date.isoformat()}-{slot}-{self.description}"

    def to_line(self) -> str:
        """Render back into a checklist line the parser accepts."""
        return f"- {self}"

    def __str__(self) -> str:
        if self.time is None:
            return f"{self.status_marker} {self.date.isoformat()} : {self.description}"
        return f"{self.status_marker} {self.date.isoformat()} {format_clock(self.time)} : {self.description}"


@dataclass(slots=True, frozen=True)
class ReminderEvent:
    """What the engine hands to a notification sink when a task becomes due."""

    key: str
    description: str
    date: date
    time: time | None
    fired_at: datetime

    @classmethod
    def from_task(cls, task: Task, fired_at: datetime) -> ReminderEvent:
        return cls(
            key=task.identity_key(),
            description=task.description,
            date=task.date,
            time=task.time,
            fired_at=fired_at,
        )

    @property
    def scheduled_label(self) -> str:
        slot = format_clock(self.time) if self.time is not None else ALLDAY_LABEL
        return f"{self.date.isoformat()} {slot}"

    def to_text(self) -> str:
        return f"REMINDER: {self.description} | Scheduled: {self.scheduled_label}"

# src/mbot/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder core.

The core depends on Protocols instead of concrete implementations.
This keeps the document source and notification transports swappable and makes
testing easier (see tests/fakes.py).
"""

from datetime import date
from typing import TYPE_CHECKING, AsyncContextManager, Awaitable, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import ReminderEvent


class DocumentProvider(Protocol):
    """
    Reads the checklist document.

    Must raise DocumentUnavailable (mbot.documents.file_provider) when the text
    cannot be produced; an empty string means "empty document", not "failure".
    """

    def read_text(self, location: str) -> str: ...


class NotificationSink(Protocol):
    """
    Where reminders go (log record, console line, chat message...).

    Raising means "not delivered": the engine leaves the task unmarked so the
    next tick inside the window retries it.
    """

    def notify(self, event: ReminderEvent) -> Awaitable[None]: ...


class NotifiedRepo(Protocol):
    def guard(self) -> AsyncContextManager[None]: ...
    def is_notified(self, key: str) -> bool: ...
    def mark_notified(self, key: str, *, task_date: date | None = None) -> None: ...
    def prune_before(self, day: date) -> int: ...

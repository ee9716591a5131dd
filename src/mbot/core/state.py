# src/mbot/core/state.py

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from ..connectors.log_notifier import FanoutNotificationSink
from ..tasks.notified_store import NotificationTracker
from .ports import DocumentProvider


@dataclass
class AppState:
    # Settings object (mbot.config.Settings or a test stand-in with the same attributes).
    settings: Any

    documents: DocumentProvider
    tracker: NotificationTracker
    sink: FanoutNotificationSink

    # Async cleanups for connectors opened at runtime (Matrix client...).
    closers: list[Callable[[], Awaitable[None]]] = field(default_factory=list)

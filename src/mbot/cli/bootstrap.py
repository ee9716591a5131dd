# src/mbot/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the document provider, notification tracker and sinks into AppState,
- opens/closes network sinks (Matrix) inside the running event loop.
"""

from __future__ import annotations

import contextlib
import logging

from ..config import get_settings
from ..connectors.log_notifier import ConsoleNotificationSink, FanoutNotificationSink, LogNotificationSink
from ..core.ports import NotificationSink
from ..core.state import AppState
from ..documents.file_provider import FileDocumentProvider
from ..tasks.notified_store import NotificationTracker

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Only local sinks are attached here; see connect_optional_sinks for Matrix.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    sinks: list[NotificationSink] = [LogNotificationSink()]
    if getattr(settings, "console_enabled", False):
        sinks.append(ConsoleNotificationSink())

    return AppState(
        settings=settings,
        documents=FileDocumentProvider(),
        tracker=NotificationTracker(),
        sink=FanoutNotificationSink(sinks),
    )


async def connect_optional_sinks(state: AppState) -> None:
    """Attach sinks that need a live event loop. Failures leave the local sinks working."""
    if not getattr(state.settings, "matrix_enabled", False):
        return

    from ..connectors.matrix_notifier import MatrixNotificationSink

    try:
        matrix = await MatrixNotificationSink.connect(state.settings)
    except Exception:
        logger.exception("Matrix sink failed to start; continuing without it.")
        return

    if matrix is None:
        logger.error("Matrix is enabled but not usable; continuing without it.")
        return

    state.sink.sinks.append(matrix)
    state.closers.append(matrix.close)
    logger.info("Matrix sink attached (rooms=%s).", matrix.rooms or "first joined room")


async def close_sinks(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    while state.closers:
        closer = state.closers.pop()
        with contextlib.suppress(Exception):
            await closer()

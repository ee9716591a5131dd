# src/mbot/tasks/notified_store.py

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from datetime import date

logger = logging.getLogger(__name__)


class NotificationTracker:
    """
    In-memory set of identity keys that already produced a reminder.

    The only state that survives between polling cycles. It lives for the process
    lifetime and is never written to disk.

    Concurrency:
    - is_notified / mark_notified are plain sync calls and do not lock by themselves.
    - A polling cycle wraps its whole read-decide-write scan in `async with guard()`,
      so two overlapping cycles can never both see a key as "not yet notified".
    """

    def __init__(self) -> None:
        self._keys: dict[str, date | None] = {}
        self._lock = asyncio.Lock()

    @contextlib.asynccontextmanager
    async def guard(self) -> AsyncIterator[None]:
        async with self._lock:
            yield

    def is_notified(self, key: str) -> bool:
        return key in self._keys

    def mark_notified(self, key: str, *, task_date: date | None = None) -> None:
        # setdefault keeps the first recorded date on repeated inserts.
        self._keys.setdefault(key, task_date)

    def prune_before(self, day: date) -> int:
        """
        Forget keys whose task date is strictly before `day`.

        The caller picks `day` so that tasks dated before it can no longer be due
        (see run_reminder_cycle); dropping them only bounds memory. Keys stored
        without a date are kept.
        """
        stale = [k for k, d in self._keys.items() if d is not None and d < day]
        for k in stale:
            del self._keys[k]
        if stale:
            logger.debug("Pruned %d notified keys older than %s", len(stale), day.isoformat())
        return len(stale)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

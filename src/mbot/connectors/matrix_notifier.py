# src/mbot/connectors/matrix_notifier.py

from __future__ import annotations

import logging
from collections.abc import Sequence

from nio import AsyncClient, RoomSendResponse

from ..tasks.task_models import ReminderEvent
from .matrix_client import create_matrix_client

logger = logging.getLogger(__name__)


def _room_allowlist(settings_rooms: Sequence[str]) -> list[str]:
    seen: list[str] = []
    for r in settings_rooms or []:
        r = str(r).strip()
        if r and r not in seen:
            seen.append(r)
    return seen


async def send_text(client: AsyncClient, *, room_id: str, text: str) -> None:
    resp = await client.room_send(
        room_id=room_id,
        message_type="m.room.message",
        content={"msgtype": "m.text", "body": text},
        ignore_unverified_devices=True,
    )
    if not isinstance(resp, RoomSendResponse):
        raise RuntimeError(f"Matrix room_send to {room_id} failed: {resp!r}")


class MatrixNotificationSink:
    """
    Pushes reminders as plain text messages to Matrix rooms.

    Rooms come from MBOT_MATRIX_ROOMS; if that list is empty, the first joined room
    (known after the initial sync) is used. Raises if nothing could be delivered, so
    the engine retries on the next tick.
    """

    def __init__(self, client: AsyncClient, rooms: Sequence[str] = ()) -> None:
        self.client = client
        self.rooms = _room_allowlist(rooms)

    @classmethod
    async def connect(cls, settings) -> MatrixNotificationSink | None:
        client = await create_matrix_client(settings)
        if client is None:
            return None

        logger.info("Matrix initial sync...")
        await client.sync(timeout=30000, full_state=True)
        logger.info("Matrix initial sync done. Joined rooms: %d", len(client.rooms))

        return cls(client, getattr(settings, "matrix_rooms", []) or [])

    def target_rooms(self) -> list[str]:
        if self.rooms:
            return list(self.rooms)
        if self.client.rooms:
            return [next(iter(self.client.rooms.keys()))]
        return []

    async def notify(self, event: ReminderEvent) -> None:
        rooms = self.target_rooms()
        if not rooms:
            raise RuntimeError("No Matrix room to deliver reminders to")

        text = event.to_text()
        delivered = 0
        for room_id in rooms:
            try:
                await send_text(self.client, room_id=room_id, text=text)
                delivered += 1
                logger.info("Reminder %r sent to room %s.", event.key, room_id)
            except Exception:
                logger.exception("Failed to send reminder %r to room %s.", event.key, room_id)

        if not delivered:
            raise RuntimeError(f"Reminder {event.key!r} was not delivered to any Matrix room")

    async def close(self) -> None:
        await self.client.close()

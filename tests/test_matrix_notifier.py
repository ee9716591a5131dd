# tests/test_matrix_notifier.py

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import pytest
from nio import RoomSendError, RoomSendResponse

from mbot.connectors.matrix_client import load_session, save_session, session_path
from mbot.connectors.matrix_notifier import MatrixNotificationSink
from mbot.tasks.task_models import ReminderEvent

EVENT = ReminderEvent(
    key="2024-05-01-allday-Water plants",
    description="Water plants",
    date=date(2024, 5, 1),
    time=None,
    fired_at=datetime(2024, 5, 1, 9, 0, 0),
)


class FakeMatrixClient:
    """Just enough of nio.AsyncClient for the sink: rooms + room_send + close."""

    def __init__(self, rooms=(), failing_rooms=()) -> None:
        self.rooms = {r: object() for r in rooms}
        self.failing_rooms = set(failing_rooms)
        self.sent: list[tuple[str, dict]] = []
        self.closed = False

    async def room_send(self, *, room_id, message_type, content, ignore_unverified_devices=False):
        assert message_type == "m.room.message"
        if room_id in self.failing_rooms:
            return RoomSendError("forbidden")
        self.sent.append((room_id, content))
        return RoomSendResponse("$event", room_id)

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_sends_to_configured_rooms() -> None:
    client = FakeMatrixClient()
    sink = MatrixNotificationSink(client, ["!a:hs", " !b:hs ", "!a:hs"])

    await sink.notify(EVENT)

    assert [room for room, _ in client.sent] == ["!a:hs", "!b:hs"]
    assert client.sent[0][1] == {
        "msgtype": "m.text",
        "body": "REMINDER: Water plants | Scheduled: 2024-05-01 all-day",
    }


@pytest.mark.asyncio
async def test_falls_back_to_first_joined_room() -> None:
    client = FakeMatrixClient(rooms=["!joined:hs", "!other:hs"])
    await MatrixNotificationSink(client).notify(EVENT)
    assert [room for room, _ in client.sent] == ["!joined:hs"]


@pytest.mark.asyncio
async def test_no_room_is_a_delivery_failure() -> None:
    with pytest.raises(RuntimeError):
        await MatrixNotificationSink(FakeMatrixClient()).notify(EVENT)


@pytest.mark.asyncio
async def test_partial_room_failure_still_counts_as_delivered() -> None:
    client = FakeMatrixClient(failing_rooms=["!bad:hs"])
    await MatrixNotificationSink(client, ["!bad:hs", "!good:hs"]).notify(EVENT)
    assert [room for room, _ in client.sent] == ["!good:hs"]


@pytest.mark.asyncio
async def test_all_rooms_failing_raises() -> None:
    client = FakeMatrixClient(failing_rooms=["!bad:hs"])
    with pytest.raises(RuntimeError):
        await MatrixNotificationSink(client, ["!bad:hs"]).notify(EVENT)


@pytest.mark.asyncio
async def test_close_closes_client() -> None:
    client = FakeMatrixClient()
    await MatrixNotificationSink(client).close()
    assert client.closed


def test_session_file_roundtrip(tmp_path: Path) -> None:
    path = session_path(tmp_path / "store")
    save_session(path, {"access_token": "tok", "user_id": "@mbot:hs", "device_id": "DEV"})
    assert load_session(path) == {"access_token": "tok", "user_id": "@mbot:hs", "device_id": "DEV"}


def test_incomplete_session_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text('{"access_token": "tok"}', "utf-8")
    with pytest.raises(ValueError):
        load_session(path)

import json

import pytest
from starlette.websockets import WebSocketState

from mindreader import session_manager
from mindreader.event_streamer import TranscriptEvent
from mindreader.models import Role
from mindreader.session_service import SessionService


class FakeSocket:
    def __init__(self, connected: bool = True, broken: bool = False):
        self.client_state = WebSocketState.CONNECTED if connected else WebSocketState.DISCONNECTED
        self.broken = broken
        self.messages = []

    async def send_text(self, text: str) -> None:
        if self.broken:
            raise RuntimeError("socket gone")
        self.messages.append(json.loads(text))


@pytest.fixture
def registry() -> SessionService:
    return SessionService()


@pytest.mark.asyncio
async def test_ready_sent_to_both_once_paired(registry):
    performer, observer = FakeSocket(), FakeSocket()
    registry.join("s", Role.PERFORMER, performer)
    assert not await registry.announce_ready("s")

    registry.join("s", Role.OBSERVER, observer)
    assert await registry.announce_ready("s")
    assert performer.messages == [{"type": "ready"}]
    assert observer.messages == [{"type": "ready"}]


@pytest.mark.asyncio
async def test_send_skips_closed_and_broken_sockets(registry):
    registry.join("s", Role.PERFORMER, FakeSocket(connected=False))
    registry.join("s", Role.OBSERVER, FakeSocket(broken=True))

    assert not await registry.send("s", Role.PERFORMER, TranscriptEvent(text="x"))
    assert not await registry.send("s", Role.OBSERVER, TranscriptEvent(text="x"))
    assert not await registry.send("missing", Role.OBSERVER, TranscriptEvent(text="x"))


def test_rejoin_overwrites_slot_and_stale_close_keeps_it(registry):
    old, new = FakeSocket(), FakeSocket()
    registry.join("s", Role.OBSERVER, old)
    registry.join("s", Role.OBSERVER, new)

    assert not registry.leave("s", Role.OBSERVER, old)
    assert registry.get("s").connections[Role.OBSERVER] is new


def test_session_destroyed_with_its_buffer_when_empty(registry):
    performer, observer = FakeSocket(), FakeSocket()
    registry.join("s", Role.PERFORMER, performer)
    registry.join("s", Role.OBSERVER, observer)
    session_manager.get_buffer("s")

    assert not registry.leave("s", Role.PERFORMER, performer)
    assert registry.leave("s", Role.OBSERVER, observer)
    assert registry.get("s") is None
    assert session_manager.find_buffer("s") is None


def test_topic_cache(registry):
    registry.set_topic("nobody", "ignored")
    assert registry.get_topic("nobody") is None

    registry.join("s", Role.PERFORMER, FakeSocket())
    registry.set_topic("s", "cats")
    assert registry.get_topic("s") == "cats"
    registry.clear_topic("s")
    assert registry.get_topic("s") is None

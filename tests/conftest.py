"""Shared fixtures: an in-memory chat session."""

import pytest

from stickerbot.session.base import Session


class FakeSession(Session):
    """Records sends and replays a fixed media payload."""

    def __init__(self, media: bytes = b"", chunk_size: int = 1024):
        self.listeners: dict[str, list] = {}
        self.sent: list[tuple] = []
        self.fetches: list[tuple] = []
        self.media = media
        self.chunk_size = chunk_size
        self.closed = False

    def on(self, event, listener):
        self.listeners.setdefault(event, []).append(listener)

    async def emit(self, event, payload):
        for listener in self.listeners.get(event, []):
            await listener(payload)

    async def send_text(self, jid, text, *, quoted=None):
        self.sent.append(("text", jid, text, quoted))

    async def send_sticker(self, jid, data, *, quoted=None):
        self.sent.append(("sticker", jid, data, quoted))

    async def fetch_media_stream(self, descriptor, kind):
        self.fetches.append((descriptor, kind))
        for i in range(0, len(self.media), self.chunk_size):
            yield self.media[i:i + self.chunk_size]

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_session_cls():
    return FakeSession


@pytest.fixture
def session():
    return FakeSession()

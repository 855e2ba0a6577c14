"""Chat session interface and connection lifecycle."""

from stickerbot.session.base import (
    ConnectionState,
    DisconnectReason,
    Session,
    SessionFactory,
    SessionOptions,
)

__all__ = [
    "ConnectionState",
    "DisconnectReason",
    "Session",
    "SessionFactory",
    "SessionOptions",
]

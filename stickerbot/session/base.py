"""Abstract chat session interface and shared types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, AsyncIterator, Awaitable, Callable

from stickerbot.bus.events import InboundEvent, MediaDescriptor

Listener = Callable[[Any], Awaitable[None]]

# Event names emitted by a Session
CREDENTIALS_UPDATED = "credentials_updated"
CONNECTION_UPDATE = "connection_update"
MESSAGES_RECEIVED = "messages_received"


class DisconnectReason(IntEnum):
    """Close codes reported with a ``close`` connection update."""
    CONNECTION_CLOSED = 428
    CONNECTION_LOST = 408
    CONNECTION_REPLACED = 440
    TIMED_OUT = 408
    LOGGED_OUT = 401
    BAD_SESSION = 500
    RESTART_REQUIRED = 515
    MULTIDEVICE_MISMATCH = 411
    FORBIDDEN = 403
    UNAVAILABLE_SERVICE = 503


class ConnectionState(Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED_RETRYABLE = "closed_retryable"
    CLOSED_TERMINAL = "closed_terminal"


@dataclass
class SessionOptions:
    """Options handed to the session factory."""
    browser: tuple[str, str, str] = ("WhatsApp Bot", "Windows", "20")


class Session(ABC):
    """A connected chat-protocol session.

    Implementations emit ``credentials_updated`` (credential dict),
    ``connection_update`` (:class:`ConnectionUpdate`) and
    ``messages_received`` (:class:`MessagesBatch`) to registered listeners.
    """

    @abstractmethod
    def on(self, event: str, listener: Listener) -> None:
        """Register an async listener for a session event."""

    @abstractmethod
    async def send_text(self, jid: str, text: str, *, quoted: InboundEvent | None = None) -> None:
        """Send a text message, optionally quoting an inbound event."""

    @abstractmethod
    async def send_sticker(self, jid: str, data: bytes, *, quoted: InboundEvent | None = None) -> None:
        """Send a WebP sticker, optionally quoting an inbound event."""

    @abstractmethod
    def fetch_media_stream(self, descriptor: MediaDescriptor, kind: str) -> AsyncIterator[bytes]:
        """Stream the decrypted bytes of a media attachment."""

    async def close(self) -> None:
        """Close the underlying connection. Default is a no-op."""


SessionFactory = Callable[[dict[str, Any] | None, SessionOptions], Awaitable[Session]]
# Takes stored credentials (None on first login), returns a connecting Session

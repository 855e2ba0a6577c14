"""Event types delivered by the chat session."""

from dataclasses import dataclass, field
from typing import Any

STATUS_BROADCAST_JID = "status@broadcast"


@dataclass(frozen=True)
class InboundEvent:
    """One raw message notification from the session."""

    remote_jid: str  # Conversation identifier
    message_id: str
    from_self: bool = False
    envelope: dict[str, Any] | None = None  # None when delivered without content
    batch_kind: str = "notify"  # "append" | "replace" | "notify"
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_raw(cls, raw: dict[str, Any], batch_kind: str = "notify") -> "InboundEvent":
        """Build an event from a protocol message-info dict (``{"key": ..., "message": ...}``)."""
        key = raw.get("key") or {}
        return cls(
            remote_jid=key.get("remoteJid") or "unknown",
            message_id=key.get("id") or "noid",
            from_self=bool(key.get("fromMe")),
            envelope=raw.get("message") or None,
            batch_kind=batch_kind,
            raw=raw,
        )

    @property
    def pending_key(self) -> str:
        """Key identifying this event while it waits for its content."""
        return f"{self.remote_jid}|{self.message_id}"

    @property
    def is_status_broadcast(self) -> bool:
        return self.remote_jid == STATUS_BROADCAST_JID


@dataclass
class MessagesBatch:
    """One ``messages_received`` delivery."""

    batch_kind: str
    events: list[InboundEvent] = field(default_factory=list)

    @classmethod
    def from_raw(cls, upsert: dict[str, Any]) -> "MessagesBatch":
        batch_kind = upsert.get("type") or "unknown"
        messages = upsert.get("messages")
        if messages is None:
            messages = [upsert]
        return cls(
            batch_kind=batch_kind,
            events=[InboundEvent.from_raw(m, batch_kind) for m in messages],
        )


@dataclass
class ConnectionUpdate:
    """A connection state change reported by the session."""

    connection: str | None = None  # "connecting" | "open" | "close"
    qr: str | None = None  # Login challenge to render
    close_code: int | None = None
    close_error: BaseException | str | None = None

    @classmethod
    def from_raw(cls, update: dict[str, Any]) -> "ConnectionUpdate":
        """Build from a protocol update (``{"connection", "qr", "lastDisconnect": {"error"}}``)."""
        error = (update.get("lastDisconnect") or {}).get("error")
        code = update.get("closeCode")
        if code is None and isinstance(error, dict):
            code = (error.get("output") or {}).get("statusCode")
        elif code is None and error is not None:
            code = getattr(error, "status_code", None)
        return cls(
            connection=update.get("connection"),
            qr=update.get("qr"),
            close_code=code,
            close_error=error if not isinstance(error, dict) else error.get("message"),
        )


@dataclass(frozen=True)
class MediaDescriptor:
    """Reference to a downloadable media attachment."""

    ref: dict[str, Any]  # Opaque sub-message handed back to the session for download
    media_kind: str  # "image" | "video"
    mimetype: str = ""
    gif_playback: bool = False

    @property
    def is_gif(self) -> bool:
        return self.mimetype == "image/gif" or (self.media_kind == "video" and self.gif_playback)

    @property
    def is_animated(self) -> bool:
        """GIFs and every video go through the animated sticker path."""
        return self.media_kind == "video" or self.mimetype == "image/gif"

    @property
    def extension(self) -> str:
        return "mp4" if self.media_kind == "video" else "gif"

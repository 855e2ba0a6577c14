"""Payload unwrapping: peel ephemeral and view-once layers off an envelope."""

from dataclasses import dataclass, field
from typing import Any

from stickerbot.bus.events import MediaDescriptor

# Keys that never identify the content of a message
_IGNORED_CONTENT_KEYS = ("senderKeyDistributionMessage", "messageContextInfo")


@dataclass(frozen=True)
class WrapperLayer:
    """A wrapper whose payload lives at ``message[field]["message"]``."""
    kind: str  # "ephemeral" | "view_once"
    field: str


# Peeled in order. The content type is read just before the first view-once layer.
WRAPPER_LAYERS: tuple[WrapperLayer, ...] = (
    WrapperLayer("ephemeral", "ephemeralMessage"),
    WrapperLayer("view_once", "viewOnceMessage"),
)


@dataclass
class UnwrappedMessage:
    """An envelope with its wrapper layers removed."""
    effective_message: dict[str, Any]
    content_type: str | None = None
    inner_content_type: str | None = None
    is_view_once: bool = False
    caption: str = ""
    text: str = ""
    image: dict[str, Any] | None = None
    video: dict[str, Any] | None = None
    outer: dict[str, Any] = field(default_factory=dict, repr=False)
    message: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def has_media(self) -> bool:
        return self.image is not None or self.video is not None

    @property
    def media(self) -> MediaDescriptor | None:
        """Descriptor of the stickerable attachment.

        A still image wins over a video, and a video wins over a GIF image.
        """
        image = None
        if self.image is not None:
            image = MediaDescriptor(
                ref=self.image,
                media_kind="image",
                mimetype=self.image.get("mimetype") or "",
            )
            if not image.is_gif:
                return image
        if self.video is not None:
            return MediaDescriptor(
                ref=self.video,
                media_kind="video",
                mimetype=self.video.get("mimetype") or "",
                gif_playback=bool(self.video.get("gifPlayback")),
            )
        return image


def get_content_type(message: dict[str, Any] | None) -> str | None:
    """Return the key naming the content of a message, as the protocol does."""
    if not message:
        return None
    for key in message:
        if key in _IGNORED_CONTENT_KEYS:
            continue
        if key == "conversation" or "Message" in key:
            return key
    return None


def peel(message: dict[str, Any], layer: WrapperLayer) -> dict[str, Any] | None:
    """Return the payload inside ``layer``, or None if the layer is absent."""
    wrapper = message.get(layer.field)
    if isinstance(wrapper, dict):
        inner = wrapper.get("message")
        if isinstance(inner, dict):
            return inner
    return None


def _peel_kind(message: dict[str, Any], kind: str) -> dict[str, Any] | None:
    for layer in WRAPPER_LAYERS:
        if layer.kind == kind:
            inner = peel(message, layer)
            if inner is not None:
                return inner
    return None


def _find_media(inner: dict[str, Any], key: str) -> dict[str, Any] | None:
    # Some envelopes keep the view-once layer below an already peeled message
    media = inner.get(key)
    if media is None:
        nested = _peel_kind(inner, "view_once")
        if nested is not None:
            media = nested.get(key)
    return media if isinstance(media, dict) else None


def _first_text(*values: Any) -> str:
    for value in values:
        if isinstance(value, str) and value:
            return value
    return ""


def unwrap(envelope: dict[str, Any]) -> UnwrappedMessage:
    """Peel wrapper layers off ``envelope``.

    ``message`` is the envelope minus any ephemeral layer, ``effective_message``
    is that minus any view-once layer. The content type is derived from
    ``message`` while text and media are read from ``effective_message``.
    When no wrapper is present all three are the envelope itself.
    """
    current = envelope
    message = envelope
    is_view_once = False
    for layer in WRAPPER_LAYERS:
        inner = peel(current, layer)
        if inner is None:
            continue
        if layer.kind == "view_once" and not is_view_once:
            message = current
            is_view_once = True
        current = inner
    if not is_view_once:
        message = current
    effective = current

    image = _find_media(effective, "imageMessage")
    video = _find_media(effective, "videoMessage")
    extended = effective.get("extendedTextMessage") or {}

    caption = _first_text(
        (image or {}).get("caption"),
        (video or {}).get("caption"),
        extended.get("text"),
    )
    text = _first_text(
        effective.get("conversation"),
        extended.get("text"),
        message.get("conversation"),
    )

    return UnwrappedMessage(
        effective_message=effective,
        content_type=get_content_type(message),
        inner_content_type=get_content_type(effective),
        is_view_once=is_view_once,
        caption=caption,
        text=text,
        image=image,
        video=video,
        outer=envelope,
        message=message,
    )

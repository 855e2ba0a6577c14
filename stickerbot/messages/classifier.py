"""Message classification: decide what, if anything, to do with an event."""

import re
from dataclasses import dataclass
from enum import Enum

from stickerbot.bus.events import InboundEvent, MediaDescriptor
from stickerbot.config.schema import KeywordsConfig, StickerConfig
from stickerbot.messages.unwrap import UnwrappedMessage


class ActionKind(str, Enum):
    ignore = "ignore"  # Own message or status broadcast
    confirmation = "confirmation"
    reply = "reply"
    diagnostic = "diagnostic"  # Sticker requested but no media found
    static_sticker = "static_sticker"
    animated_sticker = "animated_sticker"
    no_marker = "no_marker"  # Stickerable media without the request marker
    not_eligible = "not_eligible"


@dataclass
class DispatchAction:
    kind: ActionKind
    event: InboundEvent
    unwrapped: UnwrappedMessage | None = None
    reply_text: str | None = None
    media: MediaDescriptor | None = None
    dump: bool = False  # Log the envelope structure before acting


class Classifier:
    """Applies the reply and sticker rules to an unwrapped message.

    Rules are evaluated in order and the first match wins, so an event
    yields at most one outbound message.
    """

    def __init__(
        self,
        keywords: KeywordsConfig | None = None,
        sticker: StickerConfig | None = None,
    ):
        self.keywords = keywords or KeywordsConfig()
        self.sticker = sticker or StickerConfig()
        self._door = re.compile(self.keywords.door, re.IGNORECASE)
        self._confirm = re.compile(self.keywords.confirm, re.IGNORECASE)
        self._for = re.compile(self.keywords.for_, re.IGNORECASE)

    def has_marker(self, caption: str) -> bool:
        return bool(caption) and self.sticker.marker in caption

    def _keyword_action(self, event: InboundEvent, msg: UnwrappedMessage) -> DispatchAction | None:
        text = msg.text
        if not text or not self._door.search(text):
            return None

        if self._confirm.search(text) and self._for.search(text):
            reply = (
                self.keywords.confirmation_reply
                if self.keywords.confirmation_reply_enabled
                else None
            )
            return DispatchAction(ActionKind.confirmation, event, msg, reply_text=reply)

        return DispatchAction(ActionKind.reply, event, msg, reply_text=self.keywords.ack_reply)

    def classify(self, event: InboundEvent, msg: UnwrappedMessage) -> DispatchAction:
        if event.from_self or event.is_status_broadcast:
            return DispatchAction(ActionKind.ignore, event, msg)

        wants_sticker = self.has_marker(msg.caption)

        action = self._keyword_action(event, msg)
        if action is not None:
            action.dump = wants_sticker and not msg.has_media
            return action

        if wants_sticker and not msg.has_media:
            return DispatchAction(ActionKind.diagnostic, event, msg, dump=True)

        media = msg.media
        if media is None:
            return DispatchAction(ActionKind.not_eligible, event, msg)

        if not wants_sticker:
            return DispatchAction(ActionKind.no_marker, event, msg, media=media)

        kind = ActionKind.animated_sticker if media.is_animated else ActionKind.static_sticker
        return DispatchAction(kind, event, msg, media=media)

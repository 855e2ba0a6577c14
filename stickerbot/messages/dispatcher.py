"""Dispatch: carry out the side effect chosen by the classifier."""

from loguru import logger
from rich.pretty import pretty_repr

from stickerbot.media.fetcher import MediaFetcher
from stickerbot.media.sticker import AnimatedStickerEncoder, StaticStickerEncoder
from stickerbot.messages.classifier import ActionKind, DispatchAction
from stickerbot.session.base import Session

DUMP_MAX_DEPTH = 4
DUMP_MAX_LENGTH = 50


def dump_structure(action: DispatchAction) -> str:
    """Bounded structural dump of an envelope, for troubleshooting."""
    msg = action.unwrapped
    layers = {
        "outer": msg.outer if msg else action.event.envelope,
        "msg": msg.message if msg else None,
        "inner": msg.effective_message if msg else None,
    }
    return pretty_repr(layers, max_depth=DUMP_MAX_DEPTH, max_length=DUMP_MAX_LENGTH)


class Dispatcher:
    """Sends replies and stickers. At most one outbound message per action."""

    def __init__(
        self,
        session: Session | None = None,
        fetcher: MediaFetcher | None = None,
        static_encoder: StaticStickerEncoder | None = None,
        animated_encoder: AnimatedStickerEncoder | None = None,
    ):
        self.session = session
        self.fetcher = fetcher or MediaFetcher(session)
        self.static_encoder = static_encoder or StaticStickerEncoder()
        self.animated_encoder = animated_encoder or AnimatedStickerEncoder()

    def bind(self, session: Session) -> None:
        """Send through ``session`` from now on (after a reconnect)."""
        self.session = session
        self.fetcher.session = session

    async def dispatch(self, action: DispatchAction) -> bool:
        """Perform ``action``. Returns True if a message was sent.

        Fetch, encode and send errors propagate to the caller.
        """
        event = action.event
        jid = event.remote_jid
        msg = action.unwrapped

        if action.kind == ActionKind.ignore:
            return False
        if self.session is None:
            raise RuntimeError("Dispatcher is not bound to a session")

        if action.dump:
            logger.warning(
                "Received sticker marker but no image/video found, "
                "dumping message structure for diagnosis"
            )
            logger.warning(dump_structure(action))

        if action.kind == ActionKind.confirmation:
            logger.info(f"Confirmation message detected in {jid}: {msg.text}")
            if action.reply_text:
                await self.session.send_text(jid, action.reply_text, quoted=event)
                return True
            return False

        if action.kind == ActionKind.reply:
            logger.info(f"Keyword detected in {jid}: {msg.text}")
            await self.session.send_text(jid, action.reply_text, quoted=event)
            return True

        if action.kind == ActionKind.diagnostic:
            return False

        if action.kind == ActionKind.no_marker:
            logger.info(f"Caption without sticker marker: {msg.caption!r}")
            return False

        if action.kind == ActionKind.static_sticker:
            data = await self.fetcher.fetch(action.media, "image")
            webp = await self.static_encoder.encode(data, action.media)
            await self.session.send_sticker(jid, webp, quoted=event)
            logger.info(f"Sticker sent to {jid} (static image)")
            return True

        if action.kind == ActionKind.animated_sticker:
            if not self.animated_encoder.available:
                logger.warning("ffmpeg not found, skipping animated sticker. Install ffmpeg or set sticker.ffmpegPath")
                return False
            media = action.media
            source = "GIF" if media.is_gif else media.media_kind
            logger.info(f"Converting {source} to animated sticker")
            data = await self.fetcher.fetch(media, media.media_kind)
            webp = await self.animated_encoder.encode(data, media)
            await self.session.send_sticker(jid, webp, quoted=event)
            logger.info(f"Sticker sent to {jid} (animated)")
            return True

        logger.info("Message is not an acceptable image/video for a sticker")
        return False

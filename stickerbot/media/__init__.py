"""Media fetching and sticker encoding."""

from stickerbot.media.errors import StickerError
from stickerbot.media.sticker import AnimatedStickerEncoder, StaticStickerEncoder, StickerEncoder

__all__ = ["AnimatedStickerEncoder", "StaticStickerEncoder", "StickerEncoder", "StickerError"]

"""stickerbot - chat bot that turns captioned media into stickers."""

__version__ = "0.1.0"
__logo__ = "🖼️"

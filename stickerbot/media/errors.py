"""Media pipeline errors."""


class StickerError(Exception):
    """Sticker conversion failure with a short log-friendly message."""

    def __init__(self, short_message: str, detail: str = ""):
        self.short_message = short_message
        self.detail = detail
        super().__init__(detail or short_message)

"""Media download from the chat session."""

from loguru import logger

from stickerbot.bus.events import MediaDescriptor
from stickerbot.session.base import Session


class MediaFetcher:
    """Downloads attachment bytes through the session's media stream."""

    def __init__(self, session: Session | None = None):
        self.session = session

    async def fetch(self, descriptor: MediaDescriptor, kind: str | None = None) -> bytes:
        """Download the attachment described by ``descriptor``.

        Args:
            descriptor: The attachment to download.
            kind: Media kind tag passed to the session, defaults to the descriptor's.

        Returns:
            The complete media bytes.
        """
        kind = kind or descriptor.media_kind
        logger.info(f"Downloading {kind}...")

        chunks: list[bytes] = []
        async for chunk in self.session.fetch_media_stream(descriptor, kind):
            chunks.append(bytes(chunk))
        data = b"".join(chunks)

        logger.info(f"Download finished: {len(data)} bytes")
        return data

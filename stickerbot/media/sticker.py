"""Sticker encoders: static images in memory, animations through ffmpeg."""

import asyncio
import tempfile
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from loguru import logger

from stickerbot.bus.events import MediaDescriptor
from stickerbot.media.image import TRANSPARENT, PillowImageBackend
from stickerbot.media.video import FfmpegTranscoder, TranscodeOptions

STICKER_SIZE = 512


class StickerEncoder(ABC):
    """Turns raw media bytes into a square, transparently padded WebP sticker."""

    @abstractmethod
    async def encode(self, data: bytes, descriptor: MediaDescriptor | None = None) -> bytes:
        """Encode ``data``. Raises StickerError on failure."""


class StaticStickerEncoder(StickerEncoder):
    """Resize/pad to a square canvas and encode losslessly, all in memory."""

    def __init__(self, backend: PillowImageBackend | None = None, size: int = STICKER_SIZE):
        self.backend = backend or PillowImageBackend()
        self.size = size

    async def encode(self, data: bytes, descriptor: MediaDescriptor | None = None) -> bytes:
        return await asyncio.to_thread(
            self.backend.resize_and_encode,
            data,
            width=self.size,
            height=self.size,
            fit="contain",
            background=TRANSPARENT,
        )


class AnimatedStickerEncoder(StickerEncoder):
    """Transcode GIFs and videos to animated WebP via temporary files.

    Both temporary files are removed on every exit path.
    """

    def __init__(
        self,
        transcoder: FfmpegTranscoder | None = None,
        size: int = STICKER_SIZE,
        tmp_dir: Path | None = None,
    ):
        self.transcoder = transcoder or FfmpegTranscoder()
        self.size = size
        self.tmp_dir = Path(tmp_dir) if tmp_dir else None

    @property
    def available(self) -> bool:
        return self.transcoder.available

    def _temp_path(self, prefix: str, ext: str) -> Path:
        base = self.tmp_dir or Path(tempfile.gettempdir())
        return base / f"{prefix}-{uuid.uuid4().hex}.{ext}"

    async def encode(self, data: bytes, descriptor: MediaDescriptor | None = None) -> bytes:
        ext = descriptor.extension if descriptor else "mp4"
        input_path = self._temp_path("wa-input", ext)
        output_path = self._temp_path("wa-output", "webp")

        try:
            await asyncio.to_thread(input_path.write_bytes, data)
            logger.info("Converting to animated WebP via ffmpeg...")
            await self.transcoder.transcode(
                input_path, output_path, TranscodeOptions(size=self.size),
            )
            return await asyncio.to_thread(output_path.read_bytes)
        finally:
            _remove_quietly(input_path)
            _remove_quietly(output_path)


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to remove temp file {path}: {e}")

"""Video transcode backend: ffmpeg to animated WebP."""

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from stickerbot.media.errors import StickerError

_STDERR_TAIL = 500


@dataclass
class TranscodeOptions:
    size: int = 512
    lossless: bool = True
    loop: int = 0  # 0 = loop forever
    strip_audio: bool = True


class FfmpegTranscoder:
    """Runs ffmpeg as an async subprocess."""

    def __init__(self, ffmpeg_path: str | None = None):
        self.ffmpeg_path = ffmpeg_path or shutil.which("ffmpeg")

    @property
    def available(self) -> bool:
        if not self.ffmpeg_path:
            return False
        return Path(self.ffmpeg_path).is_file() or shutil.which(self.ffmpeg_path) is not None

    def build_args(
        self, input_path: str | Path, output_path: str | Path, options: TranscodeOptions,
    ) -> list[str]:
        """Command line (without the executable) for one transcode."""
        s = options.size
        video_filter = (
            f"scale={s}:{s}:force_original_aspect_ratio=decrease,"
            f"format=rgba,"
            f"pad={s}:{s}:-1:-1:color=#00000000"
        )
        args = [
            "-y",
            "-i", str(input_path),
            "-vcodec", "libwebp",
            "-vf", video_filter,
            "-lossless", "1" if options.lossless else "0",
            "-loop", str(options.loop),
            "-preset", "default",
        ]
        if options.strip_audio:
            args.append("-an")
        # Keep source frame timing, no duplication or dropping
        args += ["-vsync", "0", "-f", "webp", str(output_path)]
        return args

    async def transcode(
        self,
        input_path: str | Path,
        output_path: str | Path,
        options: TranscodeOptions | None = None,
    ) -> None:
        """Transcode ``input_path`` into an animated WebP at ``output_path``.

        Raises StickerError when ffmpeg is missing or exits non-zero.
        """
        if not self.ffmpeg_path:
            raise StickerError("ffmpeg not found", "No ffmpeg executable configured or on PATH")

        options = options or TranscodeOptions()
        args = self.build_args(input_path, output_path, options)
        logger.debug(f"Running ffmpeg {' '.join(args)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                self.ffmpeg_path, *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise StickerError("ffmpeg not found", str(e)) from e

        try:
            _, stderr = await proc.communicate()
        except asyncio.CancelledError:
            # Stop ffmpeg before the caller removes its output file
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
                await proc.wait()
            raise

        if proc.returncode != 0:
            tail = stderr.decode(errors="replace").strip()[-_STDERR_TAIL:]
            raise StickerError("transcode failed", f"ffmpeg exited with {proc.returncode}: {tail}")

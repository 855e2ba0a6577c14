"""Static image backend built on Pillow."""

import io

from PIL import Image, ImageOps, UnidentifiedImageError

from stickerbot.media.errors import StickerError

TRANSPARENT = (0, 0, 0, 0)


class PillowImageBackend:
    """Resize-and-encode primitive producing lossless WebP."""

    def resize_and_encode(
        self,
        data: bytes,
        *,
        width: int,
        height: int,
        fit: str = "contain",
        background: tuple[int, int, int, int] = TRANSPARENT,
    ) -> bytes:
        """Fit ``data`` into a ``width`` x ``height`` canvas and encode it as WebP.

        The aspect ratio is kept and the remaining area is filled with
        ``background``. ``"contain"`` is the only ``fit`` mode.
        """
        try:
            with Image.open(io.BytesIO(data)) as src:
                src.load()
                img = src.convert("RGBA")
        except (UnidentifiedImageError, OSError) as e:
            raise StickerError("unreadable image", str(e)) from e

        if fit != "contain":
            raise ValueError(f"Unsupported fit mode: {fit}")

        fitted = ImageOps.contain(img, (width, height), Image.Resampling.LANCZOS)
        canvas = Image.new("RGBA", (width, height), background)
        offset = ((width - fitted.width) // 2, (height - fitted.height) // 2)
        canvas.paste(fitted, offset)

        out = io.BytesIO()
        canvas.save(out, format="WEBP", lossless=True)
        return out.getvalue()

"""Terminal rendering of login QR challenges."""

import io
import sys
from typing import TextIO

import qrcode
from loguru import logger


class TerminalQRRenderer:
    """Prints a QR challenge as text so it can be scanned from the terminal."""

    def __init__(self, out: TextIO | None = None):
        self._out = out

    def render(self, challenge: str) -> None:
        qr = qrcode.QRCode(border=1)
        qr.add_data(challenge)
        qr.make(fit=True)

        buf = io.StringIO()
        qr.print_ascii(out=buf, invert=True)
        out = self._out or sys.stdout
        out.write(buf.getvalue())
        out.flush()
        logger.info("QR code generated. Scan it with WhatsApp to log in")

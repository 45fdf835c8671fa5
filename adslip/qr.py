"""QR symbol lookup over a whole slip image."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from PIL import Image

from .imaging import load_image

logger = logging.getLogger(__name__)


def _pyzbar_decode(image: Image.Image):
    # imported lazily: pyzbar needs the zbar shared library at import time
    from pyzbar.pyzbar import ZBarSymbol, decode

    return decode(image, symbols=[ZBarSymbol.QRCODE])


def _symbol_text(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


class QrDecoder:
    """Locate and decode the first QR symbol in an image.

    Finding no symbol is a normal outcome and returns ``None``.
    """

    def __init__(self, max_width: int = 1200, decode_fn: Optional[Callable] = None):
        self.max_width = max_width
        self.decode_fn = decode_fn or _pyzbar_decode

    def prepare(self, image: Image.Image) -> Image.Image:
        if image.width > self.max_width:
            height = max(1, round(image.height * self.max_width / image.width))
            image = image.resize((self.max_width, height), Image.Resampling.LANCZOS)
        return image

    def decode(self, source) -> Optional[str]:
        """``source`` is either raw file bytes or an image already decoded by load_image."""
        image = source if isinstance(source, Image.Image) else load_image(source)
        image = self.prepare(image)
        for symbol in self.decode_fn(image):
            text = _symbol_text(symbol.data).strip()
            if text:
                logger.info("QR payload found", extra={"qr_prefix": text[:40]})
                return text
        return None

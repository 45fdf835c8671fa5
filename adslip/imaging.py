"""Image preparation for QR decoding and OCR (Pillow)."""
from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from .errors import MalformedImage


@dataclass(frozen=True)
class Region:
    """Rectangle expressed as fractions (0-1) of the image width and height."""

    left: float
    top: float
    width: float
    height: float

    def __post_init__(self):
        for name in ("left", "top", "width", "height"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be within 0-1, got {value}")
        if self.width == 0 or self.height == 0:
            raise ValueError("region must have a non-zero area")

    def box(self, width: int, height: int) -> tuple[int, int, int, int]:
        # at least one pixel inside the image, even for left/top == 1
        left = min(round(width * self.left), width - 1)
        top = min(round(height * self.top), height - 1)
        right = max(left + 1, min(width, left + round(width * self.width)))
        bottom = max(top + 1, min(height, top + round(height * self.height)))
        return left, top, right, bottom


# Bank slips print the amount in the lower-left block; the QR code usually sits on the right.
PRIMARY_REGION = Region(left=0.0, top=0.55, width=0.78, height=0.40)
FALLBACK_REGION = Region(left=0.0, top=0.30, width=1.0, height=0.70)

UPSCALE = 1.2


def load_image(data: bytes) -> Image.Image:
    """Decode ``data`` into an upright RGB image or raise MalformedImage."""
    if not data:
        raise MalformedImage("empty image buffer")
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise MalformedImage(f"cannot decode image: {exc}") from exc
    image = ImageOps.exif_transpose(image)
    if image.width == 0 or image.height == 0:
        raise MalformedImage("image has zero width or height")
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    return image


def binarize(image: Image.Image, threshold: int) -> Image.Image:
    gray = ImageOps.grayscale(image)
    gray = ImageOps.autocontrast(gray)
    gray = gray.filter(ImageFilter.SHARPEN)
    return gray.point(lambda p: 255 if p > threshold else 0)


def crop_region(image: Image.Image, region: Region, threshold: int = 170) -> Image.Image:
    """Crop one region of a decoded image, upscale it, and binarize it for OCR."""
    target_width = max(1, round(image.width * UPSCALE))
    crop = image.crop(region.box(image.width, image.height))
    scale = target_width / crop.width
    crop = crop.resize((target_width, max(1, round(crop.height * scale))), Image.Resampling.LANCZOS)
    return binarize(crop, threshold)


def preprocess_regions(data: bytes, regions, threshold: int = 170) -> list[Image.Image]:
    """One binarized raster per region, in the order given."""
    image = load_image(data)
    return [crop_region(image, region, threshold) for region in regions]

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .errors import ImageDecodeFailure
from .fs_utils import read_bytes
from .models import PictureMetadata

logger = logging.getLogger(__name__)

# Bits per pixel for Pillow modes that aren't simply 8 bits per band.
MODE_DEPTHS = {
    "1": 1,
    "I": 32,
    "F": 32,
    "I;16": 16,
    "I;16B": 16,
    "I;16L": 16,
    "I;16N": 16,
}


def color_depth(img: Image.Image) -> int:
    depth = MODE_DEPTHS.get(img.mode)
    if depth is not None:
        return depth
    return 8 * len(img.getbands())


# Multi-picture JPEGs from cameras are still plain JPEG to a FLAC player.
MIME_OVERRIDES = {"MPO": "image/jpeg"}


def mime_for_format(fmt: Optional[str]) -> Optional[str]:
    if not fmt:
        return None
    return MIME_OVERRIDES.get(fmt) or Image.MIME.get(fmt)


def palette_size(img: Image.Image) -> int:
    if img.mode != "P":
        return 0
    palette = img.getpalette()
    if not palette:
        return 0
    return len(palette) // 3


def describe_image(data: bytes, *, source: Path) -> PictureMetadata:
    """Read dimensions, depth and MIME type from encoded image bytes."""
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = img.format
            mime = mime_for_format(fmt)
            if not mime:
                raise ImageDecodeFailure(source, f"unsupported image format {fmt!r}")
            width, height = img.size
            meta = PictureMetadata(
                mime_type=mime,
                width=width,
                height=height,
                color_depth=color_depth(img),
                colors_used=palette_size(img),
                image_data=data,
            )
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ) as exc:
        raise ImageDecodeFailure(source, str(exc)) from exc
    logger.debug(
        "Decoded %s: %s %dx%d, %d-bit", source, meta.mime_type, meta.width, meta.height, meta.color_depth
    )
    return meta


def load_picture(path: Path) -> PictureMetadata:
    data = read_bytes(path)
    return describe_image(data, source=path)

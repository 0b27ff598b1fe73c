from __future__ import annotations

import logging
import struct

from .blocks import encode_header
from .errors import LengthOutOfRange
from .models import MAX_BLOCK_LENGTH, MAX_U32, PICTURE, MetadataBlockHeader, PictureMetadata

logger = logging.getLogger(__name__)

# picture type, then the big-endian length prefix of the MIME string
_TYPE_AND_MIME = struct.Struct(">2I")
_U32 = struct.Struct(">I")
# width, height, colour depth, colours used, image data length
_DIMENSIONS = struct.Struct(">5I")


def picture_payload_length(meta: PictureMetadata) -> int:
    mime = meta.mime_type.encode("utf-8")
    desc = meta.description.encode("utf-8")
    return (
        4
        + (4 + len(mime))
        + (4 + len(desc))
        + 4
        + 4
        + 4
        + 4
        + (4 + len(meta.image_data))
    )


def build_picture_block(meta: PictureMetadata, *, is_last: bool = False) -> bytes:
    """Serialize a complete PICTURE block (header plus payload).

    The last-block bit is the caller's decision since it depends on where
    the block ends up in the stream; ``splice`` rewrites it anyway.
    """
    length = picture_payload_length(meta)
    if length > MAX_BLOCK_LENGTH:
        raise LengthOutOfRange(length)
    for name in ("picture_type", "width", "height", "color_depth", "colors_used"):
        value = getattr(meta, name)
        if not 0 <= value <= MAX_U32:
            raise ValueError(f"{name}={value} does not fit in 32 bits")

    mime = meta.mime_type.encode("utf-8")
    desc = meta.description.encode("utf-8")
    header = encode_header(
        MetadataBlockHeader(is_last=is_last, block_type=PICTURE, length=length)
    )
    parts = [
        header,
        _TYPE_AND_MIME.pack(meta.picture_type, len(mime)),
        mime,
        _U32.pack(len(desc)),
        desc,
        _DIMENSIONS.pack(
            meta.width,
            meta.height,
            meta.color_depth,
            meta.colors_used,
            len(meta.image_data),
        ),
        bytes(meta.image_data),
    ]
    block = b"".join(parts)
    logger.debug(
        "Built %s picture block: %dx%d, %d-bit, payload %d bytes",
        meta.mime_type,
        meta.width,
        meta.height,
        meta.color_depth,
        length,
    )
    return block

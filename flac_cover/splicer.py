from __future__ import annotations

import logging

from .blocks import SIGNATURE, decode_header, require_signature, with_last_flag
from .errors import InsertionPointNotFound, TruncatedBlock, TruncatedHeader
from .models import HEADER_SIZE, PICTURE

logger = logging.getLogger(__name__)

MIN_SPLICE_SIZE = len(SIGNATURE) + HEADER_SIZE


def first_block_end(data: bytes) -> int:
    """Return the offset just past the first metadata block (normally STREAMINFO)."""
    require_signature(data)
    if len(data) < MIN_SPLICE_SIZE:
        raise InsertionPointNotFound(
            f"need at least {MIN_SPLICE_SIZE} bytes to locate the first block, got {len(data)}"
        )
    header = decode_header(data, len(SIGNATURE))
    end = MIN_SPLICE_SIZE + header.length
    if end > len(data):
        raise InsertionPointNotFound(
            f"first block declares {header.length} bytes but the buffer ends at {len(data)}"
        )
    return end


def splice(data: bytes, picture_block: bytes) -> bytes:
    """Insert ``picture_block`` right after the first metadata block.

    The output keeps exactly one last-block flag, on the final metadata
    block. When the first block was the last one, its flag moves to the
    inserted picture; otherwise the picture is emitted without the flag and
    the existing last block is left untouched.
    """
    end = first_block_end(data)
    try:
        picture_header = decode_header(picture_block)
    except TruncatedHeader as exc:
        raise TruncatedBlock(0, 0, len(picture_block)) from exc
    if HEADER_SIZE + picture_header.length != len(picture_block):
        raise TruncatedBlock(0, picture_header.length, len(picture_block) - HEADER_SIZE)
    if picture_header.block_type != PICTURE:
        raise ValueError(
            f"expected a PICTURE block, got block type {picture_header.block_type}"
        )

    sig_end = len(SIGNATURE)
    first_header = bytes(data[sig_end:MIN_SPLICE_SIZE])
    first_is_last = decode_header(first_header).is_last
    if first_is_last:
        logger.debug("First block was the last one; moving the flag to the picture block")

    output = b"".join(
        [
            SIGNATURE,
            with_last_flag(first_header, False),
            bytes(data[MIN_SPLICE_SIZE:end]),
            with_last_flag(picture_block[:HEADER_SIZE], first_is_last),
            bytes(picture_block[HEADER_SIZE:]),
            bytes(data[end:]),
        ]
    )
    logger.debug(
        "Spliced %d-byte picture block at offset %d (%d -> %d bytes)",
        len(picture_block),
        end,
        len(data),
        len(output),
    )
    return output

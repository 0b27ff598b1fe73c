# --------------------------------------------------------------
# | field        | bits  | description                          |
# --------------------------------------------------------------
# | last         | 1     | set on the final metadata block       |
# | block type   | 7     | 0=STREAMINFO ... 6=PICTURE, 127=bad   |
# | length       | 24    | payload bytes following the header    |
# --------------------------------------------------------------
# All multi-byte fields are big-endian.
from __future__ import annotations

import logging

from .errors import LengthOutOfRange, NotContainerFile, TruncatedHeader
from .models import HEADER_SIZE, MAX_BLOCK_LENGTH, MAX_BLOCK_TYPE, MetadataBlockHeader

logger = logging.getLogger(__name__)

SIGNATURE = b"fLaC"
LAST_FLAG = 0x80
TYPE_MASK = 0x7F


def validate_signature(data: bytes) -> bool:
    return len(data) >= len(SIGNATURE) and bytes(data[: len(SIGNATURE)]) == SIGNATURE


def require_signature(data: bytes) -> None:
    if not validate_signature(data):
        logger.debug("Signature mismatch: %r", bytes(data[: len(SIGNATURE)]))
        raise NotContainerFile()


def decode_header(data: bytes, offset: int = 0) -> MetadataBlockHeader:
    """Decode the 4-byte metadata block header starting at ``offset``.

    Any four bytes decode to some header; whether the declared length fits
    the surrounding buffer is left to the caller.
    """
    available = len(data) - offset
    if available < HEADER_SIZE:
        raise TruncatedHeader(offset, max(available, 0))
    first = data[offset]
    length = (data[offset + 1] << 16) | (data[offset + 2] << 8) | data[offset + 3]
    return MetadataBlockHeader(
        is_last=bool(first & LAST_FLAG),
        block_type=first & TYPE_MASK,
        length=length,
    )


def encode_header(header: MetadataBlockHeader) -> bytes:
    if not 0 <= header.length <= MAX_BLOCK_LENGTH:
        raise LengthOutOfRange(header.length)
    if not 0 <= header.block_type <= MAX_BLOCK_TYPE:
        raise ValueError(f"block type {header.block_type} does not fit in 7 bits")
    first = header.block_type | (LAST_FLAG if header.is_last else 0)
    return bytes([first]) + header.length.to_bytes(3, "big")


def with_last_flag(header_bytes: bytes, is_last: bool) -> bytes:
    """Return a copy of a 4-byte header with the last-block bit set or cleared."""
    first = header_bytes[0] & TYPE_MASK
    if is_last:
        first |= LAST_FLAG
    return bytes([first]) + bytes(header_bytes[1:HEADER_SIZE])

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Optional

from .blocks import SIGNATURE, decode_header, require_signature
from .errors import FlacCoverError, TruncatedBlock
from .models import HEADER_SIZE, PICTURE, MetadataBlock, ScanResult

logger = logging.getLogger(__name__)


class BlockStreamReader:
    """Walks the metadata blocks that follow the fLaC signature.

    Iterating restarts the walk from the first block. ``has_picture`` and
    ``error`` describe the most recent walk and stay readable after it ends,
    whether it reached the last block or stopped on a truncation.
    """

    def __init__(self, data: bytes) -> None:
        require_signature(data)
        self.data = data
        self.has_picture = False
        self.error: Optional[FlacCoverError] = None

    def __iter__(self) -> Iterator[MetadataBlock]:
        self.has_picture = False
        self.error = None
        try:
            for block in self.walk():
                if block.header.block_type == PICTURE:
                    self.has_picture = True
                yield block
        except FlacCoverError as exc:
            logger.debug("Block walk stopped: %s", exc)
            self.error = exc

    def walk(self) -> Iterator[MetadataBlock]:
        data = self.data
        offset = len(SIGNATURE)
        while True:
            header = decode_header(data, offset)
            end = offset + HEADER_SIZE + header.length
            if end > len(data):
                raise TruncatedBlock(
                    offset, header.length, max(len(data) - offset - HEADER_SIZE, 0)
                )
            yield MetadataBlock(offset=offset, header=header)
            if header.is_last:
                return
            offset = end


def iter_blocks(data: bytes) -> Iterator[MetadataBlock]:
    """Yield every metadata block, raising on truncation."""
    yield from BlockStreamReader(data).walk()


def scan_blocks(data: bytes) -> ScanResult:
    reader = BlockStreamReader(data)
    blocks = list(reader)
    result = ScanResult(blocks=blocks, has_picture=reader.has_picture, error=reader.error)
    logger.debug(
        "Scanned %d metadata block(s); picture=%s; error=%s",
        len(blocks),
        result.has_picture,
        result.error,
    )
    return result

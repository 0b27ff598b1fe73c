from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import FlacCoverError

HEADER_SIZE = 4
MAX_BLOCK_LENGTH = 0xFFFFFF
MAX_BLOCK_TYPE = 0x7F
MAX_U32 = 0xFFFFFFFF

STREAMINFO = 0
PADDING = 1
APPLICATION = 2
SEEKTABLE = 3
VORBIS_COMMENT = 4
CUESHEET = 5
PICTURE = 6
INVALID = 127

BLOCK_TYPE_NAMES: Dict[int, str] = {
    STREAMINFO: "STREAMINFO",
    PADDING: "PADDING",
    APPLICATION: "APPLICATION",
    SEEKTABLE: "SEEKTABLE",
    VORBIS_COMMENT: "VORBIS_COMMENT",
    CUESHEET: "CUESHEET",
    PICTURE: "PICTURE",
    INVALID: "INVALID",
}

COVER_FRONT = 3
COVER_DESCRIPTION = "Cover Image"


@dataclass(frozen=True, slots=True)
class MetadataBlockHeader:
    is_last: bool
    block_type: int
    length: int

    @property
    def type_name(self) -> str:
        return BLOCK_TYPE_NAMES.get(self.block_type, "RESERVED")


@dataclass(frozen=True, slots=True)
class MetadataBlock:
    """A block header located at ``offset`` within a source buffer."""

    offset: int
    header: MetadataBlockHeader

    @property
    def payload_offset(self) -> int:
        return self.offset + HEADER_SIZE

    @property
    def end(self) -> int:
        return self.payload_offset + self.header.length

    def payload(self, data: bytes) -> bytes:
        return bytes(data[self.payload_offset : self.end])

    def to_record(self) -> Dict[str, object]:
        return {
            "offset": self.offset,
            "last": self.header.is_last,
            "type": self.header.block_type,
            "type_name": self.header.type_name,
            "length": self.header.length,
        }


@dataclass(slots=True)
class PictureMetadata:
    mime_type: str
    width: int
    height: int
    color_depth: int
    image_data: bytes
    colors_used: int = 0
    description: str = COVER_DESCRIPTION
    picture_type: int = COVER_FRONT


@dataclass(slots=True)
class ScanResult:
    blocks: List[MetadataBlock] = field(default_factory=list)
    has_picture: bool = False
    error: Optional[FlacCoverError] = None

    @property
    def complete(self) -> bool:
        return self.error is None and bool(self.blocks) and self.blocks[-1].header.is_last

    @property
    def audio_offset(self) -> Optional[int]:
        if not self.complete:
            return None
        return self.blocks[-1].end

    @property
    def picture_blocks(self) -> List[MetadataBlock]:
        return [block for block in self.blocks if block.header.block_type == PICTURE]

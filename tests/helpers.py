from __future__ import annotations

import struct
from typing import Iterable, Sequence, Tuple

SIGNATURE = b"fLaC"
AUDIO_FRAMES = b"\xff\xf8\x69\x08\x00\x00" + b"\x00" * 26


def header(block_type: int, length: int, last: bool = False) -> bytes:
    first = block_type | (0x80 if last else 0)
    return bytes([first]) + length.to_bytes(3, "big")


def raw_block(block_type: int, payload: bytes, last: bool = False) -> bytes:
    return header(block_type, len(payload), last) + payload


def streaminfo_payload(sample_rate: int = 44100, channels: int = 2, bps: int = 16) -> bytes:
    # 16-bit min/max block size, 24-bit min/max frame size, then
    # 20 bits rate, 3 bits channels-1, 5 bits bps-1, 36 bits total samples, 16-byte MD5
    packed = (sample_rate << 44) | ((channels - 1) << 41) | ((bps - 1) << 36)
    return (
        struct.pack(">HH", 4096, 4096)
        + (0).to_bytes(3, "big")
        + (0).to_bytes(3, "big")
        + packed.to_bytes(8, "big")
        + b"\x00" * 16
    )


def vorbis_comment_payload(vendor: str = "reference libFLAC 1.4.3") -> bytes:
    raw = vendor.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw + struct.pack("<I", 0)


def build_flac(
    blocks: Sequence[Tuple[int, bytes]],
    audio: bytes = AUDIO_FRAMES,
) -> bytes:
    """Assemble a FLAC buffer; the last entry of ``blocks`` gets the last-block flag."""
    parts = [SIGNATURE]
    for index, (block_type, payload) in enumerate(blocks):
        parts.append(raw_block(block_type, payload, last=index == len(blocks) - 1))
    parts.append(audio)
    return b"".join(parts)


def minimal_flac(audio: bytes = AUDIO_FRAMES) -> bytes:
    """STREAMINFO is both the first and the last metadata block."""
    return build_flac([(0, streaminfo_payload())], audio)


def typical_flac(extra: Iterable[Tuple[int, bytes]] = ()) -> bytes:
    blocks = [(0, streaminfo_payload()), (4, vorbis_comment_payload())]
    blocks.extend(extra)
    blocks.append((1, b"\x00" * 64))
    return build_flac(blocks)

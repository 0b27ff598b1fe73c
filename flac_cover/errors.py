from __future__ import annotations

from pathlib import Path
from typing import Optional


class FlacCoverError(Exception):
    """Base class for every failure reported by flac-cover."""

    kind = "FlacCoverError"


class NotContainerFile(FlacCoverError):
    """Raised when a buffer does not start with the ``fLaC`` signature."""

    kind = "NotContainerFile"

    def __init__(self, message: str = "missing fLaC signature") -> None:
        super().__init__(message)


class TruncatedHeader(FlacCoverError):
    kind = "TruncatedHeader"

    def __init__(self, offset: int, available: int) -> None:
        super().__init__(
            f"block header at offset {offset} needs 4 bytes, {available} available"
        )
        self.offset = offset
        self.available = available


class TruncatedBlock(FlacCoverError):
    kind = "TruncatedBlock"

    def __init__(self, offset: int, length: int, available: int) -> None:
        super().__init__(
            f"block at offset {offset} declares {length} payload bytes, "
            f"{available} available"
        )
        self.offset = offset
        self.length = length
        self.available = available


class LengthOutOfRange(FlacCoverError):
    """Raised when a payload does not fit the 24-bit length field."""

    kind = "LengthOutOfRange"

    def __init__(self, length: int) -> None:
        super().__init__(f"payload length {length} does not fit in 24 bits")
        self.length = length


class InsertionPointNotFound(FlacCoverError):
    kind = "InsertionPointNotFound"


class PictureAlreadyPresent(FlacCoverError):
    kind = "PictureAlreadyPresent"


class ImageDecodeFailure(FlacCoverError):
    kind = "ImageDecodeFailure"

    def __init__(self, path: Path, reason: Optional[str] = None) -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(f"could not decode image {path}{detail}")
        self.path = path


class IOFailure(FlacCoverError):
    kind = "IOFailure"

    def __init__(self, path: Path, reason: Optional[str] = None) -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(f"I/O failure on {path}{detail}")
        self.path = path

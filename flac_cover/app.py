from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from mutagen import MutagenError
from mutagen.flac import FLAC, FLACNoHeaderError

from .config import Settings
from .errors import IOFailure, PictureAlreadyPresent
from .fs_utils import output_path_for, read_bytes, write_atomic
from .imaging import load_picture
from .models import ScanResult
from .picture import build_picture_block
from .scanner import scan_blocks
from .splicer import splice

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EmbedReport:
    source: Path
    output: Path
    picture_length: int
    had_picture: bool
    verified: Optional[bool] = None


@dataclass(frozen=True, slots=True)
class PictureSummary:
    picture_type: int
    mime_type: str
    description: str
    width: int
    height: int
    color_depth: int
    colors_used: int
    size: int
    data: bytes = field(default=b"", repr=False, compare=False)

    def render(self) -> str:
        return (
            f"type={self.picture_type} {self.mime_type} {self.width}x{self.height} "
            f"depth={self.color_depth} colors={self.colors_used} "
            f"{self.size} bytes \"{self.description}\""
        )


@dataclass
class CoverEmbedder:
    settings: Settings

    @classmethod
    def create(cls, settings: Optional[Settings] = None) -> "CoverEmbedder":
        return cls(settings=settings or Settings())

    def inspect(self, path: Path) -> ScanResult:
        return scan_blocks(read_bytes(path))

    def embed(
        self,
        flac_path: Path,
        image_path: Path,
        *,
        output: Optional[Path] = None,
        overwrite: Optional[bool] = None,
    ) -> EmbedReport:
        data = read_bytes(flac_path)
        scan = scan_blocks(data)
        if scan.error is not None:
            raise scan.error
        if scan.has_picture:
            if self.settings.embed.skip_if_present:
                raise PictureAlreadyPresent(f"{flac_path} already contains a picture block")
            logger.warning(
                "%s already contains %d picture block(s); adding another",
                flac_path,
                len(scan.picture_blocks),
            )

        meta = load_picture(image_path)
        block = build_picture_block(meta)
        result = splice(data, block)

        target = output or output_path_for(flac_path, self.settings.output.filename_template)
        if target.resolve() == flac_path.resolve():
            raise IOFailure(target, "output would overwrite the input file")
        allow_overwrite = self.settings.output.overwrite if overwrite is None else overwrite
        write_atomic(target, result, overwrite=allow_overwrite)
        logger.info("Wrote %s (%d bytes, picture block %d bytes)", target, len(result), len(block))

        report = EmbedReport(
            source=flac_path,
            output=target,
            picture_length=len(block),
            had_picture=scan.has_picture,
        )
        if self.settings.embed.verify_output:
            pictures = self.verify(target)
            report.verified = any(
                p.data == meta.image_data
                and p.mime_type == meta.mime_type
                and (p.width, p.height) == (meta.width, meta.height)
                for p in pictures
            )
            if not report.verified:
                logger.warning("Verification of %s did not find the embedded picture", target)
        return report

    def verify(self, path: Path) -> List[PictureSummary]:
        try:
            audio = FLAC(path)
        except FLACNoHeaderError as exc:
            raise IOFailure(path, f"not a FLAC file: {exc}") from exc
        except (MutagenError, OSError) as exc:
            raise IOFailure(path, str(exc)) from exc
        return [
            PictureSummary(
                picture_type=pic.type,
                mime_type=pic.mime,
                description=pic.desc,
                width=pic.width,
                height=pic.height,
                color_depth=pic.depth,
                colors_used=pic.colors,
                size=len(pic.data),
                data=pic.data,
            )
            for pic in audio.pictures
        ]

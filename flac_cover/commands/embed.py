from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..app import CoverEmbedder, EmbedReport


def run(
    embedder: CoverEmbedder,
    flac_path: Path,
    image_path: Path,
    *,
    output: Optional[Path] = None,
    force: bool = False,
) -> EmbedReport:
    report = embedder.embed(
        flac_path,
        image_path,
        output=output,
        overwrite=True if force else None,
    )
    print(f"Wrote {report.output} (picture block {report.picture_length} bytes)")
    if report.had_picture:
        print("Note: the source already had a picture block; the output now has more than one.")
    if report.verified is False:
        print("Verification did not find the embedded picture.")
    return report

from __future__ import annotations

from pathlib import Path

from ..app import CoverEmbedder, PictureSummary


def run(embedder: CoverEmbedder, path: Path) -> list[PictureSummary]:
    pictures = embedder.verify(path)
    if not pictures:
        print(f"{path}: no pictures")
        return pictures
    print(f"{path}: {len(pictures)} picture(s)")
    for index, picture in enumerate(pictures, start=1):
        print(f"  [{index}] {picture.render()}")
    return pictures

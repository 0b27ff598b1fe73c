from __future__ import annotations

import json
from pathlib import Path

from ..app import CoverEmbedder
from ..models import ScanResult
from .output import block_line


def run(embedder: CoverEmbedder, path: Path, *, json_output: bool = False) -> ScanResult:
    result = embedder.inspect(path)
    if json_output:
        payload = {
            "path": str(path),
            "blocks": [block.to_record() for block in result.blocks],
            "has_picture": result.has_picture,
            "audio_offset": result.audio_offset,
            "error": None
            if result.error is None
            else {"kind": result.error.kind, "message": str(result.error)},
        }
        print(json.dumps(payload, indent=2, sort_keys=True))
        return result
    print(f"{path}")
    for block in result.blocks:
        header = block.header
        print(
            "  "
            + block_line(
                block.offset, header.is_last, header.block_type, header.type_name, header.length
            )
        )
    print(f"  picture present: {'yes' if result.has_picture else 'no'}")
    if result.audio_offset is not None:
        print(f"  audio frames start at offset {result.audio_offset}")
    if result.error is not None:
        print(f"  {result.error.kind}: {result.error}")
    return result

from __future__ import annotations

import errno
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .errors import IOFailure

logger = logging.getLogger(__name__)

ELLIPSIS = "…"
MAX_BASENAME_BYTES = 255


def path_exists(path: Path) -> Optional[bool]:
    try:
        path.stat()
        return True
    except FileNotFoundError:
        return False
    except OSError as exc:
        if exc.errno != errno.ENAMETOOLONG:
            raise
        parent = path.parent
        try:
            with os.scandir(parent) as it:
                for entry in it:
                    if entry.name == path.name:
                        return True
        except FileNotFoundError:
            return None
        return False


def fit_destination_path(path: Path) -> Path:
    """Shorten the basename of ``path`` so it fits in MAX_BASENAME_BYTES."""
    name_bytes = path.name.encode("utf-8")
    if len(name_bytes) <= MAX_BASENAME_BYTES:
        return path
    suffix_bytes = path.suffix.encode("utf-8")
    ellipsis_bytes = ELLIPSIS.encode("utf-8")
    allowed = max(0, MAX_BASENAME_BYTES - len(suffix_bytes) - len(ellipsis_bytes))
    stem = path.stem or "file"
    truncated = (
        stem.encode("utf-8")[:allowed].decode("utf-8", errors="ignore") or "file"
    )
    return path.with_name(f"{truncated}{ELLIPSIS}{path.suffix}")


def output_path_for(source: Path, template: str) -> Path:
    try:
        name = template.format(stem=source.stem, suffix=source.suffix, name=source.name)
        candidate = fit_destination_path(source.with_name(name))
    except (ValueError, KeyError, IndexError) as exc:
        raise IOFailure(source, f"bad output name template {template!r}: {exc}") from exc
    if candidate == source:
        raise IOFailure(source, "output name would overwrite the input file")
    return candidate


def read_bytes(path: Path) -> bytes:
    try:
        with path.open("rb") as fh:
            return fh.read()
    except OSError as exc:
        raise IOFailure(path, exc.strerror or str(exc)) from exc


def write_atomic(path: Path, data: bytes, *, overwrite: bool = False) -> None:
    """Write ``data`` to ``path`` in one step.

    The bytes go to a temporary sibling first, which is then renamed over
    the destination, so readers never see a partial file.
    """
    if not overwrite and path_exists(path):
        raise IOFailure(path, "output already exists")
    tmp_name: Optional[str] = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name[:32]}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise IOFailure(path, exc.strerror or str(exc)) from exc
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
    logger.debug("Wrote %d bytes to %s", len(data), path)

from __future__ import annotations

from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import Optional

from ..config import Settings
from ..errors import IOFailure
from ..fs_utils import output_path_for
from .output import CheckLine, error, ok as ok_line, warning


@dataclass(slots=True)
class DoctorReport:
    ok: bool
    checks: list[str]


def _library_check(label: str, distribution: str) -> CheckLine:
    try:
        version = metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return CheckLine(label, "ERROR", f"{distribution} is not installed")
    return CheckLine(label, "OK", version)


def run(settings: Settings, *, config_path: Optional[Path] = None) -> DoctorReport:
    checks: list[str] = []
    ok = True

    if config_path is None:
        checks.append(warning("Config", "no flac-cover.yaml found, using defaults"))
    else:
        checks.append(ok_line("Config", str(config_path)))

    sample = Path("album.flac")
    try:
        example = output_path_for(sample, settings.output.filename_template)
    except IOFailure as exc:
        ok = False
        checks.append(error("Output template", str(exc)))
    else:
        checks.append(
            ok_line("Output template", f"{sample.name} -> {example.name}")
        )

    for label, distribution in (("mutagen", "mutagen"), ("Pillow", "Pillow")):
        check = _library_check(label, distribution)
        if check.status == "ERROR":
            ok = False
        checks.append(check.render())

    if settings.embed.skip_if_present:
        checks.append(ok_line("Existing pictures", "files with a picture are skipped"))
    else:
        checks.append(
            warning("Existing pictures", "files with a picture get a second one")
        )
    return DoctorReport(ok=ok, checks=checks)

from __future__ import annotations

import string
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_NAMES = ("flac-cover.yaml", "flac-cover.yml")
TEMPLATE_FIELDS = {"stem", "suffix", "name"}


class OutputSettings(BaseModel):
    filename_template: str = "{stem}_cover{suffix}"
    overwrite: bool = False

    @field_validator("filename_template")
    @classmethod
    def _check_template(cls, value: str) -> str:
        fields = {
            name
            for _, name, _, _ in string.Formatter().parse(value)
            if name is not None
        }
        unknown = fields - TEMPLATE_FIELDS
        if unknown:
            raise ValueError(
                f"unknown template field(s): {', '.join(sorted(unknown))}"
            )
        if "/" in value or "\\" in value:
            raise ValueError("filename_template must not contain path separators")
        if not value.strip():
            raise ValueError("filename_template must not be empty")
        try:
            value.format(stem="album", suffix=".flac", name="album.flac")
        except (ValueError, KeyError, IndexError) as exc:
            raise ValueError(f"filename_template cannot be rendered: {exc}") from exc
        return value


class EmbedSettings(BaseModel):
    skip_if_present: bool = False
    verify_output: bool = True


class Settings(BaseModel):
    output: OutputSettings = Field(default_factory=OutputSettings)
    embed: EmbedSettings = Field(default_factory=EmbedSettings)

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for name in CONFIG_NAMES:
        candidate = cwd / name
        if candidate.exists():
            return candidate
    return None


from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

import yaml

from .app import CoverEmbedder
from .commands import doctor as cmd_doctor
from .commands import embed as cmd_embed
from .commands import inspect as cmd_inspect
from .commands import verify as cmd_verify
from .config import Settings, find_config
from .errors import FlacCoverError

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Embed cover art into FLAC files")
    parser.add_argument("--config", type=Path, help="Path to flac-cover.yaml")
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)
    inspect_parser = subparsers.add_parser(
        "inspect", help="List the metadata blocks of a FLAC file"
    )
    inspect_parser.add_argument("file", type=Path)
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit machine-readable JSON to stdout",
    )
    embed_parser = subparsers.add_parser(
        "embed", help="Write a copy of a FLAC file with a front cover picture block"
    )
    embed_parser.add_argument("file", type=Path, help="Source FLAC file")
    embed_parser.add_argument("image", type=Path, help="Cover image (JPEG, PNG, ...)")
    embed_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output path (defaults to a sibling named by output.filename_template)",
    )
    embed_parser.add_argument(
        "--force",
        action="store_true",
        help="Replace the output file if it already exists",
    )
    verify_parser = subparsers.add_parser(
        "verify", help="List the pictures embedded in a FLAC file"
    )
    verify_parser.add_argument("file", type=Path)
    subparsers.add_parser("doctor", help="Run basic config/library checks")
    return parser


def configure_logging(level_name: str) -> WarningBufferHandler:
    log_level = getattr(logging, level_name.upper(), logging.WARNING)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    color_handler = logging.StreamHandler()
    color_handler.setFormatter(ColorFormatter(LOG_FORMAT))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(warn_buffer)

    logging.getLogger("PIL").setLevel(logging.WARNING)
    return warn_buffer


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    warn_buffer = configure_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        config_path = find_config(args.config)
        settings = Settings() if config_path is None else Settings.load(config_path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        # pydantic's ValidationError is a ValueError
        logger.error("Could not load configuration: %s", exc)
        return 2
    embedder = CoverEmbedder.create(settings)

    try:
        match args.command:
            case "inspect":
                result = cmd_inspect.run(embedder, args.file, json_output=args.json)
                if result.error is not None:
                    return 1
            case "embed":
                cmd_embed.run(
                    embedder,
                    args.file,
                    args.image,
                    output=args.out,
                    force=args.force,
                )
            case "verify":
                cmd_verify.run(embedder, args.file)
            case "doctor":
                report = cmd_doctor.run(settings, config_path=config_path)
                for line in report.checks:
                    print(line)
                if not report.ok:
                    return 1
            case _:
                parser.error("Unknown command")
    except FlacCoverError as exc:
        logger.error("%s: %s", exc.kind, exc)
        return 1
    finally:
        if warn_buffer.records:
            print("\n\033[33mWarnings/Errors summary:\033[0m")
            for line in warn_buffer.records:
                print(f" - {line}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

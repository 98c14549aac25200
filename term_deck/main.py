"""Command line entry for term-deck (present / export / record)."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any, Dict

from config_loader import AppConfig, default_config, load_config
from logging_utils import configure_logging, get_logger

from .export import AnsiRecordOptions, ExportOptions, export_presentation, record_ansi
from .export.errors import ExportError
from .presenter import present

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="term-deck",
        description="Terminal slide presentations with matrix rain and video export",
    )
    parser.add_argument(
        "--config",
        help="Path to configuration file (YAML). Defaults are used when omitted.",
    )
    parser.add_argument(
        "--log-level",
        help="Override logging level (DEBUG, INFO, WARNING, ...)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_present = sub.add_parser("present", help="Run a live presentation")
    p_present.add_argument("slides_dir", help="Directory containing slide markdown files")
    p_present.add_argument("--start", type=int, help="Start at slide index (0-based)")
    p_present.add_argument("--loop", action="store_true", default=None, help="Wrap around at the ends")

    p_export = sub.add_parser("export", help="Export the presentation to MP4 or GIF")
    p_export.add_argument("slides_dir", help="Directory containing slide markdown files")
    p_export.add_argument("-o", "--output", required=True, help="Output file (.mp4 or .gif)")
    p_export.add_argument("-w", "--width", type=int, help="Terminal width in columns")
    p_export.add_argument("-H", "--height", type=int, help="Terminal height in rows")
    p_export.add_argument("--fps", type=int, help="Frames per second")
    p_export.add_argument("-t", "--slide-time", dest="slide_time", type=float, help="Seconds per slide")
    p_export.add_argument("-q", "--quality", type=int, help="Quality 1-100 (MP4 only)")
    p_export.add_argument("--no-progress", action="store_true", help="Hide progress bars")

    p_record = sub.add_parser("record", help="Record the presentation as an asciicast file")
    p_record.add_argument("slides_dir", help="Directory containing slide markdown files")
    p_record.add_argument("-o", "--output", required=True, help="Output file (.cast)")
    p_record.add_argument("-w", "--width", type=int, help="Terminal width in columns")
    p_record.add_argument("-H", "--height", type=int, help="Terminal height in rows")
    p_record.add_argument("-t", "--slide-time", dest="slide_time", type=float, help="Seconds per slide")
    return parser


def _pick(args: argparse.Namespace, defaults: Dict[str, Any], key: str) -> Any:
    value = getattr(args, key, None)
    return defaults.get(key) if value is None else value


def build_export_options(args: argparse.Namespace, config: AppConfig) -> ExportOptions:
    """CLI flags win over the config file's ``export`` section."""
    defaults = config.raw.get("export") or {}
    return ExportOptions(
        output=args.output,
        width=_pick(args, defaults, "width"),
        height=_pick(args, defaults, "height"),
        fps=_pick(args, defaults, "fps"),
        slide_time=_pick(args, defaults, "slide_time"),
        quality=_pick(args, defaults, "quality"),
        show_progress=not args.no_progress,
    )


def build_record_options(args: argparse.Namespace, config: AppConfig) -> AnsiRecordOptions:
    defaults = config.export
    return AnsiRecordOptions(
        slide_time=float(_pick(args, defaults, "slide_time")),
        width=int(_pick(args, defaults, "width")),
        height=int(_pick(args, defaults, "height")),
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else default_config()
    level = args.log_level or config.logging_level
    configure_logging(level, config.log_file, console=args.command != "present")
    logger.debug("Loaded configuration: %s", config.dumps())

    try:
        if args.command == "present":
            asyncio.run(present(args.slides_dir, start_slide=args.start, loop=args.loop))
        elif args.command == "export":
            options = build_export_options(args, config)
            output = asyncio.run(export_presentation(args.slides_dir, options))
            print(f"Exported to {output}")
        elif args.command == "record":
            options = build_record_options(args, config)
            output = asyncio.run(record_ansi(args.slides_dir, Path(args.output), options))
            print(f"Recorded to {output}")
    except ExportError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}")
        return 1
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}")
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Command line front end.

Examples::

    txt-converter convert path/to/project --preset auto --compression maximum --structure
    txt-converter scan path/to/project --ext gd,tscn --ignore .godot
    txt-converter compact scenes/level.tscn
    txt-converter presets --detect path/to/project
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .compression import AVAILABLE_LEVELS
from .converter import ConvertOptions, convert_project
from .godot import compact
from .presets import autodetect_preset, load_presets
from .scanner import scan_files, select_for_merge
from .settings import Settings, load_settings, save_settings


logger = logging.getLogger("txt_converter")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--preset", help="preset name, or 'auto' to detect it from the project")
    p.add_argument(
        "--ext",
        action="append",
        metavar="LIST",
        help="comma separated extensions to include (overrides the preset)",
    )
    p.add_argument(
        "--ignore",
        action="append",
        metavar="LIST",
        help="comma separated folder names to skip (overrides the preset)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txt-converter",
        description="Flatten a source tree into .txt files, a structure report and a merged dump.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--log-file", help="also write the log to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("convert", help="convert a project directory")
    p.add_argument("source", nargs="?", help="project directory (may come from --config)")
    p.add_argument("--config", help="YAML settings file to start from")
    p.add_argument("--save-config", metavar="PATH", help="write the effective settings here")
    _add_filter_args(p)
    p.add_argument("--compression", choices=AVAILABLE_LEVELS)
    p.add_argument("--structure", action=argparse.BooleanOptionalAction, default=None,
                   help="write the structure report")
    p.add_argument("--compact-structure", action=argparse.BooleanOptionalAction, default=None,
                   help="list only converted files in the structure report")
    p.add_argument("--merged", action=argparse.BooleanOptionalAction, default=None,
                   help="write the merged dump")
    p.add_argument("--godot-compact", action=argparse.BooleanOptionalAction, default=None,
                   help="compact .tscn/.tres files semantically when compressing")
    p.add_argument("--stub", action="append", metavar="GLOB",
                   help="files matching GLOB appear only as stubs in the merged dump")
    p.set_defaults(func=cmd_convert)

    p = sub.add_parser("scan", help="list the files a conversion would pick up")
    p.add_argument("source")
    _add_filter_args(p)
    p.set_defaults(func=cmd_scan)

    p = sub.add_parser("compact", help="print the compact form of one .tscn/.tres file")
    p.add_argument("file")
    p.add_argument("-o", "--output", help="write here instead of stdout")
    p.set_defaults(func=cmd_compact)

    p = sub.add_parser("presets", help="list presets")
    p.add_argument("--file", help="YAML preset file instead of the bundled one")
    p.add_argument("--detect", metavar="DIR", help="print the preset detected for DIR")
    p.set_defaults(func=cmd_presets)

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config) if getattr(args, "config", None) else Settings()
    return settings.override(
        source_dir=args.source,
        preset=args.preset,
        extensions=args.ext,
        ignored_folders=args.ignore,
        compression=getattr(args, "compression", None),
        generate_structure=getattr(args, "structure", None),
        compact_structure=getattr(args, "compact_structure", None),
        generate_merged=getattr(args, "merged", None),
        godot_compact=getattr(args, "godot_compact", None),
        stub_patterns=getattr(args, "stub", None),
    )


def _scan(settings: Settings):
    if not settings.source_dir:
        raise ValueError("No source directory given.")
    extensions, ignored = settings.resolve_filters()
    if not extensions:
        logger.warning("No extensions selected; only markdown files will be picked up.")
    files = scan_files(settings.source_dir, extensions, ignored)
    logger.info("Scan complete: %d files found.", len(files))
    return files, ignored


def cmd_convert(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    files, ignored = _scan(settings)
    if not files:
        logger.error("Nothing to convert.")
        return 1

    merge = select_for_merge(files, settings.source_dir, settings.stub_patterns)
    logger.info("%d of %d files selected for the merged dump.", len(merge), len(files))
    result = convert_project(
        settings.source_dir,
        files,
        ConvertOptions.from_settings(settings, ignored),
        merge_selection=merge,
    )
    if args.save_config:
        save_settings(settings, args.save_config)
        logger.info("Settings saved to %s", args.save_config)
    logger.info("Result: %s", result.output_dir)
    return 0


def cmd_scan(args: argparse.Namespace) -> int:
    settings = Settings().override(
        source_dir=args.source, preset=args.preset, extensions=args.ext, ignored_folders=args.ignore
    )
    files, _ = _scan(settings)
    root = Path(settings.source_dir)
    for f in files:
        print(f.relative_to(root).as_posix())
    return 0


def cmd_compact(args: argparse.Namespace) -> int:
    path = Path(args.file)
    text = compact(path.read_text(encoding="utf-8"), path.name)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)
    return 0


def cmd_presets(args: argparse.Namespace) -> int:
    if args.detect:
        name = autodetect_preset(args.detect)
        print(name or "(none)")
        return 0 if name else 1
    for name, preset in load_presets(args.file).items():
        print(f"{name}: {', '.join(preset.extensions) or '-'}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.log_file)
    try:
        return args.func(args)
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

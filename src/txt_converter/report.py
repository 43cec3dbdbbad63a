"""Structure report and merged dump writers."""

from __future__ import annotations

import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Set

from .compression import CompressionLevel
from .constants import COLLAPSE_THRESHOLD, MERGED_FILE_SUFFIX, OUTPUT_DIR_NAME, REPORT_STRUCTURE_FILE
from .util import extension_of, format_size, parse_list


logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
HIDDEN_SUFFIXES = (".import", ".tmp", ".uid")

STATUS_MERGED = "[ M ]"
STATUS_STUB = "[ S ]"
STATUS_SKIPPED = "[ - ]"


def _timestamp(now: Optional[datetime]) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


@dataclass
class _TreeContext:
    root: Path
    processed: Set[Path]
    merged: Set[Path]
    ignored: Set[str]
    compact_mode: bool
    lines: List[str] = field(default_factory=list)

    def include(self, path: Path) -> bool:
        name = path.name
        if name == OUTPUT_DIR_NAME:
            return False
        if name.endswith(HIDDEN_SUFFIXES):
            return False
        if name.startswith(".") and name != ".gitignore":
            return False
        if name.lower() in self.ignored and path.is_dir():
            return False
        return True

    def status(self, path: Path) -> str:
        if path in self.merged:
            return STATUS_MERGED
        if path in self.processed:
            return STATUS_STUB
        return STATUS_SKIPPED


def _sort_key(path: Path):
    return (not path.is_dir(), path.name)


def _walk_tree(ctx: _TreeContext, directory: Path, prefix: str, simple: bool) -> None:
    try:
        children = sorted(p for p in directory.iterdir() if ctx.include(p))
    except OSError:
        return

    shown: List[Path] = []
    collapsed: List[Path] = []
    for child in children:
        if child.is_dir() or child in ctx.processed:
            shown.append(child)
        elif not ctx.compact_mode:
            collapsed.append(child)

    if collapsed and len(collapsed) <= COLLAPSE_THRESHOLD:
        shown.extend(collapsed)
        collapsed = []
    shown.sort(key=_sort_key)

    total = len(shown) + (1 if collapsed else 0)
    for idx, path in enumerate(shown):
        _print_entry(ctx, path, prefix, idx == total - 1, simple)

    if collapsed:
        stats = Counter(extension_of(p) for p in collapsed).most_common(3)
        summary = ", ".join(f"{ext}({n})" for ext, n in stats)
        if simple:
            ctx.lines.append(f"{prefix}  ... ({len(collapsed)}: {summary})")
        else:
            ctx.lines.append(f"{prefix}└── [ ... {len(collapsed)} ignored: {summary} ... ]")


def _print_entry(ctx: _TreeContext, path: Path, prefix: str, is_last: bool, simple: bool) -> None:
    if simple:
        indent = prefix + "  "
        if path.is_dir():
            ctx.lines.append(f"{indent}{path.name}/")
            _walk_tree(ctx, path, indent, simple)
        else:
            ctx.lines.append(f"{indent}{path.name}")
        return

    connector = "└── " if is_last else "├── "
    if path.is_dir():
        ctx.lines.append(f"{prefix}{connector}[DIR] {path.name}")
        _walk_tree(ctx, path, prefix + ("    " if is_last else "│   "), simple)
    else:
        ctx.lines.append(
            f"{prefix}{connector}[FILE] {path.name} ({format_size(path)}) {ctx.status(path)}"
        )


def _walk_flat(ctx: _TreeContext) -> None:
    for dirpath, dirnames, filenames in os.walk(ctx.root):
        current = Path(dirpath)
        dirnames[:] = sorted(d for d in dirnames if ctx.include(current / d))
        for filename in sorted(filenames):
            path = current / filename
            if not ctx.include(path):
                continue
            processed = path in ctx.processed
            if ctx.compact_mode and not processed:
                continue
            rel = path.relative_to(ctx.root).as_posix()
            ctx.lines.append(rel if processed else f"{rel} [ignore]")


def build_structure_report(
    root: "str | Path",
    processed: Iterable[Path],
    merged: Iterable[Path],
    level: "str | CompressionLevel" = CompressionLevel.NONE,
    *,
    compact_mode: bool = True,
    ignored_folders: Iterable[str] = (),
    now: Optional[datetime] = None,
) -> str:
    """Render the project tree annotated with what was converted.

    ``none`` gives a box-drawing tree with sizes and merge status, ``smart``
    an indented name tree and ``maximum`` a flat list of relative paths.
    """
    level = CompressionLevel.parse(level)
    root = Path(root).resolve()
    ctx = _TreeContext(
        root=root,
        processed={Path(p).resolve() for p in processed},
        merged={Path(p).resolve() for p in merged},
        ignored=set(parse_list(ignored_folders)),
        compact_mode=compact_mode,
    )

    lines = ctx.lines
    lines.append("# Project Structure")
    lines.append(f"Generated: {_timestamp(now)}")
    lines.append("")
    if level is CompressionLevel.NONE:
        lines.append("### Legend:")
        lines.append(f"- `{STATUS_MERGED}` Merged: Full content included.")
        lines.append(f"- `{STATUS_STUB}` Stub: File included as a stub.")
        lines.append("")
        lines.append("```text")
        lines.append(f"[ROOT] {root.name}")
        _walk_tree(ctx, root, "", simple=False)
        lines.append("```")
    elif level is CompressionLevel.SMART:
        lines.append("(Compact Tree Mode)")
        lines.append(f"{root.name}/")
        _walk_tree(ctx, root, "", simple=True)
    else:
        lines.append("(Flat Structure Mode)")
        _walk_flat(ctx)

    return "\n".join(lines) + "\n"


def write_structure_report(output_dir: Path, report: str) -> Path:
    path = output_dir / REPORT_STRUCTURE_FILE
    path.write_text(report, encoding="utf-8")
    return path


def merged_file_name(project_name: str) -> str:
    return f"_{project_name}{MERGED_FILE_SUFFIX}"


def build_merged_dump(
    project_name: str,
    converted: Mapping[Path, Path],
    merged: Iterable[Path],
    level: "str | CompressionLevel" = CompressionLevel.NONE,
    *,
    now: Optional[datetime] = None,
) -> str:
    """Concatenate converted files; unselected ones appear as stubs.

    ``converted`` maps each source file to its converted copy and fixes the
    order of the dump.
    """
    level = CompressionLevel.parse(level)
    merged = set(merged)
    verbose = level is CompressionLevel.NONE

    parts: List[str] = []
    if verbose:
        parts.append(f"# Merged project: {project_name}\n")
        parts.append(f"Generated: {_timestamp(now)}\n")
    else:
        parts.append(f"# Project: {project_name}\n\n")

    for source, dest in converted.items():
        name = source.name
        parts.append(f"\n--- File: {name} ---\n" if verbose else f"\n>>> {name}\n")
        if source in merged:
            try:
                parts.append(dest.read_text(encoding="utf-8") + "\n")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Could not merge %s: %s", dest, e)
                parts.append(f"!!! Error: {e}\n")
        else:
            parts.append("(Stub)\n\n")
    return "".join(parts)


def write_merged_dump(output_dir: Path, project_name: str, dump: str) -> Path:
    path = output_dir / merged_file_name(project_name)
    path.write_text(dump, encoding="utf-8")
    return path

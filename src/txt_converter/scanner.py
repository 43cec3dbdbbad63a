from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

from .constants import DOC_EXTENSION, OUTPUT_DIR_NAME
from .util import normalize_extensions, parse_list


logger = logging.getLogger(__name__)


def matches_extension(file_name: str, extensions: Iterable[str]) -> bool:
    """True for ``.md`` files, listed extensions and listed whole names.

    Whole names cover extension-less files (``Makefile``) as well as
    presets such as ``requirements.txt``.
    """
    name = file_name.lower()
    if name.endswith(DOC_EXTENSION):
        return True
    exts = set(extensions)
    if name in exts:
        return True
    dot = name.rfind(".")
    return dot > 0 and name[dot + 1 :] in exts


def scan_files(
    source_dir: "str | Path",
    extensions: Iterable[str],
    ignored_folders: Iterable[str] = (),
) -> List[Path]:
    """Walk ``source_dir`` and return the matching files, sorted.

    Ignored folders (compared lower-cased) and the converter's own output
    directory are pruned, not just filtered.
    """
    root = Path(source_dir)
    if not root.is_dir():
        raise NotADirectoryError(f"Source directory {str(root)!r} does not exist.")

    exts = normalize_extensions(extensions)
    ignored = set(parse_list(ignored_folders))
    output_dir = root / OUTPUT_DIR_NAME

    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        current = Path(dirpath)
        dirnames[:] = [
            d
            for d in dirnames
            if d.lower() not in ignored and current / d != output_dir
        ]
        for filename in filenames:
            if matches_extension(filename, exts):
                found.append(current / filename)

    found.sort()
    logger.debug("Scan of %s found %d files", root, len(found))
    return found


def _log_walk_error(err: OSError) -> None:
    logger.debug("Skipping unreadable entry: %s", err)


def select_for_merge(
    files: Sequence[Path],
    root: "str | Path",
    stub_patterns: Optional[Iterable[str]] = None,
) -> Set[Path]:
    """Files whose full content goes into the merged dump.

    Anything matching a stub pattern (glob against the relative posix path
    or the bare file name) is left out and shows up as a stub instead.
    """
    patterns = [p for p in (stub_patterns or ()) if p]
    root = Path(root)
    selected: Set[Path] = set()
    for f in files:
        try:
            rel = f.relative_to(root).as_posix()
        except ValueError:
            rel = f.as_posix()
        if any(fnmatch.fnmatch(rel, p) or fnmatch.fnmatch(f.name, p) for p in patterns):
            continue
        selected.add(f)
    return selected

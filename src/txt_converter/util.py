from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Tuple


def parse_list(raw: Any) -> Tuple[str, ...]:
    """Split a comma separated string (or list of them) into clean tokens.

    Tokens are stripped and lower-cased; empty tokens are dropped.

    >>> parse_list("gd, TSCN,, tres")
    ('gd', 'tscn', 'tres')
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        items: Iterable[str] = raw.split(",")
    else:
        items = (piece for entry in raw for piece in str(entry).split(","))
    out: List[str] = []
    for item in items:
        token = item.strip().lower()
        if token and token not in out:
            out.append(token)
    return tuple(out)


def normalize_extensions(raw: Any) -> Tuple[str, ...]:
    """Like parse_list, but ``.gd`` and ``gd`` both become ``gd``."""
    return tuple(dict.fromkeys(t.lstrip(".") for t in parse_list(raw) if t.lstrip(".")))


def extension_of(path: Path) -> str:
    """``.ext`` of a file name, ``no-ext`` when it has none (dot-files included)."""
    name = path.name
    dot = name.rfind(".")
    return name[dot:] if dot > 0 else "no-ext"


def format_size(path: Path) -> str:
    try:
        size = path.stat().st_size
    except OSError:
        return "?"
    if size < 1024:
        return f"{size} B"
    return f"{size // 1024} KB"


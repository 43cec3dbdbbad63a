"""Compression levels + registry of per-file text filters."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Dict, Protocol

from .constants import DOC_EXTENSION
from .godot import compact, is_godot_file


class CompressionLevel(str, Enum):
    NONE = "none"
    SMART = "smart"
    MAXIMUM = "maximum"

    @classmethod
    def parse(cls, value: "str | CompressionLevel") -> "CompressionLevel":
        if isinstance(value, CompressionLevel):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValueError(
                f"Unknown compression level {value!r}. Available: {AVAILABLE_LEVELS}"
            ) from e


BLOCK_COMMENT_PATTERN = re.compile(r"/\*[\s\S]*?\*/")
BLANK_RUN_PATTERN = re.compile(r"(\r?\n){3,}")
# indentation carries meaning in these; only trailing space is stripped
WHITESPACE_SENSITIVE = (".gd", ".py", ".yaml", ".yml")


class Compressor(Protocol):
    """Text filter applied to one file's content."""

    level: CompressionLevel

    def compress(self, content: str, path: Path) -> str: ...


class NoCompression:
    level = CompressionLevel.NONE

    def compress(self, content: str, path: Path) -> str:
        return content


class SmartCompression:
    """Collapse runs of blank lines, keep everything else."""

    level = CompressionLevel.SMART

    def compress(self, content: str, path: Path) -> str:
        return BLANK_RUN_PATTERN.sub("\n\n", content).strip()


def _strip_inline_comment(line: str) -> str:
    slash = line.find("//")
    # "://" is most likely a URL
    if slash != -1 and not (slash > 0 and line[slash - 1] == ":"):
        return line[:slash]
    hash_ = line.find("#")
    if hash_ != -1:
        return line[:hash_]
    return line


class MaximumCompression:
    """Drop comments and blank lines; flatten indentation where it is not syntax.

    Regex based: a comment marker inside a string literal is cut as well.
    """

    level = CompressionLevel.MAXIMUM

    def compress(self, content: str, path: Path) -> str:
        content = BLOCK_COMMENT_PATTERN.sub("", content)
        keep_indent = path.name.lower().endswith(WHITESPACE_SENSITIVE)

        out = []
        for line in content.splitlines():
            trimmed = line.strip()
            if not trimmed or trimmed.startswith(("//", "#")):
                continue
            line = _strip_inline_comment(line)
            if not line.strip():
                continue
            out.append(line.rstrip() if keep_indent else line.strip())
        return "\n".join(out).strip()


_COMPRESSORS: Dict[CompressionLevel, Compressor] = {
    CompressionLevel.NONE: NoCompression(),
    CompressionLevel.SMART: SmartCompression(),
    CompressionLevel.MAXIMUM: MaximumCompression(),
}

AVAILABLE_LEVELS = tuple(level.value for level in _COMPRESSORS)


def get_compressor(level: "str | CompressionLevel") -> Compressor:
    """Return the compressor registered for a level (name or enum)."""
    return _COMPRESSORS[CompressionLevel.parse(level)]


def compress_text(
    content: str,
    path: Path,
    level: "str | CompressionLevel",
    *,
    godot_compact: bool = True,
) -> str:
    """Apply ``level`` to one file. Markdown is never touched.

    With any level but ``none``, Godot scenes/resources go through the
    semantic compactor instead of the line filters when ``godot_compact``
    is set.
    """
    level = CompressionLevel.parse(level)
    name = path.name
    if level is CompressionLevel.NONE or name.lower().endswith(DOC_EXTENSION):
        return content
    if godot_compact and is_godot_file(name):
        return compact(content, name)
    return get_compressor(level).compress(content, path)

"""Line tokenizer for Godot's text scene/resource format (.tscn/.tres)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple, Union


__all__ = ["Header", "Property", "Token", "tokenize", "parse_header", "unquote"]


HEADER_ATTR_PATTERN = re.compile(r'(\w+)=("[^"]*"|\[[^\]]*\]|[^\s\]]+)')
# A continuation line never swallows the next section.
SECTION_START = re.compile(
    r"^\[(gd_scene|gd_resource|ext_resource|sub_resource|node|connection|resource|editable)\b"
)
COMMENT_PREFIXES = (";", "#")


@dataclass(frozen=True)
class Header:
    """``[keyword key=value ...]`` section header."""

    keyword: str
    attrs: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.attrs.get(key)


@dataclass(frozen=True)
class Property:
    """``key = value`` line (value is raw, possibly multi-line)."""

    key: str
    value: str


Token = Union[Header, Property]


def unquote(value: str | None) -> str | None:
    if value is None:
        return None
    return value.replace('"', "")


def parse_header(line: str) -> Header:
    """Parse one header line. Quotes are stripped from quoted attribute values."""
    body = line.strip()[1:]
    if body.endswith("]"):
        body = body[:-1]
    parts = body.split(None, 1)
    keyword = parts[0] if parts else ""

    attrs: Dict[str, str] = {}
    for m in HEADER_ATTR_PATTERN.finditer(body):
        raw = m.group(2)
        if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
            raw = raw[1:-1]
        attrs[m.group(1)] = raw
    return Header(keyword=keyword, attrs=attrs)


def _balance(text: str, depth: int = 0, in_string: bool = False) -> Tuple[int, bool]:
    """Return (bracket depth, inside string literal) after reading ``text``."""
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
    return depth, in_string


def tokenize(text: str) -> Iterator[Token]:
    """Yield headers and properties; blank and comment lines are skipped.

    A property value that leaves a bracket or string literal open pulls in
    the following lines (newline-joined) until it is balanced again.
    """
    lines = text.splitlines()
    i = 0
    n = len(lines)
    while i < n:
        line = lines[i].strip()
        i += 1
        if not line or line.startswith(COMMENT_PREFIXES):
            continue
        if line.startswith("["):
            yield parse_header(line)
            continue

        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()

        depth, in_string = _balance(value)
        if depth > 0 or in_string:
            parts = [value]
            while i < n and (depth > 0 or in_string):
                nxt = lines[i].rstrip()
                if SECTION_START.match(nxt.strip()):
                    break
                parts.append(nxt)
                depth, in_string = _balance("\n" + nxt, depth, in_string)
                i += 1
            value = "\n".join(parts)

        yield Property(key=key, value=value)

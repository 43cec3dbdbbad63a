"""Semantic compaction of Godot text scenes/resources (.tscn, .tres)."""

from __future__ import annotations

from .graph import Document, Node, NodeKind
from .optimize import optimize
from .parser import parse
from .serialize import serialize


GODOT_EXTENSIONS = (".tscn", ".tres")


def is_godot_file(file_name: str) -> bool:
    return file_name.lower().endswith(GODOT_EXTENSIONS)


def compact(content: str, file_name: str = "") -> str:
    """Return the compact structural notation for one document.

    Never raises on malformed input: unresolved references are left as
    written and nodes with an unknown parent become extra roots.
    """
    document = parse(content, file_name)
    roots = optimize(document.roots)
    return serialize(roots, document)


__all__ = [
    "GODOT_EXTENSIONS",
    "Document",
    "Node",
    "NodeKind",
    "compact",
    "is_godot_file",
    "optimize",
    "parse",
    "serialize",
]

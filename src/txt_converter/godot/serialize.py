from __future__ import annotations

from typing import List, Sequence, Tuple, Union

from .graph import Document, Node, NodeKind
from .values import ValueFormatter, abbreviate_type


__all__ = ["ROOT_LABEL", "INDENT", "render_node", "serialize"]


ROOT_LABEL = "ROOT"
INDENT = "  "


def _display_name(node: Node) -> str:
    if node.kind is NodeKind.RESOURCE_ROOT:
        return ROOT_LABEL
    return node.name


def _open(node: Node, formatter: ValueFormatter) -> Tuple[str, bool]:
    """``name (Type) {k:v, ...`` and whether any property or signal was written."""
    head = _display_name(node)
    if node.type_name:
        head += f" ({abbreviate_type(node.type_name)})"
    parts: List[str] = formatter.format_properties(node.properties)
    parts.extend(f"$Sig:{sig}" for sig in node.signals)
    return head + " {" + ", ".join(parts), bool(parts)


def render_node(node: Node, formatter: ValueFormatter, indent: str = "") -> str:
    """``name (Type) {key:value, $Sig:..., children: [...]}``

    Rendered from an explicit stack of pending text and (node, indent)
    pairs; deep trees do not hit the recursion limit.
    """
    out: List[str] = []
    pending: List[Union[str, Tuple[Node, str]]] = [(node, indent)]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            out.append(item)
            continue
        current, pad = item
        text, has_parts = _open(current, formatter)
        if not current.children:
            out.append(text + "}")
            continue

        out.append(text + (", " if has_parts else "") + "children: [\n")
        inner = pad + INDENT
        pieces: List[Union[str, Tuple[Node, str]]] = []
        for i, child in enumerate(current.children):
            if i:
                pieces.append(",\n")
            pieces.append(inner)
            pieces.append((child, inner))
        pieces.append("\n" + pad + "]}")
        pending.extend(reversed(pieces))
    return "".join(out)


def serialize(roots: Sequence[Node], document: Document) -> str:
    formatter = ValueFormatter(document)
    return "\n\n".join(render_node(root, formatter) for root in roots)

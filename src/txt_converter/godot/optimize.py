from __future__ import annotations

from typing import List, Sequence

from .graph import Node, NodeKind


__all__ = ["POSITIONAL_KEYS", "MIN_RUN", "is_similar", "fold_siblings", "optimize"]


POSITIONAL_KEYS = frozenset({"transform", "position", "rotation", "rotation_degrees"})
MIN_RUN = 3

_MISSING = object()


def is_similar(a: Node, b: Node) -> bool:
    """Shallow structural match used to detect repeated siblings.

    Children are only compared by type: they have already been folded, so
    their top-level shape stands in for the whole subtree.
    """
    if a.type_name != b.type_name:
        return False
    if len(a.children) != len(b.children):
        return False
    for key in a.properties.keys() | b.properties.keys():
        if key in POSITIONAL_KEYS:
            continue
        if a.properties.get(key, _MISSING) != b.properties.get(key, _MISSING):
            return False
    return all(ca.type_name == cb.type_name for ca, cb in zip(a.children, b.children))


def _folded(run: Sequence[Node]) -> Node:
    first = run[0]
    count = len(run)
    properties = {
        k: v for k, v in first.properties.items() if k not in POSITIONAL_KEYS
    }
    properties["Layout"] = f'"{count} similar siblings, per-instance transforms omitted"'
    return Node(
        name=f"{count}x {first.type_name or 'Node'}",
        kind=NodeKind.FOLDED_GROUP,
        type_name=first.type_name,
        properties=properties,
        children=list(first.children),
        signals=list(first.signals),
    )


def _fold_runs(nodes: Sequence[Node]) -> List[Node]:
    out: List[Node] = []
    i = 0
    while i < len(nodes):
        first = nodes[i]
        j = i + 1
        while j < len(nodes) and is_similar(first, nodes[j]):
            j += 1
        run = nodes[i:j]
        if len(run) >= MIN_RUN:
            out.append(_folded(run))
        else:
            out.extend(run)
        i = j
    return out


def fold_siblings(nodes: Sequence[Node]) -> List[Node]:
    """Collapse maximal runs of >= MIN_RUN similar adjacent nodes.

    Each node's own children are folded first (post-order). The walk uses an
    explicit stack, so nesting depth is not bounded by the recursion limit.
    """
    order: List[Node] = []
    stack = list(nodes)
    while stack:
        node = stack.pop()
        order.append(node)
        stack.extend(node.children)
    # every parent precedes its descendants in ``order``
    for node in reversed(order):
        node.children = _fold_runs(node.children)
    return _fold_runs(nodes)


def optimize(roots: Sequence[Node]) -> List[Node]:
    return fold_siblings(roots)

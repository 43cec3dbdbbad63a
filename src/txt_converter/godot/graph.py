from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


__all__ = ["NodeKind", "Node", "Document"]


class NodeKind(str, Enum):
    NODE = "node"
    SUB_RESOURCE = "sub_resource"
    RESOURCE_ROOT = "resource"
    FOLDED_GROUP = "folded_group"


@dataclass
class Node:
    """One entity of a parsed scene/resource document.

    Scene nodes own their ``children``. Sub-resources are never parented;
    they are reached through ``SubResource(id)`` values and rendered inline
    at every reference site.
    """

    name: str
    kind: NodeKind = NodeKind.NODE
    type_name: Optional[str] = None
    # raw, unformatted values in the order they were read
    properties: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)
    signals: List[str] = field(default_factory=list)


@dataclass
class Document:
    """Parsed document plus the lookup tables built while reading it."""

    roots: List[Node] = field(default_factory=list)
    # ext_resource id -> alias, read-only once pass 1 is done
    aliases: Dict[str, str] = field(default_factory=dict)
    # sub_resource id -> Node
    sub_resources: Dict[str, Node] = field(default_factory=dict)

from __future__ import annotations

import posixpath
from typing import Dict, Iterable, List, Optional

from .graph import Document, Node, NodeKind
from .tokens import Header, Property, Token, tokenize
from .values import abbreviate_type


__all__ = [
    "IGNORED_KEYS",
    "SCRIPT_EXTENSIONS",
    "SCENE_EXTENSIONS",
    "make_alias",
    "collect_aliases",
    "build_document",
    "parse",
]


IGNORED_KEYS = frozenset(
    {"uid", "load_steps", "format", "q_index", "node_paths", "skeleton"}
)
IGNORED_PREFIXES = ("metadata/",)
SCRIPT_EXTENSIONS = (".gd", ".cs")
SCENE_EXTENSIONS = (".tscn", ".scn")
# header attributes that carry information worth keeping on the node
KEPT_NODE_ATTRS = ("instance", "groups")

ROOT_PARENTS = (None, "", ".")


def _stem(path: str) -> str:
    base = posixpath.basename(path.replace("\\", "/"))
    stem, _ = posixpath.splitext(base)
    return stem or base


def make_alias(rid: str, path: Optional[str], type_name: Optional[str], file_name: str = "") -> str:
    """Readable stand-in for ``ExtResource(rid)``."""
    if path:
        lower = path.lower()
        if lower.endswith(SCRIPT_EXTENSIONS):
            return "$Scr_" + _stem(path)
        if lower.endswith(SCENE_EXTENSIONS):
            return "$Scn_" + _stem(path)
        return "$Res_" + _stem(path)
    hint = abbreviate_type(type_name) or _stem(file_name) or "Unknown"
    return f"$Ext_{hint}_{rid}"


def collect_aliases(tokens: Iterable[Token], file_name: str = "") -> Dict[str, str]:
    """Pass 1: alias every ``ext_resource`` declaration in the document.

    Runs over the whole document first since references may precede the
    declaration they point at.
    """
    aliases: Dict[str, str] = {}
    for tok in tokens:
        if isinstance(tok, Header) and tok.keyword == "ext_resource":
            rid = tok.get("id")
            if rid is None:
                continue
            aliases[rid] = make_alias(rid, tok.get("path"), tok.get("type"), file_name)
    return aliases


def _keep_property(key: str) -> bool:
    return key not in IGNORED_KEYS and not key.startswith(IGNORED_PREFIXES)


class _TreeBuilder:
    """Pass 2 state: current section plus the node-path table."""

    def __init__(self, document: Document, file_name: str) -> None:
        self.document = document
        self.file_name = file_name
        self.paths: Dict[str, Node] = {}
        self.resource_type: Optional[str] = None
        self.current: Optional[Node] = None

    def header(self, tok: Header) -> None:
        self.current = None
        handler = getattr(self, "_on_" + tok.keyword, None)
        if handler is not None:
            handler(tok)

    def prop(self, tok: Property) -> None:
        if self.current is not None and _keep_property(tok.key):
            self.current.properties[tok.key] = tok.value

    # ------------------------------------------------------------------
    def _on_gd_resource(self, tok: Header) -> None:
        self.resource_type = tok.get("type")

    def _on_node(self, tok: Header) -> None:
        name = tok.get("name") or ""
        node = Node(name=name, kind=NodeKind.NODE, type_name=tok.get("type"))
        for attr in KEPT_NODE_ATTRS:
            if tok.get(attr) is not None:
                node.properties[attr] = tok.attrs[attr]

        parent = tok.get("parent")
        path = name if parent in ROOT_PARENTS else f"{parent}/{name}"
        self.paths[path] = node

        owner = None if parent in ROOT_PARENTS else self.paths.get(parent)
        # unknown parent paths degrade to an extra root
        if owner is None:
            self._add_root(node)
        else:
            owner.children.append(node)
        self.current = node

    def _on_sub_resource(self, tok: Header) -> None:
        rid = tok.get("id")
        node = Node(name="SubResource", kind=NodeKind.SUB_RESOURCE, type_name=tok.get("type"))
        if rid is not None:
            self.document.sub_resources[rid] = node
        self.current = node

    def _on_resource(self, tok: Header) -> None:
        node = Node(
            name="RootResource",
            kind=NodeKind.RESOURCE_ROOT,
            type_name=self.resource_type or self.file_name or None,
        )
        self._add_root(node)
        self.current = node

    def _on_connection(self, tok: Header) -> None:
        signal = tok.get("signal")
        source = tok.get("from")
        target = tok.get("to")
        method = tok.get("method")

        node = self.paths.get(source) if source is not None else None
        if node is None and source == "." and self.document.roots:
            node = self.document.roots[0]
        if node is not None:
            node.signals.append(f"{signal}->{target}.{method}")

    def _add_root(self, node: Node) -> None:
        self.document.roots.append(node)


def build_document(tokens: Iterable[Token], aliases: Dict[str, str], file_name: str = "") -> Document:
    """Pass 2: build the node tree and the sub-resource cache."""
    document = Document(aliases=aliases)
    builder = _TreeBuilder(document, file_name)
    for tok in tokens:
        if isinstance(tok, Header):
            builder.header(tok)
        else:
            builder.prop(tok)
    return document


def parse(content: str, file_name: str = "") -> Document:
    tokens: List[Token] = list(tokenize(content))
    aliases = collect_aliases(tokens, file_name)
    return build_document(tokens, aliases, file_name)

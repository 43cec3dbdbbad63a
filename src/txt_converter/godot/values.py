from __future__ import annotations

import math
import re
from typing import AbstractSet, Dict, List, Mapping, Optional, Union

import numpy as np

from .graph import Document, Node


__all__ = [
    "TYPE_ABBREVIATIONS",
    "KEY_ABBREVIATIONS",
    "abbreviate_type",
    "short_key",
    "parse_number",
    "clean_number",
    "ValueFormatter",
]


TYPE_ABBREVIATIONS: Dict[str, str] = {
    "MeshInstance3D": "Mesh",
    "MeshInstance2D": "Mesh2D",
    "CollisionShape3D": "ColShape",
    "CollisionShape2D": "ColShape2D",
    "CollisionPolygon3D": "ColPoly",
    "CollisionPolygon2D": "ColPoly2D",
    "StaticBody3D": "StaticBody",
    "StaticBody2D": "StaticBody2D",
    "CharacterBody3D": "CharBody",
    "CharacterBody2D": "CharBody2D",
    "RigidBody3D": "RigidBody",
    "RigidBody2D": "RigidBody2D",
    "Area3D": "Area",
    "Node3D": "N3D",
    "Node2D": "N2D",
    "Sprite2D": "Sprite",
    "Sprite3D": "Sprite3D",
    "AnimatedSprite2D": "AnimSprite",
    "AnimationPlayer": "AnimPlayer",
    "AnimationTree": "AnimTree",
    "AudioStreamPlayer": "Audio",
    "AudioStreamPlayer2D": "Audio2D",
    "AudioStreamPlayer3D": "Audio3D",
    "DirectionalLight3D": "DirLight",
    "OmniLight3D": "OmniLight",
    "SpotLight3D": "SpotLight",
    "WorldEnvironment": "WorldEnv",
    "Camera3D": "Cam",
    "Camera2D": "Cam2D",
    "GPUParticles3D": "Particles",
    "GPUParticles2D": "Particles2D",
    "NavigationRegion3D": "NavRegion",
    "NavigationAgent3D": "NavAgent",
    "StandardMaterial3D": "StdMat",
    "ShaderMaterial": "ShaderMat",
    "BoxShape3D": "BoxShape",
    "SphereShape3D": "SphereShape",
    "CapsuleShape3D": "CapsuleShape",
    "CylinderShape3D": "CylShape",
    "ConcavePolygonShape3D": "ConcaveShape",
    "ConvexPolygonShape3D": "ConvexShape",
    "RectangleShape2D": "RectShape",
    "CircleShape2D": "CircleShape",
    "PackedScene": "Scene",
    "Texture2D": "Tex",
    "CompressedTexture2D": "Tex",
    "ImageTexture": "ImgTex",
    "AudioStream": "Stream",
    "VBoxContainer": "VBox",
    "HBoxContainer": "HBox",
    "MarginContainer": "Margin",
    "TextureRect": "TexRect",
    "ColorRect": "ColRect",
    "RichTextLabel": "RichLabel",
}

KEY_ABBREVIATIONS: Dict[str, str] = {
    "transform": "xt",
    "position": "pos",
    "rotation_degrees": "rot",
    "material_override": "mat",
    "collision_layer": "layer",
    "collision_mask": "mask",
}

SUB_RESOURCE_REF = re.compile(r'SubResource\(\s*"?([^"()\s]+)"?\s*\)')
EXT_RESOURCE_REF = re.compile(r'ExtResource\(\s*"?([^"()\s]+)"?\s*\)')
VECTOR_PATTERN = re.compile(r"Vector[234]i?\((.*)\)", re.DOTALL)
COLOR_PATTERN = re.compile(r"Color\((.*)\)", re.DOTALL)
TRANSFORM_PATTERN = re.compile(r"Transform3D\((.*)\)", re.DOTALL)
INT_LITERAL = re.compile(r"[+-]?\d+")
# nesting limit for inline sub-resource expansion; deeper references stay as written
MAX_INLINE_DEPTH = 32


def abbreviate_type(type_name: Optional[str]) -> str:
    if not type_name:
        return ""
    return TYPE_ABBREVIATIONS.get(type_name, type_name)


def short_key(key: str) -> str:
    return KEY_ABBREVIATIONS.get(key, key)


def parse_number(text: str) -> Optional[float]:
    """Return the finite float ``text`` spells, else None."""
    text = text.strip()
    # float() accepts "1_000"; Godot never writes that.
    if not text or "_" in text:
        return None
    try:
        num = float(text)
    except ValueError:
        return None
    return num if math.isfinite(num) else None


def clean_number(value: Union[str, float]) -> str:
    """Normalize a numeric token.

    ``0`` and ``1`` render bare, integral values lose their fractional part,
    everything else keeps at most two fractional digits. Strings that are
    not finite numbers come back unchanged.
    """
    if isinstance(value, str):
        # integer literals skip float() and keep every digit
        if INT_LITERAL.fullmatch(value.strip()):
            try:
                return str(int(value))
            except ValueError:
                # past the interpreter's int string-conversion digit limit
                return value
        num = parse_number(value)
        if num is None:
            return value
    else:
        num = float(value)
        if not math.isfinite(num):
            return repr(num)

    if num == 0:
        return "0"
    if num == 1:
        return "1"
    if num.is_integer():
        return str(int(num))
    out = f"{num:.2f}".rstrip("0").rstrip(".")
    return "0" if out in ("-0", "") else out


def _bracket_list(inner: str) -> str:
    if not inner.strip():
        return "[]"
    return "[" + ",".join(clean_number(c.strip()) for c in inner.split(",")) + "]"


def _translation(inner: str) -> Optional[str]:
    parts = inner.split(",")
    if len(parts) != 12:
        return None
    if any(parse_number(p) is None for p in parts):
        return None
    # rows 0-2 hold the basis, row 3 the origin
    m = np.asarray([p.strip() for p in parts]).reshape(4, 3)
    return "[" + ",".join(clean_number(str(c)) for c in m[3]) + "]"


def _is_quoted(text: str) -> bool:
    return len(text) >= 2 and text.startswith('"') and text.endswith('"')


class ValueFormatter:
    """Render raw property values against one document's lookup tables."""

    def __init__(self, document: Document) -> None:
        self.aliases: Mapping[str, str] = document.aliases
        self.sub_resources: Mapping[str, Node] = document.sub_resources

    def format_properties(
        self, properties: Mapping[str, str], expanding: AbstractSet[str] = frozenset()
    ) -> List[str]:
        return [
            f"{short_key(k)}:{self.format(v, expanding)}" for k, v in properties.items()
        ]

    def inline(self, rid: str, node: Node, expanding: AbstractSet[str] = frozenset()) -> str:
        body = "{" + ", ".join(self.format_properties(node.properties, expanding | {rid})) + "}"
        return abbreviate_type(node.type_name) + body

    def format(self, value: str, expanding: AbstractSet[str] = frozenset()) -> str:
        """Format one raw value.

        ``expanding`` holds the sub-resource ids currently being inlined; a
        reference back into that set is left as written.
        """
        text = value.strip()

        m = SUB_RESOURCE_REF.fullmatch(text)
        if m:
            rid = m.group(1)
            node = self.sub_resources.get(rid)
            if node is not None and self._expandable(rid, expanding):
                return self.inline(rid, node, expanding)

        m = EXT_RESOURCE_REF.fullmatch(text)
        if m and m.group(1) in self.aliases:
            return self.aliases[m.group(1)]

        m = VECTOR_PATTERN.fullmatch(text)
        if m:
            return _bracket_list(m.group(1))

        m = COLOR_PATTERN.fullmatch(text)
        if m:
            return _bracket_list(m.group(1))

        m = TRANSFORM_PATTERN.fullmatch(text)
        if m:
            translated = _translation(m.group(1))
            if translated is not None:
                return translated

        if _is_quoted(text):
            return value

        if parse_number(text) is not None or INT_LITERAL.fullmatch(text):
            return clean_number(text)

        if "Resource(" in text:
            return self._substitute(text, expanding)
        return value

    @staticmethod
    def _expandable(rid: str, expanding: AbstractSet[str]) -> bool:
        return rid not in expanding and len(expanding) < MAX_INLINE_DEPTH

    def _substitute(self, text: str, expanding: AbstractSet[str]) -> str:
        """Replace references embedded in arrays, dictionaries and constructors."""

        def ext(m: re.Match) -> str:
            return self.aliases.get(m.group(1), m.group(0))

        def sub(m: re.Match) -> str:
            rid = m.group(1)
            node = self.sub_resources.get(rid)
            if node is None or not self._expandable(rid, expanding):
                return m.group(0)
            return self.inline(rid, node, expanding)

        text = EXT_RESOURCE_REF.sub(ext, text)
        return SUB_RESOURCE_REF.sub(sub, text)

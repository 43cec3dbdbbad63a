import pytest

from txt_converter.godot.graph import Document, Node, NodeKind
from txt_converter.godot.values import (
    ValueFormatter,
    abbreviate_type,
    clean_number,
    short_key,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0.0", "0"),
        ("1.0", "1"),
        ("3.14159", "3.14"),
        ("7", "7"),
        ("-0.0", "0"),
        ("-2.5", "-2.5"),
        ("0.50", "0.5"),
        ("0.001", "0"),
        ("-0.004", "0"),
        ("1e3", "1000"),
        ("12.999", "13"),
        ("abc", "abc"),
        ("1.2.3", "1.2.3"),
        ("inf", "inf"),
        ("1_000", "1_000"),
        ("9007199254740993", "9007199254740993"),
        ("-9223372036854775807", "-9223372036854775807"),
        ("+12", "12"),
        ("-0", "0"),
        ("", ""),
    ],
)
def test_clean_number(raw, expected):
    assert clean_number(raw) == expected


def test_clean_number_accepts_floats():
    assert clean_number(5.0) == "5"
    assert clean_number(0.125) == "0.12"


def _formatter(aliases=None, subs=None):
    return ValueFormatter(Document(aliases=dict(aliases or {}), sub_resources=dict(subs or {})))


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Transform3D(1, 0, 0, 0, 1, 0, 0, 0, 1, 5, 6, 7)", "[5,6,7]"),
        ("Transform3D(0.5, 0, 0, 0, 2, 0, 0, 0, 1, 1.25, -3.333, 0)", "[1.25,-3.33,0]"),
        ("Vector3(1.0, 2.5, -0.0)", "[1,2.5,0]"),
        ("Vector2(3.14159, 0)", "[3.14,0]"),
        ("Vector2i(4, 8)", "[4,8]"),
        ("Vector2i(9007199254740993, 1)", "[9007199254740993,1]"),
        ("Transform3D(1, 0, 0, 0, 1, 0, 0, 0, 1, 9007199254740993, 0, 2.5)", "[9007199254740993,0,2.5]"),
        ("Color(1, 0.5, 0.25, 1)", "[1,0.5,0.25,1]"),
        ('"Hello, world"', '"Hello, world"'),
        ("true", "true"),
        ("2.0", "2"),
        ("SHADOW_ON", "SHADOW_ON"),
    ],
)
def test_format_value_rules(raw, expected):
    assert _formatter().format(raw) == expected


def test_transform_with_wrong_arity_passes_through():
    raw = "Transform3D(1, 0, 0, 0, 1, 0)"
    assert _formatter().format(raw) == raw


def test_transform_with_non_numeric_component_passes_through():
    raw = "Transform3D(1, 0, 0, 0, 1, 0, 0, 0, 1, x, 6, 7)"
    assert _formatter().format(raw) == raw


def test_ext_resource_alias_substitution():
    fmt = _formatter(aliases={"1_abc": "$Res_icon"})
    assert fmt.format('ExtResource("1_abc")') == "$Res_icon"
    assert fmt.format("ExtResource(1_abc)") == "$Res_icon"


def test_unknown_references_pass_through():
    fmt = _formatter()
    assert fmt.format('ExtResource("9")') == 'ExtResource("9")'
    assert fmt.format('SubResource("9")') == 'SubResource("9")'


def test_sub_resource_inlined_with_type():
    box = Node(
        name="SubResource",
        kind=NodeKind.SUB_RESOURCE,
        type_name="BoxShape3D",
        properties={"size": "Vector3(2, 1, 2)"},
    )
    fmt = _formatter(subs={"Box_1": box})
    assert fmt.format('SubResource("Box_1")') == "BoxShape{size:[2,1,2]}"


def test_nested_sub_resources_expand_recursively():
    tex = Node(name="SubResource", kind=NodeKind.SUB_RESOURCE, type_name="GradientTexture2D",
               properties={"width": "64"})
    mat = Node(name="SubResource", kind=NodeKind.SUB_RESOURCE, type_name="StandardMaterial3D",
               properties={"albedo_texture": 'SubResource("tex")', "metallic": "0.25"})
    fmt = _formatter(subs={"tex": tex, "mat": mat})
    assert (
        fmt.format('SubResource("mat")')
        == "StdMat{albedo_texture:GradientTexture2D{width:64}, metallic:0.25}"
    )


def test_self_referencing_sub_resource_terminates():
    loop = Node(name="SubResource", kind=NodeKind.SUB_RESOURCE, type_name="Resource",
                properties={"next": 'SubResource("a")'})
    fmt = _formatter(subs={"a": loop})
    assert fmt.format('SubResource("a")') == 'Resource{next:SubResource("a")}'


def test_references_inside_arrays_are_substituted():
    shape = Node(name="SubResource", kind=NodeKind.SUB_RESOURCE, type_name="SphereShape3D",
                 properties={"radius": "0.5"})
    fmt = _formatter(aliases={"1": "$Res_rock"}, subs={"s": shape})
    raw = '[ExtResource("1"), SubResource("s"), ExtResource("1")]'
    assert fmt.format(raw) == "[$Res_rock, SphereShape{radius:0.5}, $Res_rock]"


def test_abbreviations():
    assert abbreviate_type("MeshInstance3D") == "Mesh"
    assert abbreviate_type("CollisionShape3D") == "ColShape"
    assert abbreviate_type("MyCustomNode") == "MyCustomNode"
    assert abbreviate_type(None) == ""
    assert short_key("transform") == "xt"
    assert short_key("rotation_degrees") == "rot"
    assert short_key("collision_mask") == "mask"
    assert short_key("visible") == "visible"

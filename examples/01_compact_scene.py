from txt_converter import compact
from txt_converter.godot import optimize, parse, serialize


SCENE = """\
[gd_scene load_steps=5 format=3 uid="uid://c4pl0"]

[ext_resource type="Script" path="res://player/player.gd" id="1_pl"]
[ext_resource type="PackedScene" path="res://props/crate.tscn" id="2_cr"]
[ext_resource type="Texture2D" path="res://art/floor.png" id="3_fl"]

[sub_resource type="CapsuleShape3D" id="Capsule_1"]
radius = 0.35
height = 1.8

[sub_resource type="StandardMaterial3D" id="Mat_1"]
albedo_texture = ExtResource("3_fl")
albedo_color = Color(0.8, 0.8, 0.8, 1)

[node name="World" type="Node3D"]

[node name="Player" type="CharacterBody3D" parent="."]
transform = Transform3D(1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 1.05, 4.333)
script = ExtResource("1_pl")

[node name="Shape" type="CollisionShape3D" parent="Player"]
shape = SubResource("Capsule_1")

[node name="Floor" type="MeshInstance3D" parent="."]
material_override = SubResource("Mat_1")

[node name="Crate1" parent="." instance=ExtResource("2_cr")]
transform = Transform3D(1, 0, 0, 0, 1, 0, 0, 0, 1, 2, 0, 0)

[node name="Crate2" parent="." instance=ExtResource("2_cr")]
transform = Transform3D(1, 0, 0, 0, 1, 0, 0, 0, 1, 3, 0, 0)

[node name="Crate3" parent="." instance=ExtResource("2_cr")]
transform = Transform3D(1, 0, 0, 0, 1, 0, 0, 0, 1, 4, 0, 0)

[node name="Crate4" parent="." instance=ExtResource("2_cr")]
transform = Transform3D(1, 0, 0, 0, 1, 0, 0, 0, 1, 5, 0, 0)

[connection signal="ready" from="Player" to="." method="_on_player_ready"]
"""

print(compact(SCENE, "world.tscn"))
print()

# The same thing step by step: parse, fold repeated siblings, render.
doc = parse(SCENE, "world.tscn")
print("aliases:", doc.aliases)
print("sub-resources:", sorted(doc.sub_resources))
roots = optimize(doc.roots)
print(f"{len(doc.roots)} roots, {len(roots)} after folding")

text = serialize(roots, doc)
ratio = len(text) / len(SCENE)
print(f"{len(SCENE)} -> {len(text)} chars ({ratio:.0%})")
assert "4x " in text and "ExtResource" not in text

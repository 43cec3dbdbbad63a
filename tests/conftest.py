from pathlib import Path

import pytest


def write(root: Path, rel: str, text: str = "") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def godot_project(tmp_path):
    """Small Godot-like tree with a nested duplicate file name and ignored folders."""
    root = tmp_path / "demo"
    write(root, "project.godot", "[application]\nconfig/name=\"demo\"\n")
    write(root, "README.md", "# Demo\n\n\n\nnotes\n")
    write(root, "main.gd", "extends Node\n\n\n\n# entry\nfunc _ready():\n    pass\n")
    write(root, "enemies/main.gd", "extends Node3D\n")
    write(root, "scenes/level.tscn",
          '[gd_scene format=3]\n\n[node name="Level" type="Node3D"]\nvisible = true\n')
    write(root, "scenes/level.tscn.import", "[remap]\n")
    write(root, "art/icon.png", "not really a png")
    write(root, ".godot/cache.gd", "ignored\n")
    return root

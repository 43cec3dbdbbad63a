import logging
import tempfile
from pathlib import Path

from txt_converter import (
    ConvertOptions,
    CompressionLevel,
    Settings,
    convert_project,
    scan_files,
    select_for_merge,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


FILES = {
    "project.godot": '[application]\nconfig/name="Demo"\n',
    "README.md": "# Demo\n\nA tiny project.\n",
    "player/player.gd": (
        "extends CharacterBody3D\n\n\n\n"
        "# Movement speed in m/s\n"
        "const SPEED = 5.0  # tuned by hand\n\n"
        "func _physics_process(delta):\n"
        "    move_and_slide()\n"
    ),
    "enemy/player.gd": "extends Node3D\n",
    "levels/main.tscn": (
        '[gd_scene format=3]\n\n'
        '[node name="Main" type="Node3D"]\n\n'
        '[node name="Sun" type="DirectionalLight3D" parent="."]\n'
        "shadow_enabled = true\n"
    ),
    "addons/big_plugin/plugin.gd": "# third party code\n" * 50,
    ".godot/imported/cache.gd": "ignored\n",
}

with tempfile.TemporaryDirectory() as tmp:
    root = Path(tmp) / "demo"
    for rel, text in FILES.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    settings = Settings(
        source_dir=str(root),
        preset="auto",
        compression="maximum",
        generate_structure=True,
        stub_patterns=("addons/*",),
    )
    print("preset:", settings.resolve_preset().name)
    extensions, ignored = settings.resolve_filters()

    files = scan_files(root, extensions, ignored)
    merge = select_for_merge(files, root, settings.stub_patterns)
    result = convert_project(
        root,
        files,
        ConvertOptions.from_settings(settings, ignored),
        merge_selection=merge,
        progress=lambda done, total, msg: print(f"[{done}/{total}] {msg}"),
    )

    for source, dest in result.converted.items():
        print(f"{source.relative_to(root).as_posix():32s} -> {dest.name}")

    print()
    print(result.structure_file.read_text(encoding="utf-8"))
    print(result.merged_file.read_text(encoding="utf-8"))
    assert result.merged_file.name == "_demo_Full_Source_code.txt"
    assert ConvertOptions.from_settings(settings).compression is CompressionLevel.MAXIMUM

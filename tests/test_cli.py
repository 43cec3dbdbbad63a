import logging

import pytest

from txt_converter.cli import build_parser, main
from txt_converter.constants import OUTPUT_DIR_NAME, REPORT_STRUCTURE_FILE
from txt_converter.presets import GODOT
from txt_converter.settings import load_settings

from conftest import write


@pytest.fixture(autouse=True)
def restore_logging():
    # main() reconfigures the root logger; put the test runner's handlers back
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_convert_with_autodetected_preset(godot_project, tmp_path):
    cfg = tmp_path / "saved.yaml"
    rc = main([
        "convert", str(godot_project),
        "--preset", "auto",
        "--compression", "maximum",
        "--structure",
        "--stub", "enemies/*",
        "--save-config", str(cfg),
    ])
    assert rc == 0

    out = godot_project / OUTPUT_DIR_NAME
    assert (out / REPORT_STRUCTURE_FILE).read_text(encoding="utf-8").count("(Flat Structure Mode)") == 1
    assert (out / "level.tscn.txt").read_text(encoding="utf-8") == "Level (N3D) {visible:true}"
    assert (out / "project.godot.txt").exists()
    assert not any("cache" in p.name for p in out.iterdir())

    saved = load_settings(cfg)
    assert saved.preset == "auto"
    assert saved.compression == "maximum"
    assert saved.stub_patterns == ("enemies/*",)


def test_convert_from_config_file(godot_project, tmp_path):
    cfg = write(
        tmp_path,
        "settings.yaml",
        f"source_dir: {godot_project.as_posix()}\nextensions: [gd]\nignored_folders: [.godot]\n"
        "compression: none\ngenerate_merged: false\n",
    )
    assert main(["convert", "--config", str(cfg), "--ext", "tscn"]) == 0
    out = godot_project / OUTPUT_DIR_NAME
    assert sorted(p.name for p in out.iterdir()) == ["README.md", "level.tscn.txt"]


def test_convert_errors_return_1(tmp_path):
    assert main(["convert"]) == 1
    assert main(["convert", str(tmp_path / "missing"), "--ext", "gd"]) == 1
    assert main(["convert", str(tmp_path), "--preset", "Cobol"]) == 1
    assert main(["convert", str(tmp_path), "--ext", "gd"]) == 1  # nothing to convert


def test_scan_prints_relative_paths(godot_project, capsys):
    assert main(["scan", str(godot_project), "--preset", GODOT]) == 0
    printed = capsys.readouterr().out.splitlines()
    assert printed == [
        "README.md",
        "enemies/main.gd",
        "main.gd",
        "project.godot",
        "scenes/level.tscn",
    ]


def test_compact_command(godot_project, tmp_path, capsys):
    scene = godot_project / "scenes" / "level.tscn"
    assert main(["compact", str(scene)]) == 0
    assert capsys.readouterr().out == "Level (N3D) {visible:true}\n"

    dest = tmp_path / "level.txt"
    assert main(["compact", str(scene), "-o", str(dest)]) == 0
    assert dest.read_text(encoding="utf-8") == "Level (N3D) {visible:true}\n"

    assert main(["compact", str(tmp_path / "nope.tscn")]) == 1


def test_presets_command(godot_project, tmp_path, capsys):
    assert main(["presets"]) == 0
    out = capsys.readouterr().out
    assert f"{GODOT}: gd, tscn" in out

    assert main(["presets", "--detect", str(godot_project)]) == 0
    assert capsys.readouterr().out.strip() == GODOT

    assert main(["presets", "--detect", str(tmp_path / "empty")]) == 1

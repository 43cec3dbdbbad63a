from datetime import datetime
from pathlib import Path

import pytest

from txt_converter.report import (
    STATUS_MERGED,
    STATUS_SKIPPED,
    STATUS_STUB,
    build_merged_dump,
    build_structure_report,
    merged_file_name,
)

from conftest import write


NOW = datetime(2024, 5, 17, 9, 30, 0)


@pytest.fixture
def processed(godot_project):
    return [godot_project / "main.gd", godot_project / "scenes" / "level.tscn"]


def test_tree_report_with_legend(godot_project, processed):
    report = build_structure_report(
        godot_project, processed, processed[:1], "none",
        compact_mode=False, ignored_folders=[".godot"], now=NOW,
    )
    lines = report.splitlines()
    assert lines[:2] == ["# Project Structure", "Generated: 2024-05-17 09:30:00"]
    assert "### Legend:" in lines
    assert "[ROOT] demo" in lines
    assert lines[-1] == "```"

    assert any(l.endswith(f"[FILE] main.gd (48 B) {STATUS_MERGED}") for l in lines)
    assert any("[FILE] level.tscn" in l and l.endswith(STATUS_STUB) for l in lines)
    assert any("[FILE] README.md" in l and l.endswith(STATUS_SKIPPED) for l in lines)
    assert any(l.endswith("[DIR] scenes") for l in lines)
    assert any("[FILE] project.godot" in l for l in lines)
    assert not any("[DIR] .godot" in l or ".import" in l for l in lines)


def test_tree_report_lists_directories_first(godot_project, processed):
    report = build_structure_report(godot_project, processed, [], "none", compact_mode=False, now=NOW)
    entries = [l for l in report.splitlines() if l.startswith(("├── ", "└── "))]
    kinds = [l.split()[1] for l in entries]
    assert kinds == sorted(kinds)  # [DIR] sorts before [FILE]
    assert entries[-1].startswith("└── ")


def test_compact_tree_mode_lists_processed_only(godot_project, processed):
    report = build_structure_report(godot_project, processed, [], "smart", now=NOW)
    body = report.split("(Compact Tree Mode)\n", 1)[1]
    assert body.splitlines() == [
        "demo/",
        "  art/",
        "  enemies/",
        "  scenes/",
        "    level.tscn",
        "  main.gd",
    ]


def test_many_unprocessed_files_collapse(tmp_path):
    root = tmp_path / "proj"
    for i in range(7):
        write(root, f"data/f{i}.json", "{}")
    write(root, "data/notes.txt", "")
    keep = write(root, "data/main.py", "x = 1\n")

    report = build_structure_report(root, [keep], [keep], "smart", compact_mode=False, now=NOW)
    assert "  ... (8: .json(7), .txt(1))" in report.splitlines()[-1]

    report = build_structure_report(root, [keep], [keep], "none", compact_mode=False, now=NOW)
    assert "[ ... 8 ignored: .json(7), .txt(1) ... ]" in report


def test_flat_mode(godot_project, processed):
    report = build_structure_report(godot_project, processed, [], "maximum", now=NOW)
    body = report.split("(Flat Structure Mode)\n", 1)[1]
    assert body.splitlines() == ["main.gd", "scenes/level.tscn"]

    report = build_structure_report(
        godot_project, processed, [], "maximum", compact_mode=False, ignored_folders=[".godot"], now=NOW
    )
    body = report.split("(Flat Structure Mode)\n", 1)[1].splitlines()
    assert "README.md [ignore]" in body
    assert "art/icon.png [ignore]" in body
    assert "main.gd" in body
    assert not any("cache.gd" in l for l in body)


def test_merged_file_name():
    assert merged_file_name("demo") == "_demo_Full_Source_code.txt"


def test_merged_dump_verbose_and_compact(tmp_path):
    a_src, b_src = Path("a.gd"), Path("b.gd")
    a_out = write(tmp_path, "a.gd.txt", "print(1)")
    b_out = write(tmp_path, "b.gd.txt", "print(2)")
    converted = {a_src: a_out, b_src: b_out}

    dump = build_merged_dump("demo", converted, {a_src}, "none", now=NOW)
    assert dump == (
        "# Merged project: demo\n"
        "Generated: 2024-05-17 09:30:00\n"
        "\n--- File: a.gd ---\n"
        "print(1)\n"
        "\n--- File: b.gd ---\n"
        "(Stub)\n\n"
    )

    dump = build_merged_dump("demo", converted, {a_src, b_src}, "maximum")
    assert dump == "# Project: demo\n\n\n>>> a.gd\nprint(1)\n\n>>> b.gd\nprint(2)\n"


def test_merged_dump_reports_unreadable_files(tmp_path):
    src = Path("gone.gd")
    dump = build_merged_dump("demo", {src: tmp_path / "gone.gd.txt"}, {src}, "smart")
    assert ">>> gone.gd\n!!! Error: " in dump

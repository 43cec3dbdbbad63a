import os
import subprocess
import sys
from pathlib import Path

import pytest


EXAMPLES_DIR = Path(__file__).resolve().parents[1] / "examples"
REPO_ROOT = EXAMPLES_DIR.parent
# Only run numbered examples (01_*.py, 02_*.py, ...).
EXAMPLE_FILES = sorted(p for p in EXAMPLES_DIR.glob("[0-9][0-9]_*.py") if p.is_file())


def _run(path: Path) -> subprocess.CompletedProcess:
    env = os.environ.copy()
    src_path = str(REPO_ROOT / "src")
    env["PYTHONPATH"] = src_path + os.pathsep + env.get("PYTHONPATH", "")
    env["PYTHONIOENCODING"] = "utf-8"

    result = subprocess.run(
        [sys.executable, str(path)],
        cwd=str(REPO_ROOT),
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8",
        check=False,
    )
    if result.returncode != 0:
        raise AssertionError(
            f"Example failed: {path.name}\n"
            f"stdout:\n{result.stdout}\n"
            f"stderr:\n{result.stderr}"
        )
    return result


@pytest.mark.examples
@pytest.mark.parametrize("path", EXAMPLE_FILES, ids=lambda p: p.name)
def test_example_runs(path: Path) -> None:
    _run(path)


@pytest.mark.examples
def test_compact_scene_example_output() -> None:
    out = _run(EXAMPLES_DIR / "01_compact_scene.py").stdout
    blocks = out.split("\n\n")

    assert blocks[0] == "World (N3D) {}"
    assert blocks[1].startswith(
        "Player (CharBody) {xt:[0,1.05,4.33], script:$Scr_player, "
        "$Sig:ready->.._on_player_ready, children: [\n"
        "  Shape (ColShape) {shape:CapsuleShape{radius:0.35, height:1.8}}"
    )
    assert blocks[2] == (
        "Floor (Mesh) {mat:StdMat{albedo_texture:$Res_floor, albedo_color:[0.8,0.8,0.8,1]}}"
    )
    assert blocks[3].startswith(
        '4x Node {instance:$Scn_crate, Layout:"4 similar siblings, per-instance transforms omitted"}'
    )
    assert "7 roots, 4 after folding" in out

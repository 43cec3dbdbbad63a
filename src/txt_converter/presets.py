"""Project-type presets and auto-detection."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .util import normalize_extensions, parse_list


__all__ = [
    "Preset",
    "MANUAL",
    "load_presets",
    "get_preset",
    "autodetect_preset",
]


MANUAL = "Manual"
GODOT = "Godot Engine"
UNITY = "Unity Engine"
DOTNET = "C# (.NET / Visual Studio)"
JAVA = "Java (Maven/Gradle)"
WEB_JS = "Web (JavaScript / Classic)"
WEB_TS = "Web (TypeScript / React)"
PYTHON = "Python"


@dataclass(frozen=True)
class Preset:
    name: str
    extensions: tuple = ()
    ignored_folders: tuple = ()

    @staticmethod
    def from_mapping(name: str, data: Optional[Mapping[str, Any]]) -> "Preset":
        data = data or {}
        return Preset(
            name=name,
            extensions=normalize_extensions(data.get("extensions")),
            ignored_folders=parse_list(data.get("ignored_folders")),
        )


def load_presets(path: "str | Path | None" = None) -> Dict[str, Preset]:
    """Load presets from a YAML file, or the bundled ``presets.yaml``."""
    if path is None:
        source = "presets.yaml"
        text = resources.files("txt_converter").joinpath(source).read_text(encoding="utf-8")
    else:
        source = str(path)
        try:
            text = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise FileNotFoundError(f"Preset file {source!r} does not exist.")

    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Preset file {source!r} is not valid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError("Preset file must map preset names to settings.")

    return {str(name): Preset.from_mapping(str(name), data) for name, data in raw.items()}


def get_preset(name: str, presets: Optional[Mapping[str, Preset]] = None) -> Preset:
    """Return a preset by name."""
    presets = load_presets() if presets is None else presets
    try:
        return presets[name]
    except KeyError as e:
        raise ValueError(
            f"Unknown preset {name!r}. Available: {tuple(presets.keys())}"
        ) from e


def _has_glob(root: Path, pattern: str) -> bool:
    try:
        return next(root.glob(pattern), None) is not None
    except OSError:
        return False


def autodetect_preset(root: "str | Path") -> Optional[str]:
    """Guess the project type from marker files in ``root`` (not recursive)."""
    root = Path(root)

    def exists(*names: str) -> bool:
        return any((root / n).exists() for n in names)

    if exists("project.godot"):
        return GODOT
    if exists("Assets") and exists("ProjectSettings"):
        return UNITY
    if _has_glob(root, "*.sln") or _has_glob(root, "*.csproj"):
        return DOTNET
    if exists("pom.xml", "build.gradle", "build.gradle.kts"):
        return JAVA
    if exists("requirements.txt", "pyproject.toml", "venv", ".venv"):
        return PYTHON
    if exists("package.json"):
        if exists("tsconfig.json", "vite.config.ts"):
            return WEB_TS
        return WEB_JS
    return None

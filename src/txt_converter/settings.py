from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple
from warnings import warn

import yaml

from .compression import CompressionLevel
from .presets import MANUAL, Preset, autodetect_preset, get_preset
from .util import normalize_extensions, parse_list


AUTO_PRESET = "auto"


@dataclass(frozen=True)
class Settings:
    """Everything a conversion run needs, as stored in a settings file.

    Explicit ``extensions``/``ignored_folders`` win over the preset's lists.
    ``preset="auto"`` picks a preset from marker files in ``source_dir``.
    """

    source_dir: Optional[str] = None
    preset: Optional[str] = None
    extensions: Tuple[str, ...] = ()
    ignored_folders: Tuple[str, ...] = ()
    compression: str = CompressionLevel.SMART.value
    generate_structure: bool = False
    compact_structure: bool = True
    generate_merged: bool = True
    godot_compact: bool = True
    # globs for files that only appear as stubs in the merged dump
    stub_patterns: Tuple[str, ...] = ()

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "Settings":
        known = {f.name for f in fields(Settings)}
        unknown = sorted(set(data) - known)
        if unknown:
            warn(f"Ignoring unknown settings keys: {unknown}", UserWarning, stacklevel=2)
        values: Dict[str, Any] = {k: v for k, v in data.items() if k in known}
        if "extensions" in values:
            values["extensions"] = normalize_extensions(values["extensions"])
        if "ignored_folders" in values:
            values["ignored_folders"] = parse_list(values["ignored_folders"])
        if "stub_patterns" in values:
            values["stub_patterns"] = tuple(str(p) for p in values["stub_patterns"] or ())
        if "compression" in values:
            values["compression"] = CompressionLevel.parse(values["compression"]).value
        return Settings(**values)

    def to_mapping(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ("extensions", "ignored_folders", "stub_patterns"):
            data[key] = list(data[key])
        return data

    def override(self, **changes: Any) -> "Settings":
        """Copy with every non-None change applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return Settings.from_mapping({**asdict(self), **changes}) if changes else self

    def resolve_preset(self, presets: Optional[Mapping[str, Preset]] = None) -> Optional[Preset]:
        name = self.preset
        if name is None or name == MANUAL:
            return None
        if name.lower() == AUTO_PRESET:
            if self.source_dir is None:
                return None
            name = autodetect_preset(self.source_dir)
            if name is None:
                return None
        return get_preset(name, presets)

    def resolve_filters(
        self, presets: Optional[Mapping[str, Preset]] = None
    ) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
        """(extensions, ignored folders) after falling back to the preset."""
        preset = self.resolve_preset(presets)
        extensions = self.extensions or (preset.extensions if preset else ())
        ignored = self.ignored_folders or (preset.ignored_folders if preset else ())
        return extensions, ignored


def load_settings(path: "str | Path") -> Settings:
    """Load settings from a YAML file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise FileNotFoundError(f"Settings file {str(path)!r} does not exist.")
    except yaml.YAMLError as e:
        raise ValueError(f"Settings file {str(path)!r} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Settings file {str(path)!r} must contain a mapping.")
    return Settings.from_mapping(data)


def save_settings(settings: Settings, path: "str | Path") -> Path:
    """Write settings as YAML so the next run can pick them up."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(settings.to_mapping(), f, sort_keys=False, allow_unicode=True)
    return path

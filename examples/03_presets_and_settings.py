import tempfile
from pathlib import Path

from txt_converter import Settings, load_presets, load_settings, save_settings
from txt_converter.compression import AVAILABLE_LEVELS

presets = load_presets()
for name, preset in presets.items():
    print(f"{name:28s} {', '.join(preset.extensions) or '(choose your own)'}")
    if preset.ignored_folders:
        print(f"{'':28s} skips: {', '.join(preset.ignored_folders)}")

print("compression levels:", AVAILABLE_LEVELS)

# Settings override the preset's lists only where they are set.
settings = Settings(preset="Python", extensions=("py", "toml"))
extensions, ignored = settings.resolve_filters()
print("extensions:", extensions)
print("ignored:", ignored)

with tempfile.TemporaryDirectory() as tmp:
    path = save_settings(settings.override(compression="none", generate_structure=True), Path(tmp) / "settings.yaml")
    print(path.read_text(encoding="utf-8"))
    again = load_settings(path)
    print(again)
    assert again.compression == "none" and again.extensions == ("py", "toml")

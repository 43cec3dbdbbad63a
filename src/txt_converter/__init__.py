"""txt_converter public API."""
from .compression import CompressionLevel, compress_text, get_compressor
from .converter import ConversionResult, ConversionTask, ConvertOptions, convert_project
from .godot import compact
from .presets import Preset, autodetect_preset, get_preset, load_presets
from .scanner import scan_files, select_for_merge
from .settings import Settings, load_settings, save_settings
from . import godot

__all__ = [
    "CompressionLevel",
    "ConversionResult",
    "ConversionTask",
    "ConvertOptions",
    "Preset",
    "Settings",
    "autodetect_preset",
    "compact",
    "compress_text",
    "convert_project",
    "get_compressor",
    "get_preset",
    "godot",
    "load_presets",
    "load_settings",
    "save_settings",
    "scan_files",
    "select_for_merge",
]

"""Bundled validated instrument presets (PHQ-9, GAD-7, PSS-10)."""

from riskscore.presets.loader import (
    Preset,
    PresetLoader,
    build_preset,
    compute_preset_hash,
    load_preset,
    load_preset_file,
)

__all__ = [
    "Preset",
    "PresetLoader",
    "build_preset",
    "compute_preset_hash",
    "load_preset",
    "load_preset_file",
]

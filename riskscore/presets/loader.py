"""YAML instrument preset loader with integrity hashing.

A preset file bundles a questionnaire definition and its scoring
configuration:

    id: gad7
    version: "1.0.0"
    questionnaire: {...}
    scoring: {...}
"""

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from riskscore.core.config import settings
from riskscore.schemas.questionnaire import Questionnaire
from riskscore.schemas.scoring_config import ScoringConfig

# Bundled presets live next to this module
PRESETS_DIR = Path(__file__).parent


@dataclass
class Preset:
    """A loaded instrument: questionnaire, scoring config and file hash."""

    id: str
    version: str
    description: str
    questionnaire: Questionnaire
    config: ScoringConfig
    content_hash: str


def compute_preset_hash(content: str) -> str:
    """Compute SHA256 hash of preset file content.

    Used for audit trail to ensure a preset hasn't been modified.

    Args:
        content: Raw YAML content string

    Returns:
        SHA256 hex digest
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _filename(name: str) -> str:
    return name if name.endswith((".yaml", ".yml")) else f"{name}.yaml"


def load_preset_file(
    name: str,
    presets_dir: Path | None = None,
) -> tuple[dict[str, Any], str]:
    """Load a preset YAML file and compute its hash.

    Args:
        name: Preset name or filename (e.g., "gad7" or "gad7.yaml")
        presets_dir: Directory containing presets (defaults to bundled presets)

    Returns:
        Tuple of (parsed preset dict, SHA256 hash)

    Raises:
        FileNotFoundError: If preset file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    if presets_dir is None:
        presets_dir = settings.presets_dir or PRESETS_DIR

    filepath = presets_dir / _filename(name)

    if not filepath.exists():
        raise FileNotFoundError(f"Preset not found: {filepath}")

    content = filepath.read_text(encoding="utf-8")
    preset_hash = compute_preset_hash(content)
    data = yaml.safe_load(content)

    return data, preset_hash


def build_preset(data: dict[str, Any], content_hash: str = "") -> Preset:
    """Build questionnaire and scoring config models from preset data.

    The scoring section inherits ``questionnaire_id`` and ``version`` from the
    preset when it does not set them.

    Raises:
        KeyError: If the questionnaire or scoring section is missing
        pydantic.ValidationError: If either section is invalid
    """
    questionnaire_data = dict(data["questionnaire"])
    questionnaire_data.setdefault("version", data.get("version", "1"))
    questionnaire = Questionnaire.model_validate(questionnaire_data)

    scoring_data = dict(data["scoring"])
    scoring_data.setdefault("id", f"{data['id']}-scoring")
    scoring_data.setdefault("questionnaire_id", questionnaire.id)
    scoring_data.setdefault("version", data.get("version", "1"))
    config = ScoringConfig.model_validate(scoring_data)

    return Preset(
        id=str(data["id"]),
        version=str(data.get("version", "1")),
        description=data.get("description", ""),
        questionnaire=questionnaire,
        config=config,
        content_hash=content_hash,
    )


def load_preset(name: str, presets_dir: Path | None = None) -> Preset:
    """Load and build a preset in one step."""
    data, preset_hash = load_preset_file(name, presets_dir)
    return build_preset(data, preset_hash)


class PresetLoader:
    """Stateful preset loader with caching."""

    def __init__(self, presets_dir: Path | None = None) -> None:
        """Initialize loader.

        Args:
            presets_dir: Directory containing presets
        """
        self.presets_dir = presets_dir or settings.presets_dir or PRESETS_DIR
        self._cache: dict[str, Preset] = {}

    def load(self, name: str, use_cache: bool = True) -> Preset:
        """Load a preset with optional caching.

        Args:
            name: Preset name or filename
            use_cache: Whether to use cached version if available

        Returns:
            Preset
        """
        key = _filename(name)
        if use_cache and key in self._cache:
            return self._cache[key]

        preset = load_preset(key, self.presets_dir)
        self._cache[key] = preset

        return preset

    def clear_cache(self) -> None:
        """Clear the preset cache."""
        self._cache.clear()

    def list_presets(self) -> list[str]:
        """List available preset names."""
        return sorted(f.stem for f in self.presets_dir.glob("*.yaml"))

    def get_preset_info(self, name: str) -> dict[str, Any]:
        """Get metadata about a preset.

        Returns:
            Dict with id, version, description, method, labels and hash
        """
        preset = self.load(name)

        return {
            "id": preset.id,
            "version": preset.version,
            "description": preset.description,
            "method": preset.config.method.value,
            "labels": preset.config.labels,
            "hash": preset.content_hash,
        }

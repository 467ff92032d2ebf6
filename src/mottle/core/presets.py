"""Named growth configurations and preset management."""

from typing import Any, Dict, List, Optional
import json
from pathlib import Path

from .config import GrowthConfig


class Preset:
    """A named set of config overrides."""

    def __init__(
        self,
        name: str,
        overrides: Dict[str, Any],
        description: str = "",
    ) -> None:
        """Initialize a preset.

        Args:
            name: Preset name
            overrides: GrowthConfig fields to replace
            description: Optional description

        Raises:
            ValueError: If overrides name unknown config fields
        """
        GrowthConfig.from_dict(overrides)
        self.name = name
        self.overrides = dict(overrides)
        self.description = description

    def apply(self, base: Optional[GrowthConfig] = None) -> GrowthConfig:
        """Apply this preset on top of a base config.

        Args:
            base: Config to start from (defaults to GrowthConfig())

        Returns:
            New GrowthConfig with the overrides applied
        """
        return (base or GrowthConfig()).replace(**self.overrides)

    def to_dict(self) -> Dict[str, Any]:
        """Convert preset to dictionary for serialization."""
        return {
            "name": self.name,
            "overrides": self.overrides,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Preset":
        """Create preset from dictionary."""
        return cls(
            name=data["name"],
            overrides=data.get("overrides", {}),
            description=data.get("description", ""),
        )


class PresetLibrary:
    """Manages a collection of presets."""

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize preset library.

        Args:
            storage_dir: Directory for storing presets (defaults to 'presets').
                It is only created when a preset is saved.
        """
        self.storage_dir = Path(storage_dir or "presets")
        self._presets: Dict[str, Preset] = {}
        self._load_builtin_presets()

    def _load_builtin_presets(self) -> None:
        """Load built-in presets."""
        self.add_preset(Preset("Default", {}, "Ten seeds on a 1000x1000 canvas"))

        # Always taking the newest frontier cell grows long thin arms
        self.add_preset(
            Preset(
                "Tendrils",
                {"size": 500, "num_seeds": 6, "fuzz": 0.98, "smoothing": 2},
                "Mostly depth-first growth with stringy arms",
            )
        )

        self.add_preset(
            Preset(
                "Blobs",
                {"size": 500, "num_seeds": 12, "fuzz": 0.0, "smoothing": 6},
                "Uniform frontier picks give round patches",
            )
        )

        self.add_preset(
            Preset(
                "Patchwork",
                {"size": 400, "num_seeds": 40, "long_diffusion": 2, "halving": 2.0},
                "Many seeds that settle quickly into flat regions",
            )
        )

        self.add_preset(
            Preset(
                "Pastel Fog",
                {"size": 400, "num_seeds": 4, "max_diffusion": 64, "long_diffusion": 12, "halving": 16.0},
                "Gentle drift with slow decay",
            )
        )

    def add_preset(self, preset: Preset) -> None:
        """Add a preset to the library."""
        self._presets[preset.name] = preset

    def get_preset(self, name: str) -> Optional[Preset]:
        """Get a preset by name.

        Args:
            name: Preset name

        Returns:
            Preset instance or None if not found
        """
        return self._presets.get(name)

    def list_presets(self) -> List[str]:
        """Get list of all preset names."""
        return list(self._presets.keys())

    def save_preset(self, preset: Preset, filename: Optional[str] = None) -> Path:
        """Save a preset to disk.

        Args:
            preset: Preset to save
            filename: Optional filename (defaults to preset name)

        Returns:
            Path of the written file
        """
        if filename is None:
            filename = f"{preset.name.replace(' ', '_').lower()}.json"

        self.storage_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.storage_dir / filename
        with open(filepath, "w") as f:
            json.dump(preset.to_dict(), f, indent=2)
        return filepath

    def load_preset(self, filename: str) -> Preset:
        """Load a preset from disk and add it to the library.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        filepath = self.storage_dir / filename

        with open(filepath, "r") as f:
            data = json.load(f)

        preset = Preset.from_dict(data)
        self.add_preset(preset)
        return preset

    def load_all_presets(self) -> None:
        """Load all presets from the storage directory."""
        if not self.storage_dir.is_dir():
            return
        for filepath in sorted(self.storage_dir.glob("*.json")):
            try:
                self.load_preset(filepath.name)
            except (ValueError, KeyError) as e:
                print(f"Warning: Failed to load preset from {filepath.name}: {e}")

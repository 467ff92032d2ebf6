"""Configuration for diffusion growth runs."""

import dataclasses
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

MAX_SEED = 2**64


@dataclass(frozen=True)
class GrowthConfig:
    """Parameters for a single growth run."""
    size: int = 1000
    num_seeds: int = 10
    max_diffusion: int = 255
    long_diffusion: int = 6
    halving: float = 4.0
    smoothing: int = 4
    fuzz: float = 0.8
    seed: int = 1

    def errors(self) -> List[str]:
        """List every problem with this configuration.

        Returns:
            Human-readable error messages (empty if valid)
        """
        errors = []

        if self.size <= 0:
            errors.append("Size must be positive")

        if self.num_seeds <= 0:
            errors.append("Seed count must be positive")

        if not 0 <= self.max_diffusion <= 255:
            errors.append("Max diffusion must be between 0 and 255")

        if not 0 <= self.long_diffusion <= 255:
            errors.append("Long diffusion must be between 0 and 255")

        if self.long_diffusion > self.max_diffusion:
            errors.append("Long diffusion must not exceed max diffusion")

        if not self.halving > 0:
            errors.append("Halving distance must be positive")

        if self.smoothing < 0:
            errors.append("Smoothing radius must be non-negative")

        if not 0.0 <= self.fuzz <= 1.0:
            errors.append("Fuzz must be between 0.0 and 1.0")

        if not 0 <= self.seed < MAX_SEED:
            errors.append("Random seed must fit in an unsigned 64-bit integer")

        return errors

    def validate(self) -> None:
        """Raise ValueError if the configuration cannot be run."""
        errors = self.errors()
        if errors:
            raise ValueError("Invalid configuration: " + "; ".join(errors))

    def replace(self, **overrides: Any) -> "GrowthConfig":
        """Return a copy with some fields replaced."""
        return dataclasses.replace(self, **overrides)

    def filename(self, directory: Optional[Union[str, Path]] = None) -> str:
        """Build the output image filename encoding every parameter.

        Args:
            directory: Optional directory to prefix

        Returns:
            Filename like 'img-1000-10-255-6-4-4-0.8-1.png'
        """
        name = "img-{}-{}-{}-{}-{}-{}-{}-{}.png".format(
            self.size,
            self.num_seeds,
            self.max_diffusion,
            self.long_diffusion,
            _format_number(self.halving),
            self.smoothing,
            _format_number(self.fuzz),
            self.seed,
        )
        if directory is None:
            return name
        return str(Path(directory) / name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GrowthConfig":
        """Create config from dictionary.

        Missing fields take their defaults.

        Raises:
            ValueError: If data contains unknown fields
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config fields: {', '.join(unknown)}")
        return cls(**data)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def load_config(path: Union[str, Path]) -> GrowthConfig:
    """Load a config from a JSON file."""
    with open(path, "r") as f:
        data = json.load(f)
    return GrowthConfig.from_dict(data)


def save_config(config: GrowthConfig, path: Union[str, Path]) -> None:
    """Save a config to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)

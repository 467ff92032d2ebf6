"""Multi-seed color diffusion growth for procedural mottled-color images."""

__version__ = "0.1.0"

from .core.config import GrowthConfig
from .core.grid import ColorGrid
from .core.growth import ColorGrowth, grow
from .core.presets import Preset, PresetLibrary

__all__ = ["GrowthConfig", "ColorGrid", "ColorGrowth", "grow", "Preset", "PresetLibrary"]

"""Core diffusion growth logic."""

from .config import GrowthConfig, load_config, save_config
from .frontier import FrontierSet, FrontierInvariantError
from .grid import ColorGrid, blend_channel, blend_colors
from .growth import ColorGrowth, diffusion_range, grow
from .image import make_image, save_image, to_image_array
from .presets import Preset, PresetLibrary

__all__ = [
    "GrowthConfig",
    "load_config",
    "save_config",
    "FrontierSet",
    "FrontierInvariantError",
    "ColorGrid",
    "blend_channel",
    "blend_colors",
    "ColorGrowth",
    "diffusion_range",
    "grow",
    "make_image",
    "save_image",
    "to_image_array",
    "Preset",
    "PresetLibrary",
]

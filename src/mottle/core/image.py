"""Rasterizing and saving grown color grids."""

from pathlib import Path
from typing import Optional, Union
import numpy as np
from PIL import Image

from .config import GrowthConfig
from .grid import ColorGrid
from .growth import ProgressCallback, grow


def to_image_array(grid: ColorGrid) -> np.ndarray:
    """Convert a grid to an RGB pixel array.

    A cell at (row, col) becomes the pixel at x=row, y=col. Unfilled cells
    stay black.

    Returns:
        uint8 array of shape (size, size, 3) indexed [y, x, channel]
    """
    return np.ascontiguousarray(np.transpose(grid.colors, (1, 0, 2)))


def make_image(
    config: GrowthConfig,
    progress_callback: Optional[ProgressCallback] = None,
    max_iterations: Optional[int] = None,
) -> np.ndarray:
    """Grow a full image for a configuration and return its pixels."""
    return to_image_array(grow(config, progress_callback, max_iterations))


def save_image(grid: ColorGrid, path: Union[str, Path]) -> str:
    """Write a grid to an image file.

    The format follows the file extension (PNG for the default names).
    Missing parent directories are created.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(to_image_array(grid)).save(path)
    return str(path)


def load_image_array(path: Union[str, Path]) -> np.ndarray:
    """Read an image file back as a uint8 RGB array indexed [y, x, channel]."""
    with Image.open(path) as img:
        return np.asarray(img.convert("RGB"), dtype=np.uint8).copy()

"""Finalized color grid for diffusion growth."""

from typing import Iterator, Optional, Tuple
import numpy as np
import torch
import torch.nn.functional as F

Location = Tuple[int, int]
Color = Tuple[int, int, int]


def blend_channel(c1: int, c2: int) -> int:
    """Average two 8-bit channel values.

    Halves each input and adds back 1 when both least significant bits are
    set, so the result never leaves 0-255.
    """
    return (c1 >> 1) + (c2 >> 1) + (c1 & c2 & 1)


def blend_colors(first: Color, second: Color) -> Color:
    """Blend two colors channel by channel."""
    return (
        blend_channel(first[0], second[0]),
        blend_channel(first[1], second[1]),
        blend_channel(first[2], second[2]),
    )


class ColorGrid:
    """Square grid of committed colors.

    A cell is either unfilled or holds an RGB color. Cells are never
    unfilled again once committed; committing an already filled cell blends
    the incoming color into the stored one.
    """

    def __init__(self, size: int) -> None:
        """Initialize an empty grid.

        Args:
            size: Number of rows and columns

        Raises:
            ValueError: If size is not positive
        """
        if size <= 0:
            raise ValueError(f"Grid size must be positive, got {size}")

        self.size = size
        self._colors = np.zeros((size, size, 3), dtype=np.uint8)
        self._filled = np.zeros((size, size), dtype=bool)
        self._visits = np.zeros((size, size), dtype=np.int32)
        self._population = 0

        self._torch_input = torch.zeros(1, 1, size, size, dtype=torch.float32)
        self._torch_kernel = (
            torch.tensor([[0, 1, 0], [1, 0, 1], [0, 1, 0]], dtype=torch.float32).unsqueeze(0).unsqueeze(0)
        )

    @property
    def colors(self) -> np.ndarray:
        """Color array indexed [row, col, channel]."""
        return self._colors

    @property
    def filled(self) -> np.ndarray:
        """Boolean mask of committed cells indexed [row, col]."""
        return self._filled

    @property
    def visits(self) -> np.ndarray:
        """Number of commits per cell indexed [row, col]."""
        return self._visits

    @property
    def shape(self) -> Tuple[int, int]:
        """Get grid dimensions as (rows, cols)."""
        return (self.size, self.size)

    @property
    def population(self) -> int:
        """Number of committed cells."""
        return self._population

    @property
    def capacity(self) -> int:
        """Total number of cells."""
        return self.size * self.size

    def __len__(self) -> int:
        return self._population

    def in_bounds(self, row: int, col: int) -> bool:
        """Whether (row, col) lies on the grid."""
        return 0 <= row < self.size and 0 <= col < self.size

    def _check_bounds(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise IndexError(f"Location ({row}, {col}) out of bounds")

    def is_filled(self, row: int, col: int) -> bool:
        """Whether the cell has been committed. Out-of-bounds cells are not."""
        return self.in_bounds(row, col) and bool(self._filled[row, col])

    def get_color(self, row: int, col: int) -> Optional[Color]:
        """Get the committed color of a cell.

        Args:
            row: Row coordinate
            col: Column coordinate

        Returns:
            The (r, g, b) color, or None if the cell is unfilled

        Raises:
            IndexError: If coordinates are out of bounds
        """
        self._check_bounds(row, col)
        if not self._filled[row, col]:
            return None
        r, g, b = self._colors[row, col]
        return (int(r), int(g), int(b))

    def commit(self, row: int, col: int, color: Color) -> Color:
        """Commit a color to a cell, blending if already filled.

        Args:
            row: Row coordinate
            col: Column coordinate
            color: Incoming (r, g, b) color

        Returns:
            The color now stored in the cell

        Raises:
            IndexError: If coordinates are out of bounds
        """
        existing = self.get_color(row, col)
        if existing is None:
            self._filled[row, col] = True
            self._population += 1
        else:
            color = blend_colors(existing, color)

        self._colors[row, col] = color
        self._visits[row, col] += 1
        return color

    def items(self) -> Iterator[Tuple[Location, Color]]:
        """Iterate committed cells as ((row, col), (r, g, b)) pairs."""
        rows, cols = np.nonzero(self._filled)
        for row, col in zip(rows, cols):
            r, g, b = self._colors[row, col]
            yield (int(row), int(col)), (int(r), int(g), int(b))

    def clear(self) -> None:
        """Unfill every cell."""
        self._colors.fill(0)
        self._filled.fill(False)
        self._visits.fill(0)
        self._population = 0

    def count_filled_neighbors(self) -> np.ndarray:
        """Count filled 4-neighbors for every cell using a PyTorch convolution.

        Cells beyond the canvas edge count as unfilled.

        Returns:
            2D int8 array indexed [row, col] with counts 0-4
        """
        self._torch_input[0, 0] = torch.from_numpy(self._filled.astype(np.float32))
        neighbors = F.conv2d(self._torch_input, self._torch_kernel, padding=1)
        return neighbors[0, 0].numpy().astype(np.int8)

    def get_bounding_box(self) -> Optional[Tuple[int, int, int, int]]:
        """Get bounding box of committed cells.

        Returns:
            Tuple of (min_row, min_col, max_row, max_col) or None if empty
        """
        rows, cols = np.nonzero(self._filled)
        if len(rows) == 0:
            return None

        return (int(rows.min()), int(cols.min()), int(rows.max()), int(cols.max()))

    def __eq__(self, other: object) -> bool:
        """Check if two grids hold the same committed colors."""
        if not isinstance(other, ColorGrid):
            return False
        return (
            self.size == other.size
            and np.array_equal(self._filled, other._filled)
            and np.array_equal(self._colors, other._colors)
        )

    def __str__(self) -> str:
        """String representation showing filled cells as '#' and unfilled as '.'."""
        result = []
        for row in range(self.size):
            result.append("".join("#" if self._filled[row, col] else "." for col in range(self.size)))
        return "\n".join(result)

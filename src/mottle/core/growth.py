"""Multi-seed color diffusion growth engine."""

import random
from typing import Callable, Dict, List, Optional, Tuple

from .config import GrowthConfig
from .frontier import FrontierSet
from .grid import Color, ColorGrid, Location, blend_colors

PendingCell = Tuple[Color, int]
ProgressCallback = Callable[[int, int, int], None]

# Up, left, down, right
DIRECTIONS = ((-1, 0), (0, -1), (1, 0), (0, 1))


def diffusion_range(max_diffusion: int, long_diffusion: int, halving: float, distance: int) -> int:
    """Half-width of the random color offset at a given distance from a seed.

    The amplitude above long_diffusion halves every `halving` steps and is
    truncated toward zero.

    Args:
        max_diffusion: Amplitude next to the seed
        long_diffusion: Amplitude far from any seed
        halving: Distance over which the decaying part halves
        distance: Growth steps from the originating seed

    Returns:
        Integer amplitude
    """
    return int((max_diffusion - long_diffusion) * 2.0 ** (-distance / halving) + long_diffusion)


def merge_pending(existing: PendingCell, incoming: PendingCell) -> PendingCell:
    """Combine two pending states for the same location."""
    old_color, old_distance = existing
    new_color, new_distance = incoming
    return blend_colors(old_color, new_color), (old_distance + new_distance) // 2


class ColorGrowth:
    """Randomized color diffusion from a handful of seeds.

    Seeds are dropped at random cells with random colors. Each step pulls
    one pending cell off the frontier, commits its color to the grid and
    spreads a perturbed copy of that color to some of its four neighbors.
    The perturbation shrinks with distance from the seed, so colors drift
    wildly near seeds and settle into fine mottling further out.
    """

    def __init__(self, config: GrowthConfig, progress_callback: Optional[ProgressCallback] = None) -> None:
        """Initialize the growth run.

        Args:
            config: Run parameters
            progress_callback: Called as (count, finalized, total) every
                size**2 // 10 iterations

        Raises:
            ValueError: If the configuration is invalid
        """
        config.validate()
        self.config = config
        self.progress_callback = progress_callback
        self.progress_interval = max(1, (config.size * config.size) // 10)
        self.reset()

    def reset(self) -> None:
        """Discard all progress and rewind the random stream."""
        self.grid = ColorGrid(self.config.size)
        self.frontier: FrontierSet[Location, PendingCell] = FrontierSet()
        self.rng = random.Random(self.config.seed)
        self._iteration = 0
        self._seeds: List[Tuple[Location, Color]] = []
        self._seeded = False
        self._reblend_count = 0
        self._max_distance = 0

    @property
    def iteration(self) -> int:
        """Number of cells pulled off the frontier so far."""
        return self._iteration

    @property
    def population(self) -> int:
        """Number of finalized cells."""
        return self.grid.population

    @property
    def frontier_size(self) -> int:
        """Number of pending cells."""
        return len(self.frontier)

    @property
    def seeds(self) -> List[Tuple[Location, Color]]:
        """Seeds in the order they were drawn, including dropped duplicates."""
        return list(self._seeds)

    @property
    def reblend_count(self) -> int:
        """Number of commits that landed on an already finalized cell."""
        return self._reblend_count

    @property
    def max_distance(self) -> int:
        """Largest seed distance of any committed cell."""
        return self._max_distance

    @property
    def finished(self) -> bool:
        """Whether seeding happened and the frontier has drained."""
        return self._seeded and self.frontier.is_empty()

    def seed(self) -> int:
        """Place the configured number of random seeds on the frontier.

        A seed landing where an earlier seed already sits is dropped.

        Returns:
            Number of seeds actually placed

        Raises:
            RuntimeError: If seeds were already placed
        """
        if self._seeded:
            raise RuntimeError("Seeds already placed; call reset() first")

        size = self.config.size
        placed = 0
        for _ in range(self.config.num_seeds):
            location = (self.rng.randrange(size), self.rng.randrange(size))
            color = (self.rng.randrange(256), self.rng.randrange(256), self.rng.randrange(256))
            self._seeds.append((location, color))
            if self.frontier.insert(location, (color, 0)) is None:
                placed += 1

        self._seeded = True
        return placed

    def step(self) -> bool:
        """Finalize one pending cell and spread to its neighbors.

        Returns:
            False if the frontier was already empty
        """
        popped = self.frontier.remove_random(self.rng, self.config.fuzz)
        if popped is None:
            return False

        (row, col), (color, distance) = popped
        if self.grid.is_filled(row, col):
            self._reblend_count += 1
        self.grid.commit(row, col, color)

        self._iteration += 1
        self._max_distance = max(self._max_distance, distance)

        self._spread(row, col, color, distance)
        return True

    def _spread(self, row: int, col: int, color: Color, distance: int) -> None:
        """Push perturbed copies of color onto a random subset of neighbors."""
        config = self.config
        spread = diffusion_range(config.max_diffusion, config.long_diffusion, config.halving, distance)

        for d_row, d_col in DIRECTIONS:
            if self.rng.random() > 0.5:
                continue

            n_row, n_col = row + d_row, col + d_col
            if not self.grid.in_bounds(n_row, n_col):
                continue

            if self.grid.is_filled(n_row, n_col) and not self._has_unfilled_nearby(n_row, n_col):
                continue

            r = min(255, max(0, color[0] + self.rng.randint(-spread, spread)))
            g = min(255, max(0, color[1] + self.rng.randint(-spread, spread)))
            b = min(255, max(0, color[2] + self.rng.randint(-spread, spread)))

            self.frontier.insert_or_merge((n_row, n_col), ((r, g, b), distance + 1), merge_pending)

    def _has_unfilled_nearby(self, row: int, col: int) -> bool:
        """Check the smoothing cross and diagonals around a cell for an unfilled cell."""
        radius = self.config.smoothing
        filled = self.grid.filled
        for k in range(-radius, radius + 1):
            for d_row, d_col in ((0, k), (k, 0), (k, k), (-k, k)):
                r, c = row + d_row, col + d_col
                if self.grid.in_bounds(r, c) and not filled[r, c]:
                    return True
        return False

    def _report_progress(self) -> None:
        if self.progress_callback is not None:
            self.progress_callback(self._iteration, self.grid.population, self.grid.capacity)

    def run(self, max_iterations: Optional[int] = None) -> Tuple[int, str]:
        """Run growth until the frontier drains.

        Seeds are placed first if that has not happened yet.

        Args:
            max_iterations: Optional cap on the number of steps

        Returns:
            Tuple of (iterations, reason) where reason is 'drained' or
            'max_iterations'
        """
        if not self._seeded:
            self.seed()

        while True:
            if self._iteration % self.progress_interval == 0:
                self._report_progress()

            if self.frontier.is_empty():
                return self._iteration, "drained"

            if max_iterations is not None and self._iteration >= max_iterations:
                return self._iteration, "max_iterations"

            self.step()

    def get_statistics(self) -> Dict:
        """Get summary statistics for the run so far.

        Returns:
            Dictionary with various statistics
        """
        capacity = self.grid.capacity
        distinct_seeds = {location for location, _ in self._seeds}
        return {
            "iterations": self._iteration,
            "population": self.population,
            "capacity": capacity,
            "coverage": self.population / capacity,
            "seeds_requested": self.config.num_seeds,
            "seeds_placed": len(distinct_seeds),
            "reblend_count": self._reblend_count,
            "max_distance": self._max_distance,
            "frontier_size": self.frontier_size,
            "grid_size": self.grid.shape,
            "bounding_box": self.grid.get_bounding_box(),
        }


def grow(
    config: GrowthConfig,
    progress_callback: Optional[ProgressCallback] = None,
    max_iterations: Optional[int] = None,
) -> ColorGrid:
    """Run a full growth and return the finalized grid."""
    growth = ColorGrowth(config, progress_callback)
    growth.run(max_iterations)
    return growth.grid

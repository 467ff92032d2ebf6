"""Metrics collection for growth runs."""

import time
import json
import numpy as np
import csv
from typing import Dict, List, Any, Optional, Callable, Tuple
from dataclasses import dataclass, field, asdict
from datetime import datetime
from collections import defaultdict

from .grid import ColorGrid


@dataclass
class GrowthMetrics:
    """Metrics for a single growth run."""

    # Run identification
    start_time: float
    end_time: float = 0.0
    duration: float = 0.0
    config: Dict[str, Any] = field(default_factory=dict)

    # Outcome
    iterations: int = 0
    termination_reason: str = ""  # 'drained', 'max_iterations'
    seeds_requested: int = 0
    seeds_placed: int = 0
    finalized_count: int = 0
    coverage: float = 0.0
    coverage_history: List[float] = field(default_factory=list)
    reblend_count: int = 0
    max_distance: int = 0

    # Spatial metrics
    boundary_cells: int = 0
    enclosed_holes: int = 0

    # Color metrics
    mean_color: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    color_std: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    roughness: float = 0.0

    # Performance metrics
    iterations_per_second: float = 0.0

    custom_metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        return asdict(self)


def compute_spatial_metrics(grid: ColorGrid) -> Dict[str, Any]:
    """Measure the shape and color texture of a grid.

    Returns:
        Dictionary with boundary_cells, enclosed_holes, mean_color,
        color_std and roughness
    """
    filled = grid.filled
    neighbors = grid.count_filled_neighbors()

    # Border cells see the canvas edge as unfilled
    boundary_cells = int(np.sum(filled & (neighbors < 4)))
    enclosed_holes = int(np.sum(~filled & (neighbors == 4)))

    if grid.population == 0:
        return {
            "boundary_cells": boundary_cells,
            "enclosed_holes": enclosed_holes,
            "mean_color": (0.0, 0.0, 0.0),
            "color_std": (0.0, 0.0, 0.0),
            "roughness": 0.0,
        }

    colors = grid.colors.astype(np.int16)
    filled_colors = colors[filled]
    mean_color = tuple(float(c) for c in filled_colors.mean(axis=0))
    color_std = tuple(float(c) for c in filled_colors.std(axis=0))

    horizontal = filled[:, 1:] & filled[:, :-1]
    vertical = filled[1:, :] & filled[:-1, :]
    diffs = np.concatenate(
        [
            np.abs(colors[:, 1:] - colors[:, :-1])[horizontal],
            np.abs(colors[1:, :] - colors[:-1, :])[vertical],
        ]
    )
    roughness = float(diffs.mean()) if diffs.size else 0.0

    return {
        "boundary_cells": boundary_cells,
        "enclosed_holes": enclosed_holes,
        "mean_color": mean_color,
        "color_std": color_std,
        "roughness": roughness,
    }


class MetricsCollector:
    """Collects metrics during growth runs."""

    def __init__(self):
        self.current_metrics: Optional[GrowthMetrics] = None
        self.hooks: Dict[str, List[Callable]] = defaultdict(list)

    def start_run(self, growth):
        """Start collecting metrics for a new run."""
        self.current_metrics = GrowthMetrics(
            start_time=time.time(),
            config=growth.config.to_dict(),
            seeds_requested=growth.config.num_seeds,
        )

        for hook in self.hooks['start']:
            hook(self.current_metrics, growth)

    def update(self, growth):
        """Record the current coverage."""
        if not self.current_metrics:
            return

        self.current_metrics.coverage_history.append(growth.population / growth.grid.capacity)

        for hook in self.hooks['update']:
            hook(self.current_metrics, growth)

    def end_run(self, growth, termination_reason: str):
        """Finalize metrics for the current run."""
        if not self.current_metrics:
            return None

        metrics = self.current_metrics
        metrics.end_time = time.time()
        metrics.duration = metrics.end_time - metrics.start_time
        metrics.termination_reason = termination_reason

        stats = growth.get_statistics()
        metrics.iterations = stats["iterations"]
        metrics.seeds_placed = stats["seeds_placed"]
        metrics.finalized_count = stats["population"]
        metrics.coverage = stats["coverage"]
        metrics.reblend_count = stats["reblend_count"]
        metrics.max_distance = stats["max_distance"]

        spatial = compute_spatial_metrics(growth.grid)
        metrics.boundary_cells = spatial["boundary_cells"]
        metrics.enclosed_holes = spatial["enclosed_holes"]
        metrics.mean_color = spatial["mean_color"]
        metrics.color_std = spatial["color_std"]
        metrics.roughness = spatial["roughness"]

        if metrics.duration > 0:
            metrics.iterations_per_second = metrics.iterations / metrics.duration

        for hook in self.hooks['end']:
            hook(metrics, growth)

        return metrics

    def register_hook(self, event: str, hook: Callable):
        """Register a custom hook for metrics collection.

        Args:
            event: 'start', 'update', or 'end'
            hook: Callable that takes (metrics, growth) as arguments

        Raises:
            ValueError: If event is not recognized
        """
        if event not in ['start', 'update', 'end']:
            raise ValueError(f"Unknown hook event '{event}'")
        self.hooks[event].append(hook)


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, np.bool_):
            return bool(obj)
        return super().default(obj)


class MetricsExporter:
    """Export metrics to various formats."""

    @staticmethod
    def to_json(metrics: List[GrowthMetrics], filepath: str):
        """Export metrics to JSON format."""
        data = {
            "runs": [m.to_dict() for m in metrics],
            "metadata": {
                "export_time": datetime.now().isoformat(),
                "total_runs": len(metrics),
            },
        }

        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2, cls=NumpyEncoder)

    @staticmethod
    def to_csv(metrics: List[GrowthMetrics], filepath: str):
        """Export metrics to CSV format, one row per run."""
        if not metrics:
            return

        rows = []
        for m in metrics:
            row = {
                'size': m.config.get('size'),
                'num_seeds': m.config.get('num_seeds'),
                'seed': m.config.get('seed'),
                'duration': m.duration,
                'iterations': m.iterations,
                'termination_reason': m.termination_reason,
                'seeds_placed': m.seeds_placed,
                'finalized_count': m.finalized_count,
                'coverage': m.coverage,
                'reblend_count': m.reblend_count,
                'max_distance': m.max_distance,
                'boundary_cells': m.boundary_cells,
                'enclosed_holes': m.enclosed_holes,
                'roughness': m.roughness,
                'iterations_per_second': m.iterations_per_second,
            }
            rows.append(row)

        with open(filepath, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=rows[0].keys())
            writer.writeheader()
            writer.writerows(rows)

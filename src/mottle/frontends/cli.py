"""Command-line interface for color diffusion growth."""

import argparse
import sys
import time
from typing import Optional, Tuple

from ..core.config import GrowthConfig, load_config, save_config
from ..core.grid import ColorGrid
from ..core.growth import ColorGrowth
from ..core.image import save_image
from ..core.metrics import MetricsCollector, MetricsExporter
from ..core.presets import PresetLibrary

# Flags that map one-to-one onto GrowthConfig fields
CONFIG_FLAGS = {
    "size": "size",
    "seeds": "num_seeds",
    "max": "max_diffusion",
    "long": "long_diffusion",
    "halving": "halving",
    "smoothing": "smoothing",
    "fuzz": "fuzz",
    "seed": "seed",
}


class CLIGrowth:
    """Command-line interface for growing diffusion images."""

    def __init__(self, preset_dir: Optional[str] = None):
        """Initialize CLI interface.

        Args:
            preset_dir: Directory of extra preset JSON files
        """
        self.preset_library = PresetLibrary(preset_dir)
        self.preset_library.load_all_presets()

    def run_generation(
        self,
        config: GrowthConfig,
        output_dir: Optional[str] = None,
        max_iterations: Optional[int] = None,
        verbose: bool = False,
        quiet: bool = False,
        save: bool = True,
    ) -> Tuple[ColorGrid, str, dict]:
        """Grow one image.

        Args:
            config: Run parameters
            output_dir: Directory for the image (default: current directory)
            max_iterations: Optional cap on growth steps
            verbose: Print setup details
            quiet: Suppress progress lines
            save: Whether to write the image file

        Returns:
            Tuple of (grid, finish_reason, statistics)
        """
        print(f"Start {config.filename()}")
        filename = config.filename(output_dir)

        collector = MetricsCollector()

        def report_progress(count: int, finalized: int, total: int) -> None:
            collector.update(growth)
            if not quiet:
                print(f"{count}: {finalized}/{total}")

        growth = ColorGrowth(config, progress_callback=report_progress)
        collector.start_run(growth)

        placed = growth.seed()
        if verbose:
            print(f"Canvas {config.size}x{config.size}, placed {placed}/{config.num_seeds} seeds")
            for (row, col), color in growth.seeds:
                print(f"  Seed at ({row}, {col}) color {color}")

        start_time = time.time()
        iterations, reason = growth.run(max_iterations)
        duration = time.time() - start_time

        metrics = collector.end_run(growth, reason)

        stats = growth.get_statistics()
        stats["duration_seconds"] = duration
        stats["iterations_per_second"] = iterations / duration if duration > 0 else 0
        stats["roughness"] = metrics.roughness
        stats["enclosed_holes"] = metrics.enclosed_holes
        stats["metrics"] = metrics

        if save:
            stats["output_path"] = save_image(growth.grid, filename)

        return growth.grid, reason, stats

    def list_presets(self) -> None:
        """Print all available presets."""
        print("Available presets:")
        for name in self.preset_library.list_presets():
            preset = self.preset_library.get_preset(name)
            if preset is None:
                continue
            overrides = ", ".join(f"{key}={value}" for key, value in preset.overrides.items())
            print(f"  {name}: {overrides or 'built-in defaults'}")
            if preset.description:
                print(f"    {preset.description}")


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser.

    Returns:
        Configured ArgumentParser
    """
    defaults = GrowthConfig()
    parser = argparse.ArgumentParser(
        description="Grow mottled-color images by randomized multi-seed color diffusion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Grow the default 1000x1000 image with 10 seeds
  mottle-cli

  # Small quick image with a fixed seed
  mottle-cli --size 200 --seeds 3 --seed 42

  # Stringy depth-first growth
  mottle-cli --preset Tendrils

  # Start from a saved config but override the seed, and keep metrics
  mottle-cli --config my.json --seed 7 --metrics-json run.json

  # List available presets
  mottle-cli --list-presets
        """,
    )

    # Growth configuration
    parser.add_argument("-s", "--size", type=int, help=f"Canvas width and height (default: {defaults.size})")

    parser.add_argument("-n", "--seeds", type=int, help=f"Number of seeds (default: {defaults.num_seeds})")

    parser.add_argument(
        "--max",
        type=int,
        help=f"Color diffusion amplitude next to a seed, 0-255 (default: {defaults.max_diffusion})",
    )

    parser.add_argument(
        "--long",
        type=int,
        help=f"Color diffusion amplitude far from any seed, 0-255 (default: {defaults.long_diffusion})",
    )

    parser.add_argument(
        "--halving",
        type=float,
        help=f"Distance over which the decaying diffusion halves (default: {defaults.halving:g})",
    )

    parser.add_argument(
        "--smoothing",
        type=int,
        help=f"Radius of the re-growth check around finished cells (default: {defaults.smoothing})",
    )

    parser.add_argument(
        "--fuzz",
        type=float,
        help=f"Probability of growing from the newest frontier cell, 0.0-1.0 (default: {defaults.fuzz})",
    )

    parser.add_argument("--seed", type=int, help=f"Random seed (default: {defaults.seed})")

    # Presets and config files
    parser.add_argument("--preset", type=str, help="Start from a named preset")

    parser.add_argument(
        "--preset-dir",
        type=str,
        help="Directory with extra preset JSON files (default: presets)",
    )

    parser.add_argument(
        "--list-presets",
        action="store_true",
        help="List all available presets and exit",
    )

    parser.add_argument("--config", type=str, help="Load growth parameters from a JSON file")

    parser.add_argument("--save-config", type=str, help="Write the resolved parameters to a JSON file")

    # Run configuration
    parser.add_argument(
        "--max-iterations",
        type=int,
        help="Stop after this many growth steps (default: run until the frontier drains)",
    )

    # Output configuration
    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        help="Directory to write the image into (default: current directory)",
    )

    parser.add_argument("--metrics-json", type=str, help="Write run metrics to a JSON file")

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print detailed setup and statistics",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress progress lines",
    )

    return parser


def resolve_config(args: argparse.Namespace, preset_library: PresetLibrary) -> GrowthConfig:
    """Build the run config from defaults, config file, preset and flags.

    Later sources win: defaults, then --config, then --preset, then
    explicit flags.

    Raises:
        ValueError: If the preset is unknown or the config file is invalid
        OSError: If the config file cannot be read
    """
    config = GrowthConfig()

    if args.config:
        config = load_config(args.config)

    if args.preset:
        preset = preset_library.get_preset(args.preset)
        if preset is None:
            available = ", ".join(preset_library.list_presets())
            raise ValueError(f"Preset '{args.preset}' not found (available: {available})")
        config = preset.apply(config)

    overrides = {}
    for flag, field_name in CONFIG_FLAGS.items():
        value = getattr(args, flag)
        if value is not None:
            overrides[field_name] = value

    return config.replace(**overrides)


def print_results(reason: str, stats: dict, verbose: bool) -> None:
    """Print generation results.

    Args:
        reason: Finish reason
        stats: Statistics dictionary
        verbose: Whether to show detailed statistics
    """
    if reason == "drained":
        print(f"\nGrowth finished after {stats['iterations']} iterations")
    else:
        print(f"\nGrowth stopped at the iteration cap ({stats['iterations']} iterations)")

    if verbose:
        print("\nDetailed Statistics:")
        print(f"  Grid size: {stats['grid_size'][0]}x{stats['grid_size'][1]}")
        print(f"  Seeds placed: {stats['seeds_placed']}/{stats['seeds_requested']}")
        print(f"  Finalized cells: {stats['population']}/{stats['capacity']} ({stats['coverage']:.2%})")
        print(f"  Re-blended commits: {stats['reblend_count']}")
        print(f"  Max seed distance: {stats['max_distance']}")
        if "enclosed_holes" in stats:
            print(f"  Enclosed holes: {stats['enclosed_holes']}")
        if "roughness" in stats:
            print(f"  Roughness: {stats['roughness']:.2f}")
        if "duration_seconds" in stats:
            print(f"  Duration: {stats['duration_seconds']:.3f} seconds")
            print(f"  Speed: {stats['iterations_per_second']:.0f} iterations/second")
    else:
        duration = stats.get("duration_seconds", 0)
        speed = stats.get("iterations_per_second", 0)

        print(
            "Coverage: {}/{}, "
            "Duration: {:.3f}s, "
            "Speed: {:.0f} it/s".format(stats["population"], stats["capacity"], duration, speed)
        )

    if stats.get("output_path"):
        print(f"Image saved to: {stats['output_path']}")


def validate_args(args: argparse.Namespace, config: GrowthConfig) -> bool:
    """Validate command-line arguments and the config they resolve to.

    Args:
        args: Parsed arguments
        config: Resolved growth config

    Returns:
        True if arguments are valid
    """
    errors = config.errors()

    if args.max_iterations is not None and args.max_iterations <= 0:
        errors.append("Max iterations must be positive")

    if args.verbose and args.quiet:
        errors.append("--verbose and --quiet cannot be combined")

    if errors:
        print("Error: Invalid arguments:")
        for error in errors:
            print(f"  - {error}")
        return False

    return True


def main() -> int:
    """Main entry point for CLI interface.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    args = parser.parse_args()

    cli = CLIGrowth(args.preset_dir)

    if args.list_presets:
        cli.list_presets()
        return 0

    try:
        config = resolve_config(args, cli.preset_library)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    if not validate_args(args, config):
        return 1

    if args.save_config:
        save_config(config, args.save_config)
        if args.verbose:
            print(f"Config saved to: {args.save_config}")

    try:
        _, reason, stats = cli.run_generation(
            config,
            output_dir=args.output_dir,
            max_iterations=args.max_iterations,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        print_results(reason, stats, args.verbose)

        if args.metrics_json:
            MetricsExporter.to_json([stats["metrics"]], args.metrics_json)
            print(f"Metrics saved to: {args.metrics_json}")

        return 0

    except KeyboardInterrupt:
        print("\nGeneration interrupted by user")
        return 1
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())

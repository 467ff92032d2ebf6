"""Tests for the CLI frontend."""

import json
from unittest.mock import Mock, patch
from io import StringIO

import pytest
from mottle.core.config import GrowthConfig, save_config
from mottle.core.grid import ColorGrid
from mottle.core.presets import PresetLibrary
from mottle.frontends.cli import (
    CLIGrowth,
    create_parser,
    print_results,
    resolve_config,
    validate_args,
    main,
)


def fake_stats():
    return {
        "iterations": 120,
        "population": 90,
        "capacity": 100,
        "coverage": 0.9,
        "seeds_requested": 2,
        "seeds_placed": 2,
        "reblend_count": 30,
        "max_distance": 12,
        "grid_size": (10, 10),
        "duration_seconds": 0.5,
        "iterations_per_second": 240.0,
    }


class TestCLIGrowth:
    """Test cases for the CLI growth runner."""

    def test_initialization(self, tmp_path):
        """Test CLI initialization."""
        cli = CLIGrowth(str(tmp_path))
        assert cli.preset_library is not None
        assert "Default" in cli.preset_library.list_presets()

    def test_loads_extra_presets(self, tmp_path):
        """Test presets in the preset directory are picked up."""
        (tmp_path / "mine.json").write_text(json.dumps({"name": "Mine", "overrides": {"size": 16}}))

        cli = CLIGrowth(str(tmp_path))

        assert cli.preset_library.get_preset("Mine").overrides == {"size": 16}

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_generation(self, mock_stdout, tmp_path):
        """Test a run prints progress and writes the image."""
        cli = CLIGrowth(str(tmp_path))
        config = GrowthConfig(size=10, num_seeds=2, seed=3)

        grid, reason, stats = cli.run_generation(config, output_dir=str(tmp_path))

        assert isinstance(grid, ColorGrid)
        assert reason == "drained"
        assert stats["population"] == grid.population
        assert "duration_seconds" in stats
        assert stats["metrics"].finalized_count == grid.population
        assert (tmp_path / config.filename()).exists()

        output = mock_stdout.getvalue()
        assert f"Start {config.filename()}\n" in output
        assert "0: 0/100" in output

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_generation_quiet_no_save(self, mock_stdout, tmp_path):
        """Test quiet runs skip progress lines and save=False writes nothing."""
        cli = CLIGrowth(str(tmp_path))
        config = GrowthConfig(size=10, num_seeds=2, seed=3)

        _, _, stats = cli.run_generation(config, output_dir=str(tmp_path), quiet=True, save=False)

        assert "output_path" not in stats
        assert not (tmp_path / config.filename()).exists()
        assert "0: 0/100" not in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_generation_verbose(self, mock_stdout, tmp_path):
        """Test verbose runs list the seeds."""
        cli = CLIGrowth(str(tmp_path))

        cli.run_generation(GrowthConfig(size=8, num_seeds=2, seed=1), save=False, verbose=True)

        output = mock_stdout.getvalue()
        assert "Canvas 8x8" in output
        assert output.count("Seed at") == 2

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_generation_max_iterations(self, mock_stdout, tmp_path):
        """Test the iteration cap is passed through."""
        cli = CLIGrowth(str(tmp_path))

        _, reason, stats = cli.run_generation(
            GrowthConfig(size=30, num_seeds=20, seed=3), max_iterations=4, save=False
        )

        assert reason == "max_iterations"
        assert stats["iterations"] == 4

    @patch("sys.stdout", new_callable=StringIO)
    def test_list_presets(self, mock_stdout, tmp_path):
        """Test preset listing."""
        cli = CLIGrowth(str(tmp_path))
        cli.list_presets()

        output = mock_stdout.getvalue()
        assert "Available presets:" in output
        assert "Default: built-in defaults" in output
        assert "Tendrils:" in output
        assert "fuzz=0.98" in output


class TestArgumentParsing:
    """Test cases for argument parsing and config resolution."""

    def test_parser_defaults(self):
        """Test unset growth flags stay None."""
        args = create_parser().parse_args([])

        assert args.size is None
        assert args.seeds is None
        assert args.preset is None
        assert args.verbose is False
        assert args.quiet is False

    def test_parser_options(self):
        """Test growth flags parse."""
        args = create_parser().parse_args(
            ["-s", "64", "-n", "3", "--max", "200", "--long", "4", "--halving", "2.5",
             "--smoothing", "1", "--fuzz", "0.5", "--seed", "9", "-o", "out", "-v"]
        )

        assert args.size == 64
        assert args.seeds == 3
        assert args.max == 200
        assert args.long == 4
        assert args.halving == 2.5
        assert args.smoothing == 1
        assert args.fuzz == 0.5
        assert args.seed == 9
        assert args.output_dir == "out"
        assert args.verbose is True

    def test_resolve_defaults(self, tmp_path):
        """Test no flags gives the default config."""
        args = create_parser().parse_args([])
        assert resolve_config(args, PresetLibrary(str(tmp_path))) == GrowthConfig()

    def test_resolve_precedence(self, tmp_path):
        """Test config file, preset and flags apply in order."""
        config_path = tmp_path / "base.json"
        save_config(GrowthConfig(size=77, seed=5, smoothing=9), config_path)

        args = create_parser().parse_args(
            ["--config", str(config_path), "--preset", "Blobs", "--seed", "11"]
        )
        config = resolve_config(args, PresetLibrary(str(tmp_path)))

        assert config.size == 500  # preset beats config file
        assert config.smoothing == 6
        assert config.seed == 11  # flag beats both
        assert config.fuzz == 0.0

    def test_resolve_unknown_preset(self, tmp_path):
        """Test unknown presets raise ValueError."""
        args = create_parser().parse_args(["--preset", "Nope"])

        with pytest.raises(ValueError, match="Nope"):
            resolve_config(args, PresetLibrary(str(tmp_path)))

    def test_validate_args_valid(self):
        """Test validation of good arguments."""
        args = create_parser().parse_args([])
        assert validate_args(args, GrowthConfig()) is True

    @patch("sys.stdout", new_callable=StringIO)
    def test_validate_args_invalid(self, mock_stdout):
        """Test validation lists every problem."""
        args = create_parser().parse_args(["--max-iterations", "0", "-v", "-q"])

        assert validate_args(args, GrowthConfig(size=0, halving=0)) is False

        output = mock_stdout.getvalue()
        assert "Error: Invalid arguments:" in output
        assert "  - Size must be positive" in output
        assert "  - Halving distance must be positive" in output
        assert "  - Max iterations must be positive" in output
        assert "  - --verbose and --quiet cannot be combined" in output


class TestPrintResults:
    """Test cases for result printing."""

    @patch("sys.stdout", new_callable=StringIO)
    def test_compact(self, mock_stdout):
        """Test compact result output."""
        stats = fake_stats()
        stats["output_path"] = "img.png"

        print_results("drained", stats, verbose=False)

        output = mock_stdout.getvalue()
        assert "Growth finished after 120 iterations" in output
        assert "Coverage: 90/100" in output
        assert "0.500s" in output
        assert "240 it/s" in output
        assert "Image saved to: img.png" in output

    @patch("sys.stdout", new_callable=StringIO)
    def test_verbose(self, mock_stdout):
        """Test detailed result output."""
        print_results("max_iterations", fake_stats(), verbose=True)

        output = mock_stdout.getvalue()
        assert "iteration cap" in output
        assert "Grid size: 10x10" in output
        assert "Seeds placed: 2/2" in output
        assert "Finalized cells: 90/100 (90.00%)" in output
        assert "Re-blended commits: 30" in output


class TestMainFunction:
    """Test the main CLI function."""

    @patch("mottle.frontends.cli.CLIGrowth")
    def test_main_list_presets(self, mock_cli_class):
        """Test main function with --list-presets."""
        mock_cli = Mock()
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["mottle-cli", "--list-presets"]):
            result = main()

        assert result == 0
        mock_cli.list_presets.assert_called_once()

    @patch("mottle.frontends.cli.CLIGrowth")
    def test_main_invalid_args(self, mock_cli_class):
        """Test main function with invalid arguments."""
        with patch("sys.argv", ["mottle-cli", "--size", "-5"]):
            result = main()

        assert result == 1
        mock_cli_class.return_value.run_generation.assert_not_called()

    @patch("mottle.frontends.cli.CLIGrowth")
    def test_main_invalid_preset(self, mock_cli_class):
        """Test main function with an unknown preset."""
        mock_cli = Mock()
        mock_cli.preset_library.get_preset.return_value = None
        mock_cli.preset_library.list_presets.return_value = ["Default", "Blobs"]
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["mottle-cli", "--preset", "Invalid"]):
            result = main()

        assert result == 1

    @patch("mottle.frontends.cli.CLIGrowth")
    def test_main_successful_run(self, mock_cli_class):
        """Test successful generation run."""
        mock_cli = Mock()
        mock_cli.run_generation.return_value = (Mock(), "drained", fake_stats())
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["mottle-cli", "--size", "10", "--seeds", "2"]):
            result = main()

        assert result == 0
        mock_cli.run_generation.assert_called_once()
        config = mock_cli.run_generation.call_args[0][0]
        assert config == GrowthConfig(size=10, num_seeds=2)

    @patch("mottle.frontends.cli.CLIGrowth")
    def test_main_keyboard_interrupt(self, mock_cli_class):
        """Test handling of keyboard interrupt."""
        mock_cli = Mock()
        mock_cli.run_generation.side_effect = KeyboardInterrupt()
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["mottle-cli"]):
            result = main()

        assert result == 1

    @patch("mottle.frontends.cli.CLIGrowth")
    def test_main_exception(self, mock_cli_class):
        """Test handling of general exceptions."""
        mock_cli = Mock()
        mock_cli.run_generation.side_effect = Exception("Test error")
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["mottle-cli"]):
            result = main()

        assert result == 1

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_end_to_end(self, mock_stdout, tmp_path):
        """Test a real run writes the image, config and metrics."""
        metrics_path = tmp_path / "metrics.json"
        config_path = tmp_path / "config.json"
        argv = [
            "mottle-cli",
            "--size", "8",
            "--seeds", "2",
            "--seed", "4",
            "-o", str(tmp_path),
            "--preset-dir", str(tmp_path / "presets"),
            "--metrics-json", str(metrics_path),
            "--save-config", str(config_path),
            "--quiet",
        ]

        with patch("sys.argv", argv):
            result = main()

        assert result == 0
        config = GrowthConfig(size=8, num_seeds=2, seed=4)
        assert (tmp_path / config.filename()).exists()
        assert json.loads(metrics_path.read_text())["runs"][0]["config"]["size"] == 8
        assert json.loads(config_path.read_text())["seed"] == 4
        assert "Metrics saved to:" in mock_stdout.getvalue()

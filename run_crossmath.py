#!/usr/bin/env python3
"""
CrossMath Puzzle Generator

Command line pipeline for generating CrossMath puzzles, checking player
grids against saved puzzles and printing saved puzzles in the terminal.

Features:
- Generate uniquely solvable puzzles for difficulty levels 1-5
- Optional step-down fallback when a level is exhausted
- JSON export per puzzle and CSV export of batch statistics
- Player grid validation with equation and cell metrics
- Configuration-driven defaults with CLI override

Usage Examples:
  # Use config defaults (minimal command)
  python run_crossmath.py generate

  # Override specific parameters
  python run_crossmath.py generate --difficulty 2 --count 10 --output-dir puzzles --fallback
  python run_crossmath.py generate --difficulties 1 2 --seed 7 --show --stats-csv stats.csv

  # Check a player grid and print saved puzzles
  python run_crossmath.py validate --puzzle-file puzzles/crossmath_d1_3x3_001.json --grid-file grid.json
  python run_crossmath.py show puzzles/*.json --solution
"""

import argparse
import json
import logging
import random
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from crossmath.evaluate.grid_validator import GridValidator
from crossmath.generate.puzzle_builder import PuzzleBuilder
from crossmath.generate.puzzle_visualisation import display_puzzle, load_puzzle_file
from crossmath.utils.config_loader import get_config


def get_config_defaults():
    """Get configuration defaults for CLI arguments."""
    config = get_config()
    return config.get_cli_defaults()


def apply_config_defaults(args):
    """Apply configuration defaults to CLI arguments when not specified."""
    defaults = get_config_defaults()

    if getattr(args, "command", None) == "generate" and not args.difficulties:
        if args.difficulty is not None:
            args.difficulties = [args.difficulty]
        else:
            args.difficulties = defaults["difficulties"] or [defaults["difficulty"]]

    if hasattr(args, "output_dir") and not args.output_dir:
        args.output_dir = defaults["output_dir"]

    return args


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Setup logging configuration with optional file output for traceability."""
    level = logging.DEBUG if verbose else logging.INFO

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # Always detailed in file
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

        logging.info("=== CROSSMATH GENERATION TRACE ===")
        logging.info(f"Start time: {datetime.now().isoformat()}")
        logging.info(f"Log file: {log_file}")
        logging.info(f"Verbose mode: {verbose}")
        logging.info("=" * 60)

    return log_file


def run_generation(args) -> bool:
    """Generate CrossMath puzzles for the requested difficulty levels."""
    print("🧮 CROSSMATH PUZZLE GENERATION")
    print("=" * 60)

    print("📋 Configuration:")
    print(f"   Difficulties: {args.difficulties}")
    print(f"   Puzzles per difficulty: {args.count}")
    print(f"   Fallback to lower levels: {'Yes' if args.fallback else 'No'}")
    print(f"   Seed: {args.seed if args.seed is not None else 'random'}")
    if args.output_dir:
        print(f"   Output directory: {args.output_dir}")

    try:
        builder = PuzzleBuilder(rng=random.Random(args.seed))

        print("\n🔄 Generating puzzles...")
        logging.info(f"GENERATION_START: Difficulties={args.difficulties}")

        results = builder.generate_multi_difficulty_batch(
            difficulties=args.difficulties,
            count_per_level=args.count,
            output_dir=args.output_dir,
            fallback=args.fallback,
        )

        total_generated = 0
        for difficulty, entries in results.items():
            total_generated += len(entries)
            print(
                f"   ✅ Difficulty {difficulty}: {len(entries)}/{args.count} puzzles generated"
            )
            if args.show:
                for index, entry in enumerate(entries, 1):
                    display_puzzle(entry.to_puzzle(), index)

        stats = builder.get_generation_statistics()
        print("\n📊 GENERATION STATISTICS")
        print("=" * 60)
        print(f"Total requests: {stats['total_requests']}")
        print(f"Successful generations: {stats['successful_generations']}")
        print(f"Failed generations: {stats['failed_generations']}")
        print(f"Duplicate rejections: {stats['duplicate_rejections']}")
        print(f"Fallbacks: {stats['fallbacks']}")
        print(f"Success rate: {stats['success_rate']}")
        print(f"Average measured difficulty: {stats['average_actual_difficulty']}")
        print(f"Average blank count: {stats['average_blank_count']}")
        print(f"Average attempts: {stats['average_attempts']}")

        if args.output_dir:
            print(f"\n📁 Saved {total_generated} puzzles to {args.output_dir}")

        if args.stats_csv:
            csv_path = builder.save_statistics_csv(args.stats_csv)
            print(f"📁 Saved statistics to {csv_path}")

        logging.info(f"GENERATION_COMPLETE: {total_generated} puzzles generated")
        return total_generated > 0

    except Exception as e:
        print(f"❌ Puzzle generation failed: {e}")
        logging.error(f"Generation error: {e}", exc_info=True)
        return False


def run_validation(args) -> bool:
    """Validate a player grid against a saved puzzle."""
    print("🔍 CROSSMATH GRID VALIDATION")
    print("=" * 60)

    try:
        puzzle = load_puzzle_file(args.puzzle_file)
        with open(args.grid_file, "r", encoding="utf-8") as f:
            grid = json.load(f)
    except (OSError, ValueError, KeyError) as e:
        print(f"❌ Could not load input: {e}")
        logging.error(f"Validation input error: {e}", exc_info=True)
        return False

    result = GridValidator().validate_single(puzzle, grid)
    if "error" in result:
        print(f"❌ {result['error']}")
        return False

    print(f"Puzzle: {result['puzzle_id']}")
    print(f"Complete: {'Yes' if result['complete'] else 'No'}")
    print(f"Given cells preserved: {'Yes' if result['fixed_cells_preserved'] else 'No'}")
    for kind in ("rows", "columns"):
        marks = " ".join("✅" if ok else "❌" for ok in result[kind])
        print(f"{kind.capitalize()}: {marks}")
    metrics = result["metrics"]
    print(f"Cell accuracy: {metrics['cell_accuracy']:.1%}")
    print(f"Equation accuracy: {metrics['equation_accuracy']:.1%}")

    if result["success"]:
        print("\n🎉 Grid solved correctly!")
    else:
        print("\n❌ Grid is not solved yet")
    return result["success"]


def run_show(args) -> bool:
    """Print saved puzzle files."""
    shown = 0
    for index, path in enumerate(args.files, 1):
        try:
            puzzle = load_puzzle_file(path)
        except (OSError, ValueError, KeyError) as e:
            print(f"❌ Error loading {path}: {e}")
            logging.error(f"Failed to load puzzle from {path}: {e}")
            continue
        display_puzzle(puzzle, index, show_solution=args.solution)
        shown += 1
    return shown > 0


def build_parser() -> argparse.ArgumentParser:
    config_defaults = get_config_defaults()

    parser = argparse.ArgumentParser(
        description="CrossMath Puzzle Generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Use config defaults (minimal commands)
  %(prog)s generate

  # Override specific parameters
  %(prog)s generate --difficulty 2 --count 10 --output-dir puzzles
  %(prog)s validate --puzzle-file puzzles/crossmath_d1_3x3_001.json --grid-file grid.json
  %(prog)s show puzzles/crossmath_d1_3x3_001.json --solution
        """,
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--log-file", help="Write a detailed trace log to this file")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Generate command
    generate_parser = subparsers.add_parser("generate", help="Generate CrossMath puzzles")
    generate_parser.add_argument(
        "--difficulty",
        type=int,
        choices=range(1, 6),
        help=f"Difficulty level (default: {config_defaults['difficulty']})",
    )
    generate_parser.add_argument(
        "--difficulties",
        nargs="+",
        type=int,
        choices=range(1, 6),
        help="Several difficulty levels (overrides --difficulty)",
    )
    generate_parser.add_argument(
        "--count",
        type=int,
        default=config_defaults["count"],
        help=f"Number of puzzles per difficulty (default: {config_defaults['count']})",
    )
    generate_parser.add_argument(
        "--output-dir", help="Directory to save puzzle JSON files (optional)"
    )
    generate_parser.add_argument(
        "--fallback",
        action="store_true",
        help="Step down one level when a difficulty is exhausted",
    )
    generate_parser.add_argument("--seed", type=int, help="Random seed")
    generate_parser.add_argument(
        "--show", action="store_true", help="Print generated puzzles"
    )
    generate_parser.add_argument("--stats-csv", help="Write batch statistics to CSV")

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Validate a player grid against a saved puzzle"
    )
    validate_parser.add_argument(
        "--puzzle-file", required=True, help="Saved puzzle JSON file"
    )
    validate_parser.add_argument(
        "--grid-file",
        required=True,
        help="JSON 2D list of values, null for empty cells",
    )

    # Show command
    show_parser = subparsers.add_parser("show", help="Print saved puzzle files")
    show_parser.add_argument("files", nargs="+", help="Puzzle JSON files")
    show_parser.add_argument(
        "--solution", action="store_true", help="Also print the solved grid"
    )

    return parser


def main(argv=None) -> bool:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    args = apply_config_defaults(args)

    actual_log_file = setup_logging(args.verbose, args.log_file)
    if actual_log_file:
        print(f"📝 Detailed trace logging to: {actual_log_file}")

    logging.info(f"ARGUMENTS: {vars(args)}")

    if not args.command:
        parser.print_help()
        return False

    try:
        if args.command == "generate":
            return run_generation(args)
        elif args.command == "validate":
            return run_validation(args)
        elif args.command == "show":
            return run_show(args)
        else:
            print(f"❌ Unknown command: {args.command}")
            return False

    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user")
        return False


def cli():
    success = main()
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    cli()

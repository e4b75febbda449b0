"""
Puzzle Builder - Batch orchestrator for CrossMath puzzle generation

This module coordinates batch generation across difficulty levels, keeps
running statistics, avoids repeating solution grids within a session and
optionally writes every puzzle to a JSON file.
"""

import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..core.errors import GenerationExhausted
from ..utils.config_loader import get_config
from .difficulty import constraints_for_difficulty
from .puzzle_entry import PuzzleEntry
from .puzzle_generator import generate_puzzle, generate_with_fallback

logger = logging.getLogger(__name__)


class SolutionTracker:
    """
    Tracks solution grids produced in a session so a batch never repeats one.
    """

    def __init__(self):
        self.seen = set()

    @staticmethod
    def _key(solution) -> Tuple[Tuple[int, ...], ...]:
        return tuple(tuple(row) for row in solution)

    def is_new(self, solution) -> bool:
        return self._key(solution) not in self.seen

    def record(self, solution):
        self.seen.add(self._key(solution))

    def __len__(self) -> int:
        return len(self.seen)


class PuzzleBuilder:
    """
    Main orchestrator for batch puzzle generation.

    Handles the complete workflow:
    1. Derive constraints for each difficulty level
    2. Generate puzzles, skipping repeated solution grids
    3. Convert to PuzzleEntry records
    4. Save JSON files (optional) and collect statistics
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize puzzle builder.

        Args:
            rng: Random source shared by the batch (seeded for reproducible runs)
        """
        self.config = get_config()
        self.generation_config = self.config.get_generation_config()
        self.rng = rng or random.Random()
        self.solution_tracker = SolutionTracker()
        self.entries: List[PuzzleEntry] = []

        # Generation statistics
        self.generation_stats = {
            "total_requests": 0,
            "successful_generations": 0,
            "failed_generations": 0,
            "duplicate_rejections": 0,
            "fallbacks": 0,
        }

        logger.info("Initialized PuzzleBuilder")

    def generate_puzzle_batch(
        self,
        difficulty: int,
        count: int,
        output_dir: str = None,
        fallback: bool = False,
    ) -> List[PuzzleEntry]:
        """
        Generate a batch of puzzles for one difficulty level.

        Args:
            difficulty: Difficulty level (1-5)
            count: Number of puzzles to generate
            output_dir: Directory to save puzzle JSON files (None to skip)
            fallback: Step down a level when a level is exhausted

        Returns:
            List of PuzzleEntry instances
        """
        constraints = constraints_for_difficulty(difficulty)
        size = constraints.grid_size
        max_duplicates = self.generation_config["max_duplicate_retries"]

        logger.info(f"Generating {count} puzzles for difficulty {difficulty} ({size}x{size})")

        generated = []
        for i in range(count):
            puzzle_id = self._generate_puzzle_id(difficulty, size, len(self.entries) + 1)
            logger.info(f"Generating puzzle {i + 1}/{count}: {puzzle_id}")
            self.generation_stats["total_requests"] += 1

            try:
                entry = self._generate_unique(
                    difficulty, puzzle_id, max_duplicates, fallback
                )
            except GenerationExhausted as e:
                logger.warning(f"❌ Failed to generate puzzle {i + 1}: {e}")
                self.generation_stats["failed_generations"] += 1
                continue

            if entry is None:
                logger.warning(f"❌ Puzzle {i + 1} kept repeating an existing solution")
                self.generation_stats["failed_generations"] += 1
                continue

            generated.append(entry)
            self.entries.append(entry)
            self.generation_stats["successful_generations"] += 1

            logger.info(
                f"✅ Generated puzzle {i + 1}: {entry.blank_count} blanks, "
                f"difficulty {entry.actual_difficulty:.2f}, "
                f"{entry.generation_metadata.get('attempts')} attempt(s)"
            )

            if output_dir:
                self._save_puzzle_to_file(entry, output_dir)

        logger.info(f"Batch generation complete: {len(generated)}/{count} puzzles generated")
        return generated

    def generate_multi_difficulty_batch(
        self,
        difficulties: List[int],
        count_per_level: int,
        output_dir: str = None,
        fallback: bool = False,
    ) -> Dict[int, List[PuzzleEntry]]:
        """
        Generate puzzles across several difficulty levels.

        Returns:
            Dictionary mapping difficulty -> List[PuzzleEntry]
        """
        results = {}
        for difficulty in difficulties:
            results[difficulty] = self.generate_puzzle_batch(
                difficulty=difficulty,
                count=count_per_level,
                output_dir=output_dir,
                fallback=fallback,
            )
        return results

    def _generate_unique(
        self, difficulty: int, puzzle_id: str, max_duplicates: int, fallback: bool
    ) -> Optional[PuzzleEntry]:
        """Generate one puzzle whose solution has not been produced before."""
        for _ in range(max_duplicates + 1):
            if fallback:
                puzzle = generate_with_fallback(difficulty, rng=self.rng, puzzle_id=puzzle_id)
            else:
                puzzle = generate_puzzle(
                    constraints_for_difficulty(difficulty), rng=self.rng, puzzle_id=puzzle_id
                )

            if not self.solution_tracker.is_new(puzzle.solution):
                self.generation_stats["duplicate_rejections"] += 1
                logger.debug(f"Duplicate solution for {puzzle_id}, regenerating")
                continue

            self.solution_tracker.record(puzzle.solution)
            if puzzle.difficulty != difficulty:
                self.generation_stats["fallbacks"] += 1
            return PuzzleEntry.from_puzzle(
                puzzle, generation_info={"requested_difficulty": difficulty}
            )
        return None

    def _generate_puzzle_id(self, difficulty: int, grid_size: int, sequence: int) -> str:
        """Generate unique puzzle identifier."""
        return f"crossmath_d{difficulty}_{grid_size}x{grid_size}_{sequence:03d}"

    def _save_puzzle_to_file(self, entry: PuzzleEntry, output_dir: str):
        """Save one puzzle entry as a JSON file."""
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        file_path = output_path / f"{entry.id}.json"
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(entry.to_json())
        logger.debug(f"Saved puzzle to {file_path}")

    def statistics_frame(self) -> pd.DataFrame:
        """One row per generated puzzle."""
        columns = [
            "id",
            "requested_difficulty",
            "difficulty",
            "grid_size",
            "blank_count",
            "density",
            "actual_difficulty",
            "attempts",
        ]
        rows = [
            {
                "id": entry.id,
                "requested_difficulty": entry.generation_metadata.get(
                    "requested_difficulty", entry.difficulty
                ),
                "difficulty": entry.difficulty,
                "grid_size": entry.grid_size,
                "blank_count": entry.blank_count,
                "density": entry.density,
                "actual_difficulty": entry.actual_difficulty,
                "attempts": entry.generation_metadata.get("attempts"),
            }
            for entry in self.entries
        ]
        return pd.DataFrame(rows, columns=columns)

    def save_statistics_csv(self, path: str) -> Path:
        """Write the per-puzzle statistics table to CSV."""
        csv_path = Path(path)
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        self.statistics_frame().to_csv(csv_path, index=False)
        logger.info(f"Saved generation statistics to {csv_path}")
        return csv_path

    def get_generation_statistics(self) -> Dict[str, Any]:
        """Summary statistics for the session."""
        stats = dict(self.generation_stats)
        requests = stats["total_requests"]
        stats["success_rate"] = (
            f"{stats['successful_generations'] / requests:.1%}" if requests else "0.0%"
        )

        if self.entries:
            difficulties = [entry.actual_difficulty for entry in self.entries]
            blanks = [entry.blank_count for entry in self.entries]
            attempts = [entry.generation_metadata.get("attempts", 0) for entry in self.entries]
            stats["average_actual_difficulty"] = f"{np.mean(difficulties):.2f}"
            stats["average_blank_count"] = f"{np.mean(blanks):.1f}"
            stats["average_attempts"] = f"{np.mean(attempts):.1f}"
        else:
            stats["average_actual_difficulty"] = "n/a"
            stats["average_blank_count"] = "n/a"
            stats["average_attempts"] = "n/a"

        return stats

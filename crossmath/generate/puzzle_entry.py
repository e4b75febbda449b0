"""
PuzzleEntry format for storing generated CrossMath puzzles as JSON.

This module defines the flat record written to disk for each generated
puzzle, different from the Puzzle value object handed to the player session.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional
import json
import logging

from ..core.base_puzzle import Cell, Operation, Operations, Puzzle
from ..core.equations import failing_lines
from .constraint_checker import actual_difficulty, operation_mix

logger = logging.getLogger(__name__)


@dataclass
class PuzzleEntry:
    """
    JSON record for a generated CrossMath puzzle.

    Attributes:
        id: Unique puzzle identifier (e.g., "crossmath_d1_3x3_001")
        grid_size: Grid side length
        difficulty: Requested difficulty level (1-5)
        empty_grid: Grid shown to the player, None for blank cells
        solved_grid: Complete solution grid
        operations: Operation symbols, {"horizontal": [[...]], "vertical": [[...]]}
        world: Thematic world
        targeted_skills: Skill tags
        blank_count: Number of blank cells
        density: Fraction of blank cells (0.0-1.0)
        actual_difficulty: Measured difficulty (1.0-5.0)
        operation_mix: Percentage of operation slots per symbol
        generation_metadata: Additional generation information
    """

    id: str
    grid_size: int
    difficulty: int
    empty_grid: List[List[Optional[int]]]
    solved_grid: List[List[int]]
    operations: Dict[str, List[List[str]]]
    world: str
    targeted_skills: List[str]
    blank_count: int
    density: float
    actual_difficulty: float
    operation_mix: Dict[str, float]
    generation_metadata: Dict[str, Any]

    def __post_init__(self):
        """Validate puzzle entry after initialization."""
        if not self.id:
            raise ValueError("Puzzle ID cannot be empty")

        if not self.empty_grid or not self.solved_grid:
            raise ValueError("Both empty_grid and solved_grid are required")

        # Validate grid dimensions consistency
        for name, grid in (("empty_grid", self.empty_grid), ("solved_grid", self.solved_grid)):
            rows = len(grid)
            cols = len(grid[0]) if grid else 0
            if rows != self.grid_size or cols != self.grid_size:
                raise ValueError(
                    f"{name} must be {self.grid_size}x{self.grid_size}, got {rows}x{cols}"
                )

        if not (1 <= self.difficulty <= 5):
            raise ValueError("Difficulty must be between 1 and 5")

        if not (1.0 <= self.actual_difficulty <= 5.0):
            raise ValueError("Actual difficulty must be between 1.0 and 5.0")

        if not (0.0 <= self.density <= 1.0):
            raise ValueError("Density must be between 0.0 and 1.0")

        blanks = sum(1 for row in self.empty_grid for cell in row if cell is None)
        if blanks != self.blank_count:
            raise ValueError("Blank count must match the empty cells of empty_grid")

    @classmethod
    def from_puzzle(cls, puzzle: Puzzle, generation_info: Dict[str, Any] = None):
        """
        Create PuzzleEntry from a generated Puzzle.

        Args:
            puzzle: Puzzle instance from the generator
            generation_info: Extra metadata merged over the puzzle's own

        Returns:
            PuzzleEntry instance
        """
        blank_count = puzzle.blank_count
        total_cells = puzzle.size * puzzle.size

        mix = {
            operation.symbol: round(share * 100, 2)
            for operation, share in operation_mix(puzzle.operations).items()
        }
        # Always include every operation for a consistent schema
        operation_percentages = {op.symbol: mix.get(op.symbol, 0.0) for op in Operation}

        metadata = dict(puzzle.generation_info)
        metadata.update(generation_info or {})

        return cls(
            id=puzzle.puzzle_id,
            grid_size=puzzle.size,
            difficulty=puzzle.difficulty,
            empty_grid=puzzle.values(),
            solved_grid=[list(row) for row in puzzle.solution],
            operations=puzzle.operations.to_dict(),
            world=puzzle.world,
            targeted_skills=list(puzzle.targeted_skills),
            blank_count=blank_count,
            density=blank_count / total_cells if total_cells > 0 else 0.0,
            actual_difficulty=actual_difficulty(
                blank_count, puzzle.size, puzzle.operations
            ),
            operation_mix=operation_percentages,
            generation_metadata=metadata,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PuzzleEntry":
        """Load an entry from ``to_dict`` output."""
        return cls(**{key: data[key] for key in cls.__dataclass_fields__})

    def to_puzzle(self) -> Puzzle:
        """Rebuild the Puzzle value object from this entry."""
        grid = [
            [Cell(row=r, col=c, value=value, fixed=value is not None) for c, value in enumerate(row)]
            for r, row in enumerate(self.empty_grid)
        ]
        return Puzzle(
            puzzle_id=self.id,
            grid=grid,
            operations=Operations.from_dict(self.operations),
            size=self.grid_size,
            difficulty=self.difficulty,
            solution=[list(row) for row in self.solved_grid],
            world=self.world,
            targeted_skills=list(self.targeted_skills),
            generation_info=dict(self.generation_metadata),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON storage."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def validate_grid_consistency(self) -> bool:
        """Validate that given cells match the solution and every equation holds."""
        for i, row in enumerate(self.empty_grid):
            for j, cell in enumerate(row):
                if cell is not None and cell != self.solved_grid[i][j]:
                    logger.warning(
                        f"Inconsistency at [{i},{j}]: given {cell}, solution has {self.solved_grid[i][j]}"
                    )
                    return False

        failures = failing_lines(self.solved_grid, Operations.from_dict(self.operations))
        if failures:
            logger.warning(f"Solution equations do not hold: {failures}")
            return False

        return True

    def get_statistics(self) -> Dict[str, Any]:
        """Get detailed statistics about this puzzle."""
        used = {symbol: share for symbol, share in self.operation_mix.items() if share > 0}
        return {
            "puzzle_id": self.id,
            "grid_size": f"{self.grid_size}x{self.grid_size}",
            "difficulty": self.difficulty,
            "actual_difficulty": f"{self.actual_difficulty:.2f}",
            "blank_count": self.blank_count,
            "density": f"{self.density:.1%}",
            "operations_used": sorted(used),
            "operation_balance": {
                "dominant_share": max(used.values()) / 100 if used else 0.0,
                "balance_ratio": min(used.values()) / max(used.values())
                if used
                else 0.0,
            },
            "attempts": self.generation_metadata.get("attempts"),
        }

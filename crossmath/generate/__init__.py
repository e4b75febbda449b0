"""
CrossMath Puzzle Generation Module

This module generates square arithmetic grids whose rows and columns are
exact equations, then blanks cells while the puzzle keeps exactly one
solution.

Architecture:
- grid_synthesizer: Random solved grid and operation matrices
- solution_counter: Capped backtracking count of completions
- cell_remover: Uniqueness-preserving blanking, interior cells first
- constraint_checker: Exactness, operation balance and difficulty fit
- puzzle_generator: Generate-and-validate loop with attempt budget
- difficulty: Level to constraints mapping and adaptive level choice
- puzzle_entry: PuzzleEntry dataclass for JSON export
- puzzle_builder: Batch orchestrator with statistics
"""

from .difficulty import constraints_for_difficulty, next_difficulty
from .puzzle_entry import PuzzleEntry
from .puzzle_generator import generate, generate_puzzle, generate_with_fallback
from .puzzle_builder import PuzzleBuilder


__all__ = [
    "constraints_for_difficulty",
    "next_difficulty",
    "PuzzleEntry",
    "generate",
    "generate_puzzle",
    "generate_with_fallback",
    "PuzzleBuilder",
]

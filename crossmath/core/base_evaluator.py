"""
Minimal base validator interface for player-filled grids.

This module provides the essential validator contract without unnecessary complexity.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class BaseValidator(ABC):
    """
    Base class for all player grid validators.

    Provides the minimal interface needed to check a filled-in grid.
    """

    @abstractmethod
    def validate_single(self, puzzle, grid) -> Dict[str, Any]:
        """
        Validate one player grid against its puzzle.

        Args:
            puzzle: Puzzle the grid was filled in for
            grid: Player grid (rows of values or rows of cells)

        Returns:
            Dict with validation results including success, per-line results, etc.
        """
        pass

    @abstractmethod
    def validate_batch(self, puzzles: List, grids: List) -> Dict[str, Any]:
        """
        Validate several player grids.

        Args:
            puzzles: List of puzzle objects
            grids: Player grids, one per puzzle

        Returns:
            Dict with per-grid results and summary metrics
        """
        pass

"""
Player grid validation for CrossMath puzzles.

A grid is correct when it is complete, every given cell is unchanged, and
every row and column equation holds. Line checks go through
``crossmath.core.equations``, the same evaluator the generator uses.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.base_evaluator import BaseValidator
from ..core.base_puzzle import Cell, Puzzle
from ..core.equations import column_holds, row_holds
from .metrics import CrossMathMetrics


def grid_values(grid) -> List[List[Optional[int]]]:
    """Normalise rows of values or rows of cells to rows of values."""
    return [
        [cell.value if isinstance(cell, Cell) else cell for cell in row] for row in grid
    ]


def _is_cell_value(value) -> bool:
    return value is None or (isinstance(value, int) and not isinstance(value, bool))


class GridValidator(BaseValidator):
    """
    Validator for player-filled CrossMath grids.

    Reports completeness, per-line equation results, whether the given cells
    were preserved, and detailed metrics.
    """

    def __init__(self):
        self.logger = logging.getLogger("GridValidator")
        self.metrics = CrossMathMetrics()

    def validate_single(self, puzzle: Puzzle, grid) -> Dict[str, Any]:
        """
        Validate one player grid.

        Args:
            puzzle: Puzzle the grid was filled in for
            grid: Rows of values (None when empty) or rows of Cell objects

        Returns:
            Dict with completeness, per-row and per-column results, and metrics
        """
        values = grid_values(grid)

        if len(values) != puzzle.size or any(len(row) != puzzle.size for row in values):
            self.logger.error(
                f"Grid for {puzzle.puzzle_id} is not {puzzle.size}x{puzzle.size}"
            )
            return {
                "puzzle_id": puzzle.puzzle_id,
                "success": False,
                "error": "Grid shape mismatch",
            }

        if not all(_is_cell_value(value) for row in values for value in row):
            self.logger.error(f"Grid for {puzzle.puzzle_id} has non-integer cells")
            return {
                "puzzle_id": puzzle.puzzle_id,
                "success": False,
                "error": "Grid cells must be integers or empty",
            }

        complete = all(value is not None for row in values for value in row)
        rows = [row_holds(values, i, puzzle.operations) for i in range(puzzle.size)]
        columns = [
            column_holds(values, j, puzzle.operations) for j in range(puzzle.size)
        ]
        fixed_preserved = all(
            values[cell.row][cell.col] == cell.value
            for row in puzzle.grid
            for cell in row
            if cell.fixed
        )
        all_hold = all(rows) and all(columns)

        result = {
            "puzzle_id": puzzle.puzzle_id,
            "complete": complete,
            "rows": rows,
            "columns": columns,
            "all_equations_hold": all_hold,
            "fixed_cells_preserved": fixed_preserved,
            "success": complete and all_hold and fixed_preserved,
            "metrics": self.metrics.compute_metrics(values, puzzle),
        }

        self.logger.info(
            f"Validated {puzzle.puzzle_id}: complete={complete}, "
            f"equations={sum(rows) + sum(columns)}/{len(rows) + len(columns)}"
        )
        return result

    def check_cell(self, puzzle: Puzzle, row: int, col: int, value: int) -> bool:
        """Whether ``value`` is the solution value of cell (row, col)."""
        return puzzle.solution[row][col] == value

    def validate_batch(self, puzzles: List, grids: List) -> Dict[str, Any]:
        """
        Validate several player grids.

        Args:
            puzzles: List of Puzzle objects
            grids: Player grids, one per puzzle

        Returns:
            Dict with individual results and summary metrics
        """
        if len(puzzles) != len(grids):
            raise ValueError(
                f"Got {len(puzzles)} puzzles but {len(grids)} grids"
            )

        self.logger.info(f"Starting batch validation of {len(puzzles)} grids")

        results = [
            self.validate_single(puzzle, grid) for puzzle, grid in zip(puzzles, grids)
        ]
        successes = sum(1 for result in results if result["success"])

        return {
            "total_grids": len(results),
            "individual_results": results,
            "summary_metrics": {
                "successful_grids": successes,
                "success_rate": successes / len(results) if results else 0.0,
            },
        }

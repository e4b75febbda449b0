"""
CrossMath player grid metrics.

This module scores a player-filled grid against a puzzle: how many editable
cells match the solution, how much of the grid is filled in, and how many of
the row and column equations currently hold.
"""

import logging
from typing import Any, Dict

import numpy as np

from ..core.equations import column_holds, row_holds


class CrossMathMetrics:
    """
    Computes CrossMath grid evaluation metrics.

    Cell accuracy only looks at the editable (blank) cells, since the given
    cells cannot be changed by the player.
    """

    def __init__(self):
        self.logger = logging.getLogger("CrossMathMetrics")

    def compute_metrics(self, player_grid, puzzle) -> Dict[str, Any]:
        """
        Score a player grid.

        Args:
            player_grid: Rows of values (None for empty cells)
            puzzle: Puzzle the grid was filled in for

        Returns:
            Dict with computed metrics including:
            - Cell accuracy over editable cells
            - Fill ratio of editable cells
            - Row, column and overall equation accuracy
        """
        grid = np.array(player_grid, dtype=object)
        solution = np.array(puzzle.solution, dtype=object)

        if grid.size == 0 or solution.size == 0:
            self.logger.error("Player grid or solution grid is empty.")
            return self._empty_metrics()

        if grid.shape != solution.shape:
            self.logger.error(f"Grid shape mismatch: {grid.shape} vs {solution.shape}")
            return self._empty_metrics()

        editable = np.array(
            [[value is None for value in row] for row in puzzle.values()], dtype=bool
        )
        filled = np.array(
            [[value is not None for value in row] for row in player_grid], dtype=bool
        )
        matches = (grid == solution).astype(bool)

        total_editable = int(np.sum(editable))
        correct_cells = int(np.sum(matches & editable))
        filled_cells = int(np.sum(filled & editable))
        cell_accuracy = correct_cells / total_editable if total_editable > 0 else 1.0
        fill_ratio = filled_cells / total_editable if total_editable > 0 else 1.0

        values = grid.tolist()
        operations = puzzle.operations
        # Only lines that carry an equation count; the result row has none
        row_count = min(len(values), len(operations.horizontal))
        column_count = min(len(values[0]), len(operations.vertical))
        rows = [row_holds(values, i, operations) for i in range(row_count)]
        columns = [column_holds(values, j, operations) for j in range(column_count)]
        lines = rows + columns

        row_accuracy = float(np.mean(rows)) if rows else 1.0
        column_accuracy = float(np.mean(columns)) if columns else 1.0
        equation_accuracy = float(np.mean(lines)) if lines else 1.0

        self.logger.info(f"Cell accuracy: {cell_accuracy:.3f}")
        self.logger.info(f"Equation accuracy: {equation_accuracy:.3f}")

        return {
            "cell_accuracy": cell_accuracy,
            "fill_ratio": fill_ratio,
            "row_accuracy": row_accuracy,
            "column_accuracy": column_accuracy,
            "equation_accuracy": equation_accuracy,
            # Detailed counts for analysis
            "correct_cells": correct_cells,
            "filled_cells": filled_cells,
            "total_editable_cells": total_editable,
            "correct_equations": int(sum(lines)),
            "total_equations": len(lines),
            "success": bool(np.all(matches)) and all(lines),
        }

    def _empty_metrics(self) -> Dict[str, Any]:
        return {
            "cell_accuracy": 0.0,
            "fill_ratio": 0.0,
            "row_accuracy": 0.0,
            "column_accuracy": 0.0,
            "equation_accuracy": 0.0,
            "correct_cells": 0,
            "filled_cells": 0,
            "total_editable_cells": 0,
            "correct_equations": 0,
            "total_equations": 0,
            "success": False,
        }

"""
Test suite for crossmath.evaluate module.
Tests player grid validation and metrics calculation.
"""

import pytest
import numpy as np

from crossmath.core.base_evaluator import BaseValidator
from crossmath.evaluate.grid_validator import GridValidator, grid_values
from crossmath.evaluate.metrics import CrossMathMetrics


class TestGridValidator:
    """Test GridValidator functionality."""

    @pytest.fixture
    def validator(self):
        return GridValidator()

    def test_is_base_validator(self, validator):
        """GridValidator implements the BaseValidator contract."""
        assert isinstance(validator, BaseValidator)

    def test_solved_grid(self, validator, puzzle, solution):
        """The solution grid passes every check."""
        result = validator.validate_single(puzzle, solution)

        assert result["success"] is True
        assert result["complete"] is True
        assert result["rows"] == [True, True, True]
        assert result["columns"] == [True, True, True]
        assert result["all_equations_hold"] is True
        assert result["fixed_cells_preserved"] is True
        assert result["metrics"]["cell_accuracy"] == 1.0

    def test_unfinished_grid(self, validator, puzzle):
        """An empty blank makes the grid incomplete and its lines fail."""
        result = validator.validate_single(puzzle, puzzle.values())

        assert result["success"] is False
        assert result["complete"] is False
        assert result["rows"] == [True, False, True]
        assert result["columns"] == [True, False, True]
        assert result["fixed_cells_preserved"] is True

    def test_wrong_value(self, validator, puzzle, solution):
        """A wrong entry breaks its row and column."""
        solution[1][1] = 2
        result = validator.validate_single(puzzle, solution)

        assert result["complete"] is True
        assert result["all_equations_hold"] is False
        assert result["success"] is False

    def test_changed_given_cell(self, validator, puzzle, solution):
        """Editing a given cell is reported even if the other checks pass."""
        grid = [row[:] for row in solution]
        grid[0][0] = 3
        result = validator.validate_single(puzzle, grid)

        assert result["fixed_cells_preserved"] is False
        assert result["success"] is False

    def test_accepts_cell_grids(self, validator, puzzle):
        """Rows of Cell objects are validated like rows of values."""
        cells = puzzle.copy_grid()
        cells[1][1].value = 1
        assert grid_values(cells)[1] == [4, 1, 3]
        assert validator.validate_single(puzzle, cells)["success"] is True

    def test_shape_mismatch(self, validator, puzzle):
        """Grids of the wrong size are rejected without a crash."""
        result = validator.validate_single(puzzle, [[1, 2], [3, 4]])
        assert result["success"] is False
        assert result["error"] == "Grid shape mismatch"

    @pytest.mark.parametrize("bad_value", ["1", 1.0, True, [1]])
    def test_non_integer_cells(self, validator, puzzle, solution, bad_value):
        """Cells that are not integers are rejected without a crash."""
        grid = [row[:] for row in solution]
        grid[1][1] = bad_value
        result = validator.validate_single(puzzle, grid)
        assert result["success"] is False
        assert result["error"] == "Grid cells must be integers or empty"

    def test_check_cell(self, validator, puzzle):
        """Per-cell feedback compares against the solution."""
        assert validator.check_cell(puzzle, 1, 1, 1)
        assert not validator.check_cell(puzzle, 1, 1, 2)

    def test_batch_validation(self, validator, puzzle, solution):
        """Batch results carry a success rate."""
        result = validator.validate_batch([puzzle, puzzle], [solution, puzzle.values()])

        assert result["total_grids"] == 2
        assert len(result["individual_results"]) == 2
        assert result["summary_metrics"]["successful_grids"] == 1
        assert result["summary_metrics"]["success_rate"] == 0.5

    def test_batch_length_mismatch(self, validator, puzzle):
        """Each puzzle needs exactly one grid."""
        with pytest.raises(ValueError):
            validator.validate_batch([puzzle], [])


class TestCrossMathMetrics:
    """Test CrossMathMetrics calculation."""

    @pytest.fixture
    def metrics(self):
        return CrossMathMetrics()

    def test_perfect_grid(self, metrics, puzzle, solution):
        """A solved grid scores full marks."""
        result = metrics.compute_metrics(solution, puzzle)

        assert result["cell_accuracy"] == 1.0
        assert result["fill_ratio"] == 1.0
        assert result["equation_accuracy"] == 1.0
        assert result["correct_equations"] == 5
        assert result["total_equations"] == 5
        assert result["total_editable_cells"] == 1
        assert result["success"] is True

    def test_untouched_grid(self, metrics, puzzle):
        """Nothing filled in: no editable cell correct, two equations open."""
        result = metrics.compute_metrics(puzzle.values(), puzzle)

        assert result["cell_accuracy"] == 0.0
        assert result["fill_ratio"] == 0.0
        assert result["row_accuracy"] == pytest.approx(1 / 2)
        assert result["column_accuracy"] == pytest.approx(2 / 3)
        assert result["equation_accuracy"] == pytest.approx(3 / 5)
        assert result["success"] is False

    def test_accepts_numpy_grid(self, metrics, puzzle, solution):
        """Player grids may be numpy arrays."""
        result = metrics.compute_metrics(np.array(solution), puzzle)
        assert result["success"] is True

    def test_shape_mismatch(self, metrics, puzzle):
        """Mismatched shapes return empty metrics."""
        result = metrics.compute_metrics([[1, 2], [3, 4]], puzzle)
        assert result["success"] is False
        assert result["total_equations"] == 0

"""
Test suite for crossmath.core.
Tests operation parsing, constraint validation, the puzzle value object and
the shared equation evaluator.
"""

import dataclasses

import pytest

from crossmath.core.base_puzzle import Cell, Constraints, Operation, Operations, Puzzle
from crossmath.core.equations import (
    apply_operation,
    evaluate_line,
    failing_lines,
    grid_holds,
    line_holds,
)
from crossmath.core.errors import CrossMathError, GenerationExhausted, InvalidConstraintInput

ADD = Operation.ADD
SUB = Operation.SUBTRACT
MUL = Operation.MULTIPLY
DIV = Operation.DIVIDE


class TestOperation:
    """Test the Operation enum."""

    def test_symbols_and_weights(self):
        """Each operation exposes its symbol and difficulty weight."""
        assert [op.symbol for op in Operation] == ["+", "-", "×", "÷"]
        assert [op.weight for op in Operation] == [1.0, 1.5, 2.0, 2.5]

    def test_from_symbol_aliases(self):
        """ASCII spellings map to the canonical operations."""
        assert Operation.from_symbol("+") is ADD
        assert Operation.from_symbol("−") is SUB
        assert Operation.from_symbol("x") is MUL
        assert Operation.from_symbol("*") is MUL
        assert Operation.from_symbol("/") is DIV
        assert Operation.from_symbol(DIV) is DIV

    def test_unknown_symbol(self):
        """Unknown symbols raise InvalidConstraintInput, which is a ValueError."""
        with pytest.raises(InvalidConstraintInput):
            Operation.from_symbol("^")
        with pytest.raises(ValueError):
            Operation.from_symbol("%")


class TestConstraints:
    """Test Constraints validation."""

    def test_valid_constraints(self):
        """Symbols are normalised and duplicates dropped in order."""
        constraints = Constraints(
            grid_size=4, operations=["+", "x", ADD], number_range=(1, 20), difficulty=3
        )
        assert constraints.operations == [ADD, MUL]
        assert constraints.slots_per_line == 2

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"grid_size": 1},
            {"operations": []},
            {"number_range": (0, 10)},
            {"number_range": (10, 5)},
            {"number_range": (1, 2, 3)},
            {"difficulty": 0},
            {"difficulty": 6},
        ],
    )
    def test_invalid_constraints(self, kwargs):
        """Malformed fields raise InvalidConstraintInput."""
        fields = {
            "grid_size": 3,
            "operations": [ADD, SUB],
            "number_range": (1, 10),
            "difficulty": 1,
        }
        fields.update(kwargs)
        with pytest.raises(InvalidConstraintInput):
            Constraints(**fields)

    def test_error_hierarchy(self):
        """Both generator errors share the CrossMathError base."""
        error = GenerationExhausted("no luck", attempts=12)
        assert isinstance(error, CrossMathError)
        assert isinstance(error, RuntimeError)
        assert error.attempts == 12
        assert issubclass(InvalidConstraintInput, CrossMathError)


class TestPuzzle:
    """Test the Puzzle value object."""

    def test_blank_positions(self, puzzle):
        """Blank cells are reported by position."""
        assert puzzle.blank_positions() == [(1, 1)]
        assert puzzle.blank_count == 1
        assert puzzle.values()[1] == [4, None, 3]
        assert puzzle.get_size() == (3, 3)

    def test_puzzle_is_frozen(self, puzzle):
        """Puzzle fields cannot be reassigned."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            puzzle.difficulty = 5

    def test_copy_grid_is_independent(self, puzzle):
        """Editing a copied grid leaves the puzzle untouched."""
        grid = puzzle.copy_grid()
        grid[1][1].value = 9
        assert puzzle.grid[1][1].value is None

    def test_dict_round_trip(self, puzzle):
        """to_dict output rebuilds an equal puzzle."""
        data = puzzle.to_dict()
        assert data["operations"] == {
            "horizontal": [["+"], ["-"]],
            "vertical": [["+"], ["-"], ["+"]],
        }
        restored = Puzzle.from_dict(data)
        assert restored == puzzle
        assert restored.grid[1][1].fixed is False

    def test_cell_properties(self):
        """Cells expose their position and blank state."""
        cell = Cell(row=2, col=1)
        assert cell.position == (2, 1)
        assert cell.is_blank
        assert cell.fixed


class TestEquations:
    """Test the shared equation evaluator."""

    def test_left_to_right_evaluation(self):
        """Operations apply strictly left to right, without precedence."""
        assert evaluate_line([2, 3, 4], [ADD, MUL]) == 20
        assert evaluate_line([10, 2, 3], [SUB, SUB]) == 5

    def test_division_must_be_exact(self):
        """Division with a remainder yields no value."""
        assert apply_operation(8, DIV, 2) == 4
        assert apply_operation(7, DIV, 2) is None
        assert apply_operation(7, DIV, 0) is None
        assert evaluate_line([9, 2, 3], [DIV, MUL]) is None

    def test_operation_count_mismatch(self):
        """Operand and operation counts must line up."""
        with pytest.raises(ValueError):
            evaluate_line([1, 2, 3], [ADD])

    def test_line_holds(self):
        """A line holds only when complete and exact."""
        assert line_holds([4, 1, 3], [SUB])
        assert not line_holds([4, 2, 3], [SUB])
        assert not line_holds([4, None, 3], [SUB])

    def test_reference_grid_holds(self, solution, operations):
        """Every row and column of the reference grid holds."""
        assert grid_holds(solution, operations)
        assert failing_lines(solution, operations) == []

    def test_worked_example(self, solution):
        """The 3x3 worked example holds with two row equations."""
        operations = Operations(horizontal=[[ADD], [SUB]], vertical=[[ADD], [SUB], [ADD]])
        assert grid_holds(solution, operations)

    def test_failing_lines(self, solution, operations):
        """A wrong value breaks both of its lines."""
        solution[1][1] = 2
        assert failing_lines(solution, operations) == [("row", 1), ("column", 1)]

    def test_lines_without_operations_are_unconstrained(self, solution):
        """Rows and columns past the operation lists are not checked."""
        partial = Operations(horizontal=[[ADD]], vertical=[])
        solution[2][2] = 99
        assert grid_holds(solution, partial)

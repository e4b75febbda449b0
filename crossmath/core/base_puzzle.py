"""
Core value objects for CrossMath puzzles.

A CrossMath puzzle is a square grid of numeric cells. Every row and every
column is an equation: the first ``size - 1`` cells are operands combined left
to right by the line's operations, and the last cell holds the result::

    [2] + [3] = [5]
     +     -     +
    [4] - [1] = [3]
     =     =     =
    [6]   [2]   [8]

Each line therefore carries ``size - 2`` operations. This module only holds
data; evaluation lives in ``crossmath.core.equations``.
"""

import copy
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import InvalidConstraintInput


class Operation(Enum):
    """Arithmetic operations that can link two adjacent cells."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "×"
    DIVIDE = "÷"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def weight(self) -> float:
        """Difficulty weight used when scoring a puzzle."""
        return OPERATION_WEIGHTS[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> "Operation":
        """
        Parse an operation from its symbol.

        Accepts the canonical symbols plus common ASCII spellings
        (``-``, ``x``, ``*``, ``/``).

        Raises:
            InvalidConstraintInput: If the symbol is not recognised
        """
        if isinstance(symbol, Operation):
            return symbol
        operation = _SYMBOL_ALIASES.get(str(symbol).strip().lower())
        if operation is None:
            raise InvalidConstraintInput(f"Unknown operation symbol: {symbol!r}")
        return operation


OPERATION_WEIGHTS = {
    Operation.ADD: 1.0,
    Operation.SUBTRACT: 1.5,
    Operation.MULTIPLY: 2.0,
    Operation.DIVIDE: 2.5,
}

_SYMBOL_ALIASES = {
    "+": Operation.ADD,
    "-": Operation.SUBTRACT,
    "−": Operation.SUBTRACT,
    "×": Operation.MULTIPLY,
    "x": Operation.MULTIPLY,
    "*": Operation.MULTIPLY,
    "÷": Operation.DIVIDE,
    "/": Operation.DIVIDE,
}

WORLDS = ["egypt", "maya", "greece", "china", "future"]


@dataclass
class Cell:
    """A single grid cell; identity is its (row, col) position."""

    row: int
    col: int
    value: Optional[int] = None
    fixed: bool = True  # Pre-filled, not editable by the player

    @property
    def position(self) -> Tuple[int, int]:
        return (self.row, self.col)

    @property
    def is_blank(self) -> bool:
        return self.value is None


@dataclass
class Operations:
    """
    Operation matrices of a puzzle.

    Attributes:
        horizontal: One list of operations per row, applied left to right
        vertical: One list of operations per column, applied top to bottom
    """

    horizontal: List[List[Operation]]
    vertical: List[List[Operation]]

    def slots(self) -> Iterator[Operation]:
        """Iterate over every operation slot, rows first."""
        for line in self.horizontal:
            yield from line
        for line in self.vertical:
            yield from line

    def slot_count(self) -> int:
        return sum(len(line) for line in self.horizontal) + sum(
            len(line) for line in self.vertical
        )

    def to_dict(self) -> Dict[str, List[List[str]]]:
        return {
            "horizontal": [[op.symbol for op in line] for line in self.horizontal],
            "vertical": [[op.symbol for op in line] for line in self.vertical],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, List[List[str]]]) -> "Operations":
        return cls(
            horizontal=[
                [Operation.from_symbol(s) for s in line] for line in data["horizontal"]
            ],
            vertical=[
                [Operation.from_symbol(s) for s in line] for line in data["vertical"]
            ],
        )


@dataclass
class Constraints:
    """
    Input contract of the generator.

    Attributes:
        grid_size: Side length of the square grid (at least 2)
        operations: Allowed operations (non-empty, duplicates dropped)
        number_range: Inclusive (low, high) range for synthesized operands
        difficulty: Target difficulty level, 1 to 5

    Raises:
        InvalidConstraintInput: On any malformed field
    """

    grid_size: int
    operations: List[Operation]
    number_range: Tuple[int, int]
    difficulty: int

    def __post_init__(self):
        if not isinstance(self.grid_size, int) or self.grid_size < 2:
            raise InvalidConstraintInput(
                f"Grid size must be an integer of at least 2, got {self.grid_size!r}"
            )

        if not self.operations:
            raise InvalidConstraintInput("Operation set cannot be empty")

        # Normalise symbols and drop duplicates, keeping the given order
        unique_operations = []
        for operation in self.operations:
            operation = Operation.from_symbol(operation)
            if operation not in unique_operations:
                unique_operations.append(operation)
        self.operations = unique_operations

        if len(self.number_range) != 2:
            raise InvalidConstraintInput(
                f"Number range must be a (low, high) pair, got {self.number_range!r}"
            )
        low, high = self.number_range
        if low < 1 or high < low:
            raise InvalidConstraintInput(
                f"Number range must satisfy 1 <= low <= high, got ({low}, {high})"
            )
        self.number_range = (int(low), int(high))

        if not (1 <= self.difficulty <= 5):
            raise InvalidConstraintInput(
                f"Difficulty must be between 1 and 5, got {self.difficulty!r}"
            )

    @property
    def slots_per_line(self) -> int:
        return self.grid_size - 2


def generate_puzzle_id() -> str:
    """Generate a unique puzzle identifier."""
    return f"puzzle_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


@dataclass(frozen=True)
class Puzzle:
    """
    A finished CrossMath puzzle as handed to the player.

    Built whole by the generator and never mutated afterwards. Gameplay code
    works on ``copy_grid()``.

    Attributes:
        puzzle_id: Unique identifier
        grid: Cells; blanks have ``value=None`` and ``fixed=False``
        operations: Horizontal and vertical operation matrices
        size: Grid side length
        difficulty: Requested difficulty level (1-5)
        solution: Complete solution grid, kept for validation only
        world: Thematic world (presentation metadata)
        level: Level number within the world (presentation metadata)
        targeted_skills: Skill tags (presentation metadata)
        generation_info: Attempt count and measured difficulty
    """

    puzzle_id: str
    grid: List[List[Cell]]
    operations: Operations
    size: int
    difficulty: int
    solution: List[List[int]]
    world: str = "egypt"
    level: int = 1
    targeted_skills: List[str] = field(default_factory=list)
    generation_info: Dict[str, Any] = field(default_factory=dict)

    def get_size(self) -> Tuple[int, int]:
        return (self.size, self.size)

    def get_solution(self) -> List[List[int]]:
        return self.solution

    def values(self) -> List[List[Optional[int]]]:
        """Grid values as shown to the player, ``None`` for blanks."""
        return [[cell.value for cell in row] for row in self.grid]

    def blank_positions(self) -> List[Tuple[int, int]]:
        return [cell.position for row in self.grid for cell in row if cell.is_blank]

    @property
    def blank_count(self) -> int:
        return len(self.blank_positions())

    def copy_grid(self) -> List[List[Cell]]:
        """Independent copy of the cells for a gameplay session."""
        return copy.deepcopy(self.grid)

    def to_dict(self) -> Dict[str, Any]:
        """Convert puzzle to a JSON-ready dictionary."""
        return {
            "id": self.puzzle_id,
            "size": self.size,
            "difficulty": self.difficulty,
            "level": self.level,
            "grid": self.values(),
            "operations": self.operations.to_dict(),
            "solution": [list(row) for row in self.solution],
            "world": self.world,
            "targeted_skills": list(self.targeted_skills),
            "generation_info": dict(self.generation_info),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Puzzle":
        """Rebuild a puzzle from ``to_dict`` output; null cells become blanks."""
        grid = [
            [
                Cell(row=r, col=c, value=value, fixed=value is not None)
                for c, value in enumerate(row)
            ]
            for r, row in enumerate(data["grid"])
        ]
        return cls(
            puzzle_id=data["id"],
            grid=grid,
            operations=Operations.from_dict(data["operations"]),
            size=data.get("size", len(grid)),
            difficulty=data["difficulty"],
            solution=[list(row) for row in data["solution"]],
            world=data.get("world", "egypt"),
            level=data.get("level", 1),
            targeted_skills=list(data.get("targeted_skills", [])),
            generation_info=dict(data.get("generation_info", {})),
        )

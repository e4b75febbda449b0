"""
Grid synthesis: build a fully filled CrossMath grid and its operation matrices.

Cells start as random operands. Every row except the bottom one carries an
equation, and its result cell (last column) is recomputed from the row's
operands. Each column's result cell is then recomputed from the column's
operands, overwriting the bottom row in place; the bottom row is the result
row and has no equation of its own. Rounded divisions, negative differences
floored at 1 and values fed through the result column can leave a line
inexact. None of this is detected here; the constraint checker rejects such
grids and the generator retries.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..core.base_puzzle import Cell, Constraints, Operation, Operations

logger = logging.getLogger(__name__)


@dataclass
class GridDraft:
    """Fully filled grid produced by one synthesis pass."""

    solution: List[List[int]]
    operations: Operations

    @property
    def size(self) -> int:
        return len(self.solution)

    def to_cells(self) -> List[List[Cell]]:
        """All cells filled and fixed; nothing blanked yet."""
        return [
            [Cell(row=r, col=c, value=value, fixed=True) for c, value in enumerate(row)]
            for r, row in enumerate(self.solution)
        ]


def _trailing_value(operands: Sequence[int], operations: Sequence[Operation]) -> int:
    """
    Result cell value for a line of operands.

    Division and multiplication are carried out on real numbers and the total
    rounded to the nearest integer (halves up), never below 1.
    """
    result = float(operands[0])
    for operation, value in zip(operations, operands[1:]):
        if operation is Operation.ADD:
            result += value
        elif operation is Operation.SUBTRACT:
            result -= value
        elif operation is Operation.MULTIPLY:
            result *= value
        else:
            result /= value
    return max(1, math.floor(result + 0.5))


def synthesize_grid(
    constraints: Constraints, rng: Optional[random.Random] = None
) -> GridDraft:
    """
    Synthesize a filled grid for the given constraints.

    Args:
        constraints: Grid size, allowed operations and operand range
        rng: Random source; a fresh one is created when omitted

    Returns:
        GridDraft with solution values and operation matrices
    """
    rng = rng or random.Random()
    size = constraints.grid_size
    low, high = constraints.number_range
    allowed = constraints.operations
    slots = constraints.slots_per_line

    values = [[rng.randint(low, high) for _ in range(size)] for _ in range(size)]
    horizontal = [[rng.choice(allowed) for _ in range(slots)] for _ in range(size - 1)]
    vertical = [[rng.choice(allowed) for _ in range(slots)] for _ in range(size)]

    for row in range(size - 1):
        values[row][size - 1] = _trailing_value(values[row][:-1], horizontal[row])

    for col in range(size):
        operands = [values[row][col] for row in range(size - 1)]
        values[size - 1][col] = _trailing_value(operands, vertical[col])

    logger.debug(f"Synthesized {size}x{size} grid: {values}")
    return GridDraft(solution=values, operations=Operations(horizontal, vertical))

"""
Cell removal: turn a solved grid into a player-facing puzzle.

Cells are blanked one at a time in order of importance. After each tentative
blank the solution counter must still report exactly one solution; otherwise
the cell is restored and the next candidate is tried.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..core.base_puzzle import Cell, Operations
from .solution_counter import DEFAULT_VALUE_RANGE, count_solutions

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


@dataclass
class RemovalResult:
    """Outcome of a removal pass."""

    cells: List[List[Cell]]
    blanked: List[Position] = field(default_factory=list)
    restored: List[Position] = field(default_factory=list)
    skipped: List[Position] = field(default_factory=list)

    @property
    def blank_count(self) -> int:
        return len(self.blanked)


def target_blank_count(size: int, difficulty: int) -> int:
    """Number of cells to blank: floor(size² × (0.3 + difficulty × 0.1))."""
    # round() first so that float noise like 19.999999 does not lose a cell
    return math.floor(round(size * size * (0.3 + difficulty * 0.1), 9))


def rank_cells(
    size: int, rng: Optional[random.Random] = None, jitter: float = 0.5
) -> List[Position]:
    """
    Order every cell for removal, most important first.

    Importance is the number of interior bands (row and column) a cell lies
    in, plus a random jitter in [0, jitter) so runs do not repeat.
    """
    rng = rng or random.Random()
    scored = []
    for r in range(size):
        for c in range(size):
            importance = (0 < r < size - 1) + (0 < c < size - 1)
            scored.append((importance + rng.random() * jitter, (r, c)))
    scored.sort(key=lambda item: item[0], reverse=True)
    return [position for _, position in scored]


def remove_cells(
    cells: Sequence[Sequence[Cell]],
    solution: Sequence[Sequence[int]],
    operations: Operations,
    target: int,
    order: Optional[Sequence[Position]] = None,
    rng: Optional[random.Random] = None,
    jitter: float = 0.5,
    value_range: Tuple[int, int] = DEFAULT_VALUE_RANGE,
    solution_limit: int = 2,
) -> RemovalResult:
    """
    Blank up to ``target`` cells while keeping the solution unique.

    Args:
        cells: Filled grid; copied, never modified
        solution: Solution values
        operations: Operation matrices
        target: Number of blanks wanted
        order: Removal order; ranked with ``rank_cells`` when omitted
        rng: Random source for the ranking jitter
        jitter: Upper bound of the ranking jitter
        value_range: Candidate range of the solution counter
        solution_limit: Early-exit cap passed to the solution counter

    Returns:
        RemovalResult with the new cells and the positions blanked, restored
        and skipped
    """
    size = len(solution)
    scratch = [[Cell(cell.row, cell.col, cell.value, cell.fixed) for cell in row] for row in cells]
    values = [[cell.value for cell in row] for row in scratch]
    result = RemovalResult(cells=scratch)

    if order is None:
        order = rank_cells(size, rng=rng, jitter=jitter)

    low, high = value_range
    for r, c in order:
        if result.blank_count >= target:
            break
        if values[r][c] is None:
            continue

        # The counter could never find this value, so uniqueness would be unsound
        if not (low <= solution[r][c] <= high):
            result.skipped.append((r, c))
            continue

        values[r][c] = None
        count = count_solutions(
            values, operations, limit=solution_limit, value_range=value_range
        )
        if count == 1:
            scratch[r][c].value = None
            scratch[r][c].fixed = False
            result.blanked.append((r, c))
        else:
            values[r][c] = solution[r][c]
            scratch[r][c].value = solution[r][c]
            scratch[r][c].fixed = True
            result.restored.append((r, c))
            logger.debug(f"Restored cell ({r}, {c}): {count} solution(s) when blank")

    logger.debug(
        f"Removal pass: {result.blank_count}/{target} blanked, "
        f"{len(result.restored)} restored, {len(result.skipped)} out of counter range"
    )
    return result

"""
Backtracking solution counter.

Counts how many assignments of the blank cells satisfy every row and column
equation at once, stopping as soon as ``limit`` solutions are found. Callers
only ever need to distinguish zero, one, and more than one.

Candidates are tried from a fixed value range (1..20 by default) regardless
of the range the grid was synthesized with, so a true solution value outside
that range is invisible to the counter.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..core.base_puzzle import Operations
from ..core.equations import column_holds, row_holds

logger = logging.getLogger(__name__)

DEFAULT_VALUE_RANGE = (1, 20)


def count_solutions(
    values: Sequence[Sequence[Optional[int]]],
    operations: Operations,
    limit: int = 2,
    value_range: Tuple[int, int] = DEFAULT_VALUE_RANGE,
) -> int:
    """
    Count global solutions of a partially filled grid, capped at ``limit``.

    Lines that contain no blanks are never checked; only lines completed by
    an assignment are. A grid with no blanks has exactly one solution.

    Args:
        values: Grid values with None for blanks; not modified
        operations: Operation matrices of the puzzle
        limit: Stop searching once this many solutions are found
        value_range: Inclusive candidate range for every blank

    Returns:
        Number of solutions found, between 0 and ``limit``
    """
    grid: List[List[Optional[int]]] = [list(row) for row in values]
    blanks = [
        (r, c) for r, row in enumerate(grid) for c, value in enumerate(row) if value is None
    ]
    if not blanks:
        return 1

    size = len(grid)
    open_in_row = [sum(1 for value in row if value is None) for row in grid]
    open_in_col = [
        sum(1 for r in range(size) if grid[r][c] is None) for c in range(len(grid[0]))
    ]
    candidates = range(value_range[0], value_range[1] + 1)
    found = 0

    def search(index: int) -> bool:
        nonlocal found
        if index == len(blanks):
            found += 1
            return found >= limit

        r, c = blanks[index]
        open_in_row[r] -= 1
        open_in_col[c] -= 1
        done = False
        for candidate in candidates:
            grid[r][c] = candidate
            if open_in_row[r] == 0 and not row_holds(grid, r, operations):
                continue
            if open_in_col[c] == 0 and not column_holds(grid, c, operations):
                continue
            if search(index + 1):
                done = True
                break
        grid[r][c] = None
        open_in_row[r] += 1
        open_in_col[c] += 1
        return done

    search(0)
    logger.debug(f"Counted {found} solution(s) for {len(blanks)} blank cell(s)")
    return found


def has_unique_solution(
    values: Sequence[Sequence[Optional[int]]],
    operations: Operations,
    value_range: Tuple[int, int] = DEFAULT_VALUE_RANGE,
) -> bool:
    return count_solutions(values, operations, limit=2, value_range=value_range) == 1

"""
Shared fixtures for the CrossMath test suite.

The reference grid used throughout::

    [2] + [3] = [5]
     +     -     +
    [4] - [1] = [3]
     =     =     =
    [6]   [2]   [8]

The bottom row is the result row and has no equation of its own.
"""

import pytest

from crossmath.core.base_puzzle import Cell, Operation, Operations, Puzzle

ADD = Operation.ADD
SUB = Operation.SUBTRACT


@pytest.fixture
def solution():
    return [[2, 3, 5], [4, 1, 3], [6, 2, 8]]


@pytest.fixture
def operations():
    return Operations(horizontal=[[ADD], [SUB]], vertical=[[ADD], [SUB], [ADD]])


@pytest.fixture
def puzzle(solution, operations):
    """Reference puzzle with the centre cell blanked."""
    grid = [
        [Cell(row=r, col=c, value=value, fixed=True) for c, value in enumerate(row)]
        for r, row in enumerate(solution)
    ]
    grid[1][1] = Cell(row=1, col=1, value=None, fixed=False)
    return Puzzle(
        puzzle_id="crossmath_d1_3x3_001",
        grid=grid,
        operations=operations,
        size=3,
        difficulty=1,
        solution=solution,
        world="egypt",
        targeted_skills=["logic", "mastery"],
        generation_info={"attempts": 7},
    )


@pytest.fixture
def division_solution():
    """8 ÷ 2 = 4 and 6 ÷ 3 = 2, with columns 8 - 6, 2 × 3 and 4 ÷ 2."""
    return [[8, 2, 4], [6, 3, 2], [2, 6, 2]]


@pytest.fixture
def division_operations():
    return Operations(
        horizontal=[[Operation.DIVIDE], [Operation.DIVIDE]],
        vertical=[[SUB], [Operation.MULTIPLY], [Operation.DIVIDE]],
    )

"""
Difficulty levels: mapping a level to generation constraints, and choosing the
next level after a solved puzzle.
"""

from typing import List

from ..core.base_puzzle import Constraints, Operation, WORLDS
from ..core.errors import InvalidConstraintInput

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5


def _check_level(difficulty: int):
    if not isinstance(difficulty, int) or not (
        MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY
    ):
        raise InvalidConstraintInput(
            f"Difficulty must be an integer between {MIN_DIFFICULTY} and "
            f"{MAX_DIFFICULTY}, got {difficulty!r}"
        )


def grid_size_for(difficulty: int) -> int:
    if difficulty <= 2:
        return 3
    if difficulty <= 4:
        return 4
    return 5


def operations_for(difficulty: int) -> List[Operation]:
    if difficulty == 1:
        return [Operation.ADD, Operation.SUBTRACT]
    if difficulty == 2:
        return [Operation.ADD, Operation.SUBTRACT, Operation.MULTIPLY]
    return [Operation.ADD, Operation.SUBTRACT, Operation.MULTIPLY, Operation.DIVIDE]


def number_range_for(difficulty: int):
    if difficulty <= 2:
        return (1, 10)
    if difficulty <= 4:
        return (1, 20)
    return (1, 30)


def constraints_for_difficulty(difficulty: int) -> Constraints:
    """
    Build generation constraints for a difficulty level.

    Raises:
        InvalidConstraintInput: If the level is outside 1-5
    """
    _check_level(difficulty)
    return Constraints(
        grid_size=grid_size_for(difficulty),
        operations=operations_for(difficulty),
        number_range=number_range_for(difficulty),
        difficulty=difficulty,
    )


def world_for(difficulty: int) -> str:
    return WORLDS[min(difficulty, len(WORLDS)) - 1]


def targeted_skills_for(constraints: Constraints) -> List[str]:
    """Skill tags shown alongside the puzzle; they do not affect generation."""
    skills = ["logic", "mastery"]
    if constraints.grid_size >= 4:
        skills.append("vision")
    if Operation.MULTIPLY in constraints.operations:
        skills.append("speed")
    if constraints.difficulty >= 4:
        skills.append("perseverance")
    return skills


def next_difficulty(current: int, errors: int, time_seconds: float) -> int:
    """
    Pick the difficulty of the next puzzle from how the last one went.

    Quick and accurate solves move up a level, slow or error-heavy ones move
    down, anything else stays put.
    """
    _check_level(current)
    if errors <= 2 and time_seconds < 120:
        return min(MAX_DIFFICULTY, current + 1)
    if errors > 5 or time_seconds > 300:
        return max(MIN_DIFFICULTY, current - 1)
    return current

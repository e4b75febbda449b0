"""
CrossMath Puzzle Generator

Runs the generate-and-validate loop:

    SYNTHESIZING → REMOVING → COUNTING_SOLUTIONS → CHECKING_CONSTRAINTS → ACCEPTED
                                                          ↓ reject
                                  SYNTHESIZING ← RETRYING (attempt + 1)

A failed uniqueness check during removal only undoes that one cell. A
rejected attempt is discarded whole and synthesis starts again. Once the
attempt budget (or the optional wall-clock budget) runs out, the loop ends in
FAILED and ``GenerationExhausted`` is raised. Checks that only depend on the
solved grid run straight after synthesis, so inexact grids never pay for a
removal pass.

Every call owns its random source and scratch grids; nothing is shared
between calls.
"""

import logging
import random
import time
from enum import Enum
from typing import Optional

from ..core.base_puzzle import Constraints, Puzzle, generate_puzzle_id
from ..core.errors import GenerationExhausted
from ..utils.config_loader import get_config
from .cell_remover import remove_cells, target_blank_count
from .constraint_checker import check_puzzle, check_solution
from .difficulty import constraints_for_difficulty, targeted_skills_for, world_for
from .grid_synthesizer import synthesize_grid

logger = logging.getLogger(__name__)


class GenerationState(Enum):
    """States of the generation loop."""

    SYNTHESIZING = "synthesizing"
    REMOVING = "removing"
    COUNTING_SOLUTIONS = "counting_solutions"
    CHECKING_CONSTRAINTS = "checking_constraints"
    ACCEPTED = "accepted"
    RETRYING = "retrying"
    FAILED = "failed"


def _enter(state: GenerationState, attempt: int):
    logger.debug(f"Attempt {attempt}: {state.value}")


def generate_puzzle(
    constraints: Constraints,
    max_attempts: Optional[int] = None,
    timeout_seconds: Optional[float] = None,
    rng: Optional[random.Random] = None,
    puzzle_id: Optional[str] = None,
) -> Puzzle:
    """
    Generate a puzzle with a unique solution for the given constraints.

    Args:
        constraints: Validated generation constraints
        max_attempts: Attempt budget (config MAX_GENERATION_ATTEMPTS if None)
        timeout_seconds: Wall-clock budget checked between attempts
            (config GENERATION_TIMEOUT_SECONDS if None, 0 disables it)
        rng: Random source; a fresh one is created when omitted
        puzzle_id: Identifier for the puzzle (generated if None)

    Returns:
        Accepted Puzzle

    Raises:
        GenerationExhausted: If no puzzle was accepted within the budgets
    """
    config = get_config()
    generation_config = config.get_generation_config()
    solver_config = config.get_solver_config()

    if max_attempts is None:
        max_attempts = generation_config["max_generation_attempts"]
    if timeout_seconds is None:
        timeout_seconds = generation_config["generation_timeout_seconds"] or None
    max_share = generation_config["max_operation_share"]
    tolerance = generation_config["difficulty_tolerance"]
    jitter = generation_config["removal_jitter"]
    value_range = (solver_config["min_value"], solver_config["max_value"])
    solution_limit = solver_config["solution_count_limit"]

    rng = rng or random.Random()
    deadline = time.monotonic() + timeout_seconds if timeout_seconds is not None else None
    target = target_blank_count(constraints.grid_size, constraints.difficulty)
    rejections = {"solution": 0, "difficulty": 0}

    attempt = 0
    while attempt < max_attempts:
        if deadline is not None and time.monotonic() >= deadline:
            logger.warning(
                f"Generation deadline of {timeout_seconds}s reached after {attempt} attempts"
            )
            break
        attempt += 1

        _enter(GenerationState.SYNTHESIZING, attempt)
        draft = synthesize_grid(constraints, rng)

        precheck = check_solution(
            draft.solution, draft.operations, constraints, max_share
        )
        if not precheck.accepted:
            rejections["solution"] += 1
            logger.debug(f"Attempt {attempt} rejected: {'; '.join(precheck.reasons)}")
            _enter(GenerationState.RETRYING, attempt)
            continue

        _enter(GenerationState.REMOVING, attempt)
        _enter(GenerationState.COUNTING_SOLUTIONS, attempt)
        removal = remove_cells(
            draft.to_cells(),
            draft.solution,
            draft.operations,
            target,
            rng=rng,
            jitter=jitter,
            value_range=value_range,
            solution_limit=solution_limit,
        )

        _enter(GenerationState.CHECKING_CONSTRAINTS, attempt)
        verdict = check_puzzle(
            draft.solution,
            draft.operations,
            removal.blank_count,
            constraints,
            max_share=max_share,
            tolerance=tolerance,
        )
        if not verdict.accepted:
            rejections["difficulty"] += 1
            logger.debug(f"Attempt {attempt} rejected: {'; '.join(verdict.reasons)}")
            _enter(GenerationState.RETRYING, attempt)
            continue

        _enter(GenerationState.ACCEPTED, attempt)
        logger.info(
            f"Generated {constraints.grid_size}x{constraints.grid_size} puzzle "
            f"(difficulty {constraints.difficulty}) after {attempt} attempt(s): "
            f"{removal.blank_count} blanks, measured difficulty "
            f"{verdict.actual_difficulty:.2f}"
        )
        return Puzzle(
            puzzle_id=puzzle_id or generate_puzzle_id(),
            grid=removal.cells,
            operations=draft.operations,
            size=constraints.grid_size,
            difficulty=constraints.difficulty,
            solution=draft.solution,
            world=world_for(constraints.difficulty),
            targeted_skills=targeted_skills_for(constraints),
            generation_info={
                "attempts": attempt,
                "actual_difficulty": round(verdict.actual_difficulty, 3),
                "target_blanks": target,
                "blank_count": removal.blank_count,
            },
        )

    _enter(GenerationState.FAILED, attempt)
    logger.warning(
        f"No acceptable puzzle for difficulty {constraints.difficulty} after "
        f"{attempt} attempt(s) (solution rejections: {rejections['solution']}, "
        f"difficulty rejections: {rejections['difficulty']})"
    )
    raise GenerationExhausted(
        f"No valid puzzle found for difficulty {constraints.difficulty} "
        f"within {attempt} attempt(s)",
        constraints=constraints,
        attempts=attempt,
    )


def generate(difficulty: int, **kwargs) -> Puzzle:
    """
    Generate a puzzle for a difficulty level (1-5).

    Keyword arguments are passed to ``generate_puzzle``.

    Raises:
        InvalidConstraintInput: If the level is outside 1-5
        GenerationExhausted: If no puzzle was accepted within the budget
    """
    return generate_puzzle(constraints_for_difficulty(difficulty), **kwargs)


def generate_with_fallback(difficulty: int, **kwargs) -> Puzzle:
    """
    Generate a puzzle, stepping down one level each time a level is exhausted.

    Raises:
        GenerationExhausted: If even level 1 could not be generated
    """
    try:
        return generate(difficulty, **kwargs)
    except GenerationExhausted:
        if difficulty <= 1:
            raise
        logger.warning(
            f"Difficulty {difficulty} exhausted, falling back to {difficulty - 1}"
        )
        return generate_with_fallback(difficulty - 1, **kwargs)

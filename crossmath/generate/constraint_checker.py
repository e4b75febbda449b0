"""
Acceptance checks for generated puzzles.

Three checks decide whether a generation attempt is kept:

- Equation exactness: every row and column of the solution must evaluate
  exactly. This is where synthesis rounding and the row/column overwrite are
  caught.
- Operation balance: no single operation may take more than 60% of the
  operation slots, unless only one operation is allowed.
- Difficulty fit: the measured difficulty must lie within 1.0 of the
  requested level.

The first two depend only on the solved grid; the last needs the blank count
after removal.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..core.base_puzzle import Constraints, Operation, Operations
from ..core.equations import failing_lines

logger = logging.getLogger(__name__)

BLANK_FRACTION_WEIGHT = 3.0
OPERATION_WEIGHT_FACTOR = 2.0
GRID_SIZE_WEIGHT = 1.5
BASELINE_OPERATION_WEIGHT = Operation.ADD.weight


@dataclass
class CheckResult:
    """Verdict of the constraint checker."""

    accepted: bool
    reasons: List[str] = field(default_factory=list)
    actual_difficulty: Optional[float] = None


def operation_mix(operations: Operations) -> Dict[Operation, float]:
    """Share of operation slots taken by each operation (0.0-1.0)."""
    counts = Counter(operations.slots())
    total = sum(counts.values())
    if total == 0:
        return {}
    return {operation: count / total for operation, count in counts.items()}


def is_operation_balanced(
    operations: Operations,
    allowed: Sequence[Operation],
    max_share: float = 0.6,
) -> bool:
    """Check that no operation takes more than ``max_share`` of all slots."""
    if len(set(allowed)) <= 1:
        return True
    shares = operation_mix(operations)
    return not shares or max(shares.values()) <= max_share


def actual_difficulty(blank_count: int, size: int, operations: Operations) -> float:
    """
    Measured difficulty of a puzzle, clamped to [1, 5].

    Weighted sum of the blank fraction, the mean operation weight above the
    weight of addition, and the grid size.
    """
    blank_fraction = blank_count / (size * size)
    weights = [operation.weight for operation in operations.slots()]
    mean_weight = sum(weights) / len(weights) if weights else BASELINE_OPERATION_WEIGHT

    score = (
        blank_fraction * BLANK_FRACTION_WEIGHT
        + (mean_weight - BASELINE_OPERATION_WEIGHT) * OPERATION_WEIGHT_FACTOR
        + ((size - 3) / 3) * GRID_SIZE_WEIGHT
    )
    return min(5.0, max(1.0, score))


def check_solution(
    solution: Sequence[Sequence[int]],
    operations: Operations,
    constraints: Constraints,
    max_share: float = 0.6,
) -> CheckResult:
    """Run the checks that only depend on the solved grid."""
    reasons = []

    failures = failing_lines(solution, operations)
    if failures:
        lines = ", ".join(f"{kind} {index}" for kind, index in failures)
        reasons.append(f"inexact equations: {lines}")

    if not is_operation_balanced(operations, constraints.operations, max_share):
        top_operation, top_share = max(
            operation_mix(operations).items(), key=lambda item: item[1]
        )
        reasons.append(
            f"operation '{top_operation.symbol}' takes {top_share:.0%} of slots"
        )

    return CheckResult(accepted=not reasons, reasons=reasons)


def check_puzzle(
    solution: Sequence[Sequence[int]],
    operations: Operations,
    blank_count: int,
    constraints: Constraints,
    max_share: float = 0.6,
    tolerance: float = 1.0,
) -> CheckResult:
    """
    Decide whether a blanked puzzle is accepted.

    Args:
        solution: Solved grid
        operations: Operation matrices
        blank_count: Number of blanked cells
        constraints: Constraints the puzzle was generated for
        max_share: Maximum share of slots for a single operation
        tolerance: Allowed distance between measured and requested difficulty

    Returns:
        CheckResult with the verdict, rejection reasons and measured difficulty
    """
    result = check_solution(solution, operations, constraints, max_share)

    score = actual_difficulty(blank_count, len(solution), operations)
    result.actual_difficulty = score
    if abs(score - constraints.difficulty) > tolerance:
        result.reasons.append(
            f"difficulty {score:.2f} too far from requested {constraints.difficulty}"
        )
        result.accepted = False

    return result

"""
Exception types raised by the CrossMath generator.

Only two conditions ever reach a caller: malformed generation constraints,
detected before any synthesis work starts, and an exhausted attempt budget.
Equations left inexact by the synthesizer are never raised; the constraint
checker turns them into rejection reasons and the attempt is retried.
"""


class CrossMathError(Exception):
    """Base class for all CrossMath errors."""


class InvalidConstraintInput(CrossMathError, ValueError):
    """Raised when generation constraints are malformed."""


class GenerationExhausted(CrossMathError, RuntimeError):
    """
    Raised when no acceptable puzzle was found within the attempt budget.

    Attributes:
        constraints: Constraints the generator was working with
        attempts: Number of generation attempts made before giving up
    """

    def __init__(self, message: str, constraints=None, attempts: int = 0):
        super().__init__(message)
        self.constraints = constraints
        self.attempts = attempts

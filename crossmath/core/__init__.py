"""
Core value objects and shared evaluation for CrossMath puzzles.

Classes:
    Operation: Arithmetic operation enum with difficulty weights
    Cell: Single grid cell
    Operations: Horizontal and vertical operation matrices
    Constraints: Generator input contract
    Puzzle: Finished, immutable puzzle
    BaseValidator: Abstract base class for player grid validators
"""

from .base_puzzle import (
    Cell,
    Constraints,
    Operation,
    Operations,
    Puzzle,
    OPERATION_WEIGHTS,
    WORLDS,
)
from .base_evaluator import BaseValidator
from .errors import CrossMathError, GenerationExhausted, InvalidConstraintInput

__all__ = [
    "Cell",
    "Constraints",
    "Operation",
    "Operations",
    "Puzzle",
    "OPERATION_WEIGHTS",
    "WORLDS",
    "BaseValidator",
    "CrossMathError",
    "GenerationExhausted",
    "InvalidConstraintInput",
]

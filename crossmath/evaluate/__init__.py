"""
Player grid evaluation for CrossMath puzzles.

Key Components:
- GridValidator: Completeness, equation and given-cell checks
- CrossMathMetrics: Cell and equation accuracy
"""

from .grid_validator import GridValidator
from .metrics import CrossMathMetrics

__all__ = [
    'GridValidator',
    'CrossMathMetrics'
]

"""
Equation evaluation shared by the generator, the solution counter and the
player grid validator.

A line of cells is evaluated strictly left to right (no operator precedence)
over its operand cells and compared with its result cell. Division must be
exact: any remainder makes the line invalid. Everything that decides whether a
grid is "correct" goes through these functions so that the generator and the
validator can never disagree.
"""

from typing import List, Optional, Sequence, Tuple

from .base_puzzle import Operation, Operations

Grid = Sequence[Sequence[Optional[int]]]


def apply_operation(left: int, operation: Operation, right: int) -> Optional[int]:
    """
    Apply a single operation.

    Returns:
        The integer result, or None when a division is not exact
    """
    if operation is Operation.ADD:
        return left + right
    if operation is Operation.SUBTRACT:
        return left - right
    if operation is Operation.MULTIPLY:
        return left * right
    if right == 0 or left % right != 0:
        return None
    return left // right


def evaluate_line(
    operands: Sequence[int], operations: Sequence[Operation]
) -> Optional[int]:
    """
    Evaluate operands left to right.

    Args:
        operands: Operand values (every cell of the line except the result)
        operations: One operation between each pair of adjacent operands

    Returns:
        The value of the expression, or None if a division left a remainder

    Raises:
        ValueError: If operand and operation counts do not line up
    """
    if len(operations) != len(operands) - 1:
        raise ValueError(
            f"Expected {len(operands) - 1} operations for {len(operands)} operands, "
            f"got {len(operations)}"
        )

    result = operands[0]
    for operation, value in zip(operations, operands[1:]):
        result = apply_operation(result, operation, value)
        if result is None:
            return None
    return result


def line_holds(values: Sequence[Optional[int]], operations: Sequence[Operation]) -> bool:
    """Check that a full line (operands followed by result) is an exact equation."""
    if any(value is None for value in values):
        return False
    result = evaluate_line(values[:-1], operations)
    return result is not None and result == values[-1]


def column_values(grid: Grid, col: int) -> List[Optional[int]]:
    return [row[col] for row in grid]


def row_holds(grid: Grid, row: int, operations: Operations) -> bool:
    """Check row ``row``; rows without an operation list are unconstrained."""
    if row >= len(operations.horizontal):
        return True
    return line_holds(grid[row], operations.horizontal[row])


def column_holds(grid: Grid, col: int, operations: Operations) -> bool:
    """Check column ``col``; columns without an operation list are unconstrained."""
    if col >= len(operations.vertical):
        return True
    return line_holds(column_values(grid, col), operations.vertical[col])


def failing_lines(grid: Grid, operations: Operations) -> List[Tuple[str, int]]:
    """
    List every line whose equation does not hold.

    Returns:
        ``("row", index)`` and ``("column", index)`` tuples, rows first
    """
    failures = []
    for row in range(len(grid)):
        if not row_holds(grid, row, operations):
            failures.append(("row", row))
    width = len(grid[0]) if grid else 0
    for col in range(width):
        if not column_holds(grid, col, operations):
            failures.append(("column", col))
    return failures


def grid_holds(grid: Grid, operations: Operations) -> bool:
    """Check that every row and column equation of a filled grid is exact."""
    return not failing_lines(grid, operations)

#!/usr/bin/env python3
"""
Simple Puzzle Visualization for generated CrossMath puzzles

Usage:
    python -m crossmath.generate.puzzle_visualisation puzzles/*.json --solution
"""

import argparse
import json
import sys
from typing import List

from ..core.base_puzzle import Puzzle
from .puzzle_entry import PuzzleEntry

CELL_WIDTH = 4


def _cell_text(value) -> str:
    return ("_" if value is None else str(value)).center(CELL_WIDTH)


def _row_line(values, ops) -> str:
    """One row; ``ops`` is None for a row without an equation."""
    size = len(values)
    parts = []
    for j, value in enumerate(values):
        parts.append(_cell_text(value))
        if j == size - 1:
            break
        if j == size - 2:
            parts.append(" " if ops is None else "=")
        else:
            parts.append(ops[j].symbol if ops is not None and j < len(ops) else " ")
    return "".join(parts)


def _operator_line(operations, row: int, size: int) -> str:
    """Vertical operators between ``row`` and ``row + 1``."""
    parts = []
    for j in range(size):
        ops = operations.vertical[j] if j < len(operations.vertical) else None
        if ops is None:
            symbol = " "
        elif row == size - 2:
            symbol = "="
        else:
            symbol = ops[row].symbol if row < len(ops) else " "
        parts.append(symbol.center(CELL_WIDTH))
        if j < size - 1:
            parts.append(" ")
    return "".join(parts).rstrip()


def format_grid(values: List[List], operations) -> str:
    """Render a value grid with its row and column operators."""
    size = len(values)
    lines = []
    for i, row in enumerate(values):
        ops = operations.horizontal[i] if i < len(operations.horizontal) else None
        lines.append(_row_line(row, ops).rstrip())
        if i < size - 1:
            lines.append(_operator_line(operations, i, size))
    return "\n".join(lines)


def format_puzzle(puzzle: Puzzle, show_solution: bool = False) -> str:
    """Render a puzzle (and optionally its solution) as terminal text."""
    header = (
        f"PUZZLE: {puzzle.puzzle_id}\n"
        f"Size: {puzzle.size}x{puzzle.size} | Difficulty: {puzzle.difficulty} | "
        f"World: {puzzle.world} | Blanks: {puzzle.blank_count}"
    )
    sections = [header, "GRID:", format_grid(puzzle.values(), puzzle.operations)]
    if show_solution:
        sections.extend(["SOLUTION:", format_grid(puzzle.solution, puzzle.operations)])
    return "\n\n".join(sections)


def display_puzzle(puzzle: Puzzle, index: int = 1, show_solution: bool = False):
    """Display a single puzzle with grid and (optionally) solution."""
    print(f"\n{'=' * 60}")
    print(f"#{index}")
    print(format_puzzle(puzzle, show_solution=show_solution))


def load_puzzle_file(path: str) -> Puzzle:
    """Load a puzzle JSON file written by PuzzleBuilder."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if "empty_grid" in data:
        return PuzzleEntry.from_dict(data).to_puzzle()
    return Puzzle.from_dict(data)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Visualize CrossMath puzzles")
    parser.add_argument("files", nargs="+", help="Puzzle JSON files")
    parser.add_argument(
        "--solution", action="store_true", help="Also print the solved grid"
    )
    args = parser.parse_args(argv)

    shown = 0
    for index, path in enumerate(args.files, 1):
        try:
            puzzle = load_puzzle_file(path)
        except (OSError, ValueError, KeyError) as e:
            print(f"Error loading {path}: {e}")
            continue
        display_puzzle(puzzle, index, show_solution=args.solution)
        shown += 1

    if shown == 0:
        print("No puzzles found!")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

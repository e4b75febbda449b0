"""
CrossMath: arithmetic grid puzzle generator

Builds square grids of numbers in which every row and every column is an
exact equation, then blanks cells so that the puzzle has exactly one
solution.

Main Components:
- core: Puzzle value objects, equation evaluation and errors
- generate: Puzzle generation, batch building and export
- evaluate: Player grid validation and metrics
- utils: Configuration loader

Quick Start:
    from crossmath.generate import generate

    puzzle = generate(1)
    print(puzzle.values())
"""

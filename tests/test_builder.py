"""
Test suite for batch building and export.
Tests PuzzleEntry records, the PuzzleBuilder orchestrator and terminal
rendering of puzzles.
"""

import json
import random
from unittest.mock import patch

import pandas as pd
import pytest

from crossmath.core.equations import grid_holds
from crossmath.core.errors import GenerationExhausted
from crossmath.generate.puzzle_builder import PuzzleBuilder, SolutionTracker
from crossmath.generate.puzzle_entry import PuzzleEntry
from crossmath.generate.puzzle_visualisation import (
    format_grid,
    format_puzzle,
    load_puzzle_file,
    main as visualisation_main,
)


class TestPuzzleEntry:
    """Test PuzzleEntry dataclass functionality."""

    def test_from_puzzle(self, puzzle):
        """Entries carry the grids, operations and derived statistics."""
        entry = PuzzleEntry.from_puzzle(puzzle, generation_info={"requested_difficulty": 2})

        assert entry.id == "crossmath_d1_3x3_001"
        assert entry.grid_size == 3
        assert entry.empty_grid[1] == [4, None, 3]
        assert entry.solved_grid[1] == [4, 1, 3]
        assert entry.operations["horizontal"] == [["+"], ["-"]]
        assert entry.blank_count == 1
        assert entry.density == pytest.approx(1 / 9)
        assert entry.actual_difficulty == 1.0
        assert entry.operation_mix == {"+": 60.0, "-": 40.0, "×": 0.0, "÷": 0.0}
        assert entry.generation_metadata == {"attempts": 7, "requested_difficulty": 2}

    def test_serialization(self, puzzle):
        """JSON output loads back into an equal entry and puzzle."""
        entry = PuzzleEntry.from_puzzle(puzzle)
        data = json.loads(entry.to_json())

        assert data["empty_grid"][1][1] is None
        restored = PuzzleEntry.from_dict(data)
        assert restored == entry
        assert restored.to_puzzle().values() == puzzle.values()
        assert restored.to_puzzle().operations == puzzle.operations

    def test_validation_errors(self, puzzle):
        """Inconsistent fields are rejected on construction."""
        data = PuzzleEntry.from_puzzle(puzzle).to_dict()

        with pytest.raises(ValueError, match="Puzzle ID"):
            PuzzleEntry.from_dict({**data, "id": ""})
        with pytest.raises(ValueError, match="empty_grid must be 4x4"):
            PuzzleEntry.from_dict({**data, "grid_size": 4})
        with pytest.raises(ValueError, match="Difficulty"):
            PuzzleEntry.from_dict({**data, "difficulty": 7})
        with pytest.raises(ValueError, match="Blank count"):
            PuzzleEntry.from_dict({**data, "blank_count": 2})

    def test_grid_consistency(self, puzzle):
        """Givens must match the solution and every equation must hold."""
        entry = PuzzleEntry.from_puzzle(puzzle)
        assert entry.validate_grid_consistency()

        entry.empty_grid[0][0] = 9
        assert not entry.validate_grid_consistency()

        entry = PuzzleEntry.from_puzzle(puzzle)
        entry.solved_grid[2][2] = 9
        assert not entry.validate_grid_consistency()

    def test_statistics(self, puzzle):
        """Statistics summarise size, difficulty and operation balance."""
        stats = PuzzleEntry.from_puzzle(puzzle).get_statistics()

        assert stats["grid_size"] == "3x3"
        assert stats["operations_used"] == ["+", "-"]
        assert stats["operation_balance"]["dominant_share"] == pytest.approx(0.6)
        assert stats["attempts"] == 7


class TestSolutionTracker:
    """Test duplicate solution tracking."""

    def test_tracks_solutions(self, solution):
        """A recorded solution is no longer new."""
        tracker = SolutionTracker()
        assert tracker.is_new(solution)
        tracker.record(solution)
        assert not tracker.is_new([row[:] for row in solution])
        assert len(tracker) == 1


class TestPuzzleBuilder:
    """Test PuzzleBuilder orchestration."""

    @patch("crossmath.generate.puzzle_builder.generate_puzzle")
    def test_duplicate_solutions_are_rejected(self, mock_generate_puzzle, puzzle):
        """A batch never contains the same solution twice."""
        mock_generate_puzzle.return_value = puzzle
        builder = PuzzleBuilder()

        entries = builder.generate_puzzle_batch(difficulty=1, count=2)

        assert len(entries) == 1
        retries = builder.generation_config["max_duplicate_retries"]
        assert mock_generate_puzzle.call_count == 1 + retries + 1
        stats = builder.get_generation_statistics()
        assert stats["successful_generations"] == 1
        assert stats["failed_generations"] == 1
        assert stats["duplicate_rejections"] == retries + 1
        assert stats["success_rate"] == "50.0%"

    @patch("crossmath.generate.puzzle_builder.generate_puzzle")
    def test_exhausted_generation_is_counted(self, mock_generate_puzzle):
        """An exhausted puzzle is skipped and counted as a failure."""
        mock_generate_puzzle.side_effect = GenerationExhausted("exhausted")
        builder = PuzzleBuilder()

        assert builder.generate_puzzle_batch(difficulty=3, count=2) == []
        stats = builder.get_generation_statistics()
        assert stats["failed_generations"] == 2
        assert stats["average_blank_count"] == "n/a"

    @patch("crossmath.generate.puzzle_builder.generate_with_fallback")
    def test_fallback_is_recorded(self, mock_fallback, puzzle):
        """Puzzles from a lower level are counted as fallbacks."""
        mock_fallback.return_value = puzzle
        builder = PuzzleBuilder()

        entries = builder.generate_puzzle_batch(difficulty=2, count=1, fallback=True)

        assert entries[0].difficulty == 1
        assert entries[0].generation_metadata["requested_difficulty"] == 2
        assert builder.generation_stats["fallbacks"] == 1
        assert mock_fallback.call_args.args == (2,)
        assert mock_fallback.call_args.kwargs["puzzle_id"] == "crossmath_d2_3x3_001"

    def test_real_batch_with_export(self, tmp_path):
        """A generated level-1 batch is written to JSON and CSV."""
        builder = PuzzleBuilder(rng=random.Random(99))
        results = builder.generate_multi_difficulty_batch(
            difficulties=[1], count_per_level=1, output_dir=str(tmp_path)
        )

        entries = results[1]
        assert len(entries) == 1
        entry = entries[0]
        assert entry.id == "crossmath_d1_3x3_001"
        assert entry.validate_grid_consistency()
        assert grid_holds(entry.solved_grid, entry.to_puzzle().operations)

        saved = load_puzzle_file(str(tmp_path / f"{entry.id}.json"))
        assert saved.values() == entry.empty_grid

        frame = builder.statistics_frame()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame["id"]) == [entry.id]

        csv_path = builder.save_statistics_csv(str(tmp_path / "stats" / "batch.csv"))
        loaded = pd.read_csv(csv_path)
        assert loaded.loc[0, "blank_count"] == entry.blank_count
        assert loaded.loc[0, "requested_difficulty"] == 1

    def test_empty_statistics_frame(self):
        """The statistics table has its columns even before any puzzle."""
        frame = PuzzleBuilder().statistics_frame()
        assert frame.empty
        assert "actual_difficulty" in frame.columns


class TestVisualisation:
    """Test terminal rendering."""

    def test_format_grid(self, puzzle):
        """Rows interleave values with operators; the result row has none."""
        lines = format_grid(puzzle.values(), puzzle.operations).split("\n")

        assert len(lines) == 5
        assert lines[0].split() == ["2", "+", "3", "=", "5"]
        assert lines[1].split() == ["+", "-", "+"]
        assert lines[2].split() == ["4", "-", "_", "=", "3"]
        assert lines[3].split() == ["=", "=", "="]
        assert lines[4].split() == ["6", "2", "8"]

    def test_format_puzzle(self, puzzle):
        """The solution is only shown on request."""
        text = format_puzzle(puzzle)
        assert "crossmath_d1_3x3_001" in text
        assert "SOLUTION" not in text
        assert "SOLUTION" in format_puzzle(puzzle, show_solution=True)

    def test_main_shows_saved_files(self, tmp_path, puzzle, capsys):
        """The script renders saved entries and flags unreadable files."""
        path = tmp_path / "puzzle.json"
        path.write_text(PuzzleEntry.from_puzzle(puzzle).to_json(), encoding="utf-8")

        assert visualisation_main([str(path), "--solution"]) == 0
        assert "SOLUTION" in capsys.readouterr().out

        assert visualisation_main([str(tmp_path / "missing.json")]) == 1

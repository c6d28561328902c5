"""Tests for the two-pass optimisation pipeline."""
import pytest
from cncfinisher.config import OptimizerConfig
from cncfinisher.errors import NoMotionFoundError, NotCrossingError
from cncfinisher.gcode.parser import GCodeParser
from cncfinisher.gcode.writer import format_instruction
from cncfinisher.optimizer import engine as engine_module
from cncfinisher.optimizer.engine import Optimizer

HEADER = ";tool_head: standardCNCToolheadForSM2\n"

# Deepest move reaches Z-10, so an allowance of 1 puts the threshold at -9.
APPROACH = HEADER + "G0 X0 Y0 Z-10\nG0 Z-5\n"


def _run(body: str, allowance: float = 1.0, crossing: str = "aggressive", filter_strategy: str = "safe"):
    program = GCodeParser().parse_file(APPROACH + body)
    config = OptimizerConfig.create(allowance, crossing=crossing, filter_strategy=filter_strategy)
    result = Optimizer(config).optimize(program)
    lines = [format_instruction(i) for i in result.instructions]
    return result, lines


class TestScenarios:
    def test_pure_shallow_removal(self):
        result, lines = _run("G1 X10 Z-5 F600\nG1 X20 Z-5\n", filter_strategy="aggressive")
        assert result.threshold == pytest.approx(-9.0)
        assert result.statistics.removed_lines == 2
        assert lines == APPROACH.splitlines()

    def test_conservative_crossing_preserved(self):
        result, lines = _run("G1 Z-10 F600\n", crossing="conservative")
        assert lines[-1] == "G1 Z-10 F600"
        assert result.instructions[-1].raw == "G1 Z-10 F600"
        assert result.statistics.split_lines == 0

    def test_aggressive_crossing_split(self):
        result, lines = _run("G1 Z-10 F600\n", crossing="aggressive")
        assert lines[-2:] == ["G1 Z-9 F600", "G1 Z-10 F600"]
        assert result.instructions[-2].params["Z"] == -9.0
        assert result.statistics.split_lines == 1
        assert result.statistics.output_lines == len(lines)

    def test_multi_axis_safe_preservation(self):
        result, lines = _run("G1 X10 Z-5 F600\n", filter_strategy="safe")
        assert lines[-1] == "G1 X10 Z-5 F600"
        assert result.statistics.removed_lines == 0

    def test_multi_axis_all_axes_removal(self):
        result, lines = _run("G1 X10 Z-5 F600\n", filter_strategy="all-axes")
        assert "G1 X10 Z-5 F600" not in lines
        assert result.statistics.removed_lines == 1
        # 10 mm at 600 mm/min
        assert result.statistics.time_saved_sec == pytest.approx(1.0)


class TestPipeline:
    def test_non_motion_content_passes_through(self):
        body = "M3 S12000\n; finishing\n\nG2 X1 Y1 I1 J0 Z-5\nM5\n"
        result, lines = _run(body)
        assert lines[len(APPROACH.splitlines()):] == ["M3 S12000", "; finishing", "", "G2 X1 Y1 I1 J0 Z-5", "M5"]

    def test_crossing_leave_keeps_deep_part_only(self):
        result, lines = _run("G1 Z-10 F600\nG1 X10 Z-4\n", crossing="aggressive")
        assert lines[-1] == "G1 X1.6667 Z-9 F600"
        assert result.statistics.split_lines == 2

    def test_removed_moves_still_update_modal_state(self):
        body = "G1 X50 Z-6 F600\nG1 X60 Z-10\n"
        result, lines = _run(body, filter_strategy="aggressive")
        # The plunge starts from the removed move's end point (X50 Z-6), so t = 0.75.
        assert lines[-2:] == ["G1 X57.5 Z-9 F600", "G1 X60 Z-10 F600"]

    def test_header_max_z_seeds_depth(self):
        text = ";tool_head: cnc\n;max_z(mm): 2\nG1 X5 F100\nG1 Z-3\n"
        program = GCodeParser().parse_file(text)
        result = Optimizer(OptimizerConfig.create(4.0)).optimize(program)
        # Z starts at max_z, so the X move is shallow but kept by the safe strategy.
        assert result.min_depth == -3.0
        assert result.threshold == pytest.approx(1.0)
        assert [format_instruction(i) for i in result.instructions][-3:] == [
            "G1 X5 F100",
            "G1 Z1 F100",
            "G1 Z-3 F100",
        ]

    def test_malformed_lines_skipped_with_advisory(self):
        result, lines = _run("G1 X@ Z-5\nM5\n")
        assert lines[-1] == "M5"
        assert result.statistics.skipped_lines == 1
        assert any("malformed line 4" in a for a in result.advisories)

    def test_no_motion_is_fatal(self):
        program = GCodeParser().parse_file(HEADER + "M3 S1000\nM5\n")
        with pytest.raises(NoMotionFoundError):
            Optimizer().optimize(program)

    def test_geometry_failure_keeps_move_whole(self, monkeypatch):
        def broken(start, end, threshold):
            raise NotCrossingError("forced")

        monkeypatch.setattr(engine_module, "calculate_intersection", broken)
        result, lines = _run("G1 Z-10 F600\n", crossing="aggressive")
        assert lines[-1] == "G1 Z-10 F600"
        assert result.statistics.split_lines == 0
        assert any("kept whole" in a for a in result.advisories)

    def test_default_feed_rate_advisories(self):
        result, _ = _run("G1 Z-5\nG1 Z-6\n", filter_strategy="aggressive")
        assert result.statistics.used_default_feed_rate
        assert sum("Default feed rate" in a for a in result.advisories) == 1
        assert sum("No feed rate" in a for a in result.advisories) == 1

    def test_header_warnings_become_advisories(self):
        program = GCodeParser().parse_file("G1 Z-1 F100\n")
        result = Optimizer().optimize(program)
        assert "Missing tool_head in header" in result.advisories

    def test_split_strategy_reports_limitation(self):
        result, _ = _run("G1 X10 Z-5 F600\n", filter_strategy="split")
        assert any("behaving as 'safe'" in a for a in result.advisories)
        assert result.statistics.removed_lines == 0

    def test_optimizer_reuse_starts_fresh(self):
        program = GCodeParser().parse_file(APPROACH + "G1 Z-5 F600\n")
        optimizer = Optimizer(OptimizerConfig.create(1.0))
        first = optimizer.optimize(program)
        second = optimizer.optimize(program)
        assert first.statistics.total_lines == second.statistics.total_lines
        assert first.advisories == second.advisories

    def test_statistics_totals(self):
        result, lines = _run("G1 Z-10 F600\nG1 X10 Z-4\nG1 Z-5\n")
        stats = result.statistics
        assert stats.total_lines == len(APPROACH.splitlines()) + 3
        assert stats.total_lines == (
            stats.preserved_lines + stats.removed_lines + stats.split_lines + stats.skipped_lines
        )
        assert stats.output_lines == len(lines)

    def test_crossing_ending_on_threshold_kept_without_advisory(self):
        # Zero allowance: the deepest plunge ends exactly on the threshold.
        program = GCodeParser().parse_file(HEADER + "G0 Z2\nG1 Z-3 F100\nG1 Z2\n")
        result = Optimizer(OptimizerConfig.create(0.0)).optimize(program)
        lines = [format_instruction(i) for i in result.instructions]
        assert lines == [HEADER.strip(), "G0 Z2", "G1 Z-3 F100", "G1 Z2"]
        assert result.statistics.split_lines == 0
        assert not any("kept whole" in a for a in result.advisories)

    def test_missing_max_z_reported_once(self):
        result, _ = _run("G1 Z-5 F600\nG1 Z-6\n")
        assert result.advisories.count("No max_z in header; starting Z assumed 0") == 1
        assert result.min_depth == -10.0

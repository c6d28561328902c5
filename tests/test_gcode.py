"""Tests for G-code parser, header metadata and writer."""
import io

import pytest
from cncfinisher.errors import MalformedInstructionError
from cncfinisher.gcode.header import parse_header
from cncfinisher.gcode.parser import GCodeParser, Instruction
from cncfinisher.gcode.writer import GCodeWriter, format_instruction, format_number


LUBAN_HEADER = """;Header Start
;header_type: cnc
;tool_head: standardCNCToolheadForSM2
;machine: Snapmaker 2.0 A350
;file_total_lines: 1234
;estimated_time(s): 456.7
;is_rotate: false
;max_x(mm): 100
;min_x(mm): 0
;max_z(mm): 0.5
;min_z(mm): -10
;work_speed(mm/minute): 600
;jog_speed(mm/minute): 1500
;Header End
"""


class TestGCodeParser:
    def setup_method(self):
        self.parser = GCodeParser()

    def test_parse_g1_move(self):
        cmd = self.parser.parse_line("G1 X10.5 Y20.0 Z-1.25 F1200", 1)
        assert cmd.command == "G1"
        assert cmd.params["X"] == 10.5
        assert cmd.params["Y"] == 20.0
        assert cmd.params["Z"] == -1.25
        assert cmd.params["F"] == 1200.0
        assert cmd.is_cutting_move

    def test_leading_zero_command_normalised(self):
        cmd = self.parser.parse_line("G01 Z-2", 1)
        assert cmd.command == "G1"

    def test_compact_and_lowercase_words(self):
        cmd = self.parser.parse_line("g0x1y-2.5z.5", 1)
        assert cmd.command == "G0"
        assert cmd.params == {"X": 1.0, "Y": -2.5, "Z": 0.5}
        assert cmd.is_rapid_move

    def test_parse_machine_code(self):
        cmd = self.parser.parse_line("M3 S12000", 1)
        assert cmd.command == "M3"
        assert cmd.params["S"] == 12000.0
        assert not cmd.is_linear_move

    def test_motion_word_wins_over_modal_words(self):
        cmd = self.parser.parse_line("G90 G0 X0", 1)
        assert cmd.commands == ("G90", "G0")
        assert cmd.command == "G0"

    def test_parse_comment_only(self):
        cmd = self.parser.parse_line("; this is a comment", 1)
        assert cmd.is_comment
        assert cmd.comment == "this is a comment"
        assert cmd.command == ""

    def test_parse_empty_line(self):
        cmd = self.parser.parse_line("", 1)
        assert cmd.is_blank

    def test_parse_inline_comment(self):
        cmd = self.parser.parse_line("G1 X10 ; move", 1)
        assert cmd.params["X"] == 10.0
        assert "move" in cmd.comment

    def test_parenthesised_comment(self):
        cmd = self.parser.parse_line("G1 (plunge) Z-1", 1)
        assert cmd.params == {"Z": -1.0}
        assert cmd.comment == "plunge"

    def test_percent_line_is_not_malformed(self):
        cmd = self.parser.parse_line("%", 1)
        assert not cmd.commands
        assert cmd.raw == "%"

    def test_block_number_ignored(self):
        cmd = self.parser.parse_line("N10 G1 X1", 1)
        assert "N" not in cmd.params

    def test_axes_present_excludes_feed(self):
        cmd = self.parser.parse_line("G1 X1 Z-1 F300 S1000", 1)
        assert cmd.axes_present == frozenset({"X", "Z"})

    def test_malformed_line_raises(self):
        with pytest.raises(MalformedInstructionError) as exc_info:
            self.parser.parse_line("G1 X1 Y", 7)
        assert exc_info.value.line_number == 7
        assert exc_info.value.line_content == "G1 X1 Y"

    def test_instruction_params_are_read_only(self):
        cmd = self.parser.parse_line("G1 X1", 1)
        with pytest.raises(TypeError):
            cmd.params["X"] = 2.0

    def test_parse_file_keeps_blank_lines_and_collects_errors(self):
        program = self.parser.parse_file("G0 Z5\n\nG1 Z-1 F100\nG1 X@\nM5\n")
        assert len(program) == 4
        assert [i.line_number for i in program] == [1, 2, 3, 5]
        assert len(program.errors) == 1
        assert program.errors[0].line_number == 4


class TestHeader:
    def test_parse_luban_header(self):
        header = parse_header(LUBAN_HEADER.splitlines())
        assert header.tool_head == "standardCNCToolheadForSM2"
        assert header.total_lines == 1234
        assert header.max_z == 0.5
        assert header.warnings == []

    def test_missing_tool_head_warns(self):
        header = parse_header([";max_z(mm): 1"])
        assert header.max_z == 1.0
        assert header.warnings == ["Missing tool_head in header"]

    def test_missing_max_z_warns_once(self):
        header = parse_header([";tool_head: cnc", ";min_z(mm): -4"])
        assert header.max_z is None
        assert header.warnings == ["No max_z in header; starting Z assumed 0"]

    def test_unknown_keys_are_skipped(self):
        header = parse_header([";tool_head: cnc", ";max_z(mm): 1", ";machine: A350", ";jog_speed: fast"])
        assert header.warnings == []

    def test_non_cnc_tool_head_warns(self):
        header = parse_header([";tool_head: laserToolhead"])
        assert "may not be a CNC tool head" in header.warnings[0]

    def test_bad_values_are_ignored(self):
        header = parse_header([";tool_head: cnc", ";max_z(mm): abc"])
        assert header.max_z is None

    def test_only_top_lines_scanned(self):
        lines = ["G1 X1"] * 60 + [";max_z(mm): 3"]
        header = parse_header(lines)
        assert header.max_z is None


class TestWriter:
    def test_parsed_lines_written_verbatim(self):
        cmd = GCodeParser().parse_line("G1  X10.500 Y2 ; keep spacing", 1)
        assert format_instruction(cmd) == "G1  X10.500 Y2 ; keep spacing"

    def test_synthesised_line_order(self):
        cmd = Instruction(
            line_number=0,
            commands=("G1",),
            params={"F": 1200.0, "Z": -9.0, "X": 12.3456, "Y": 0.0},
        )
        assert format_instruction(cmd) == "G1 X12.3456 Y0 Z-9 F1200"

    def test_format_number(self):
        assert format_number(-9.0) == "-9"
        assert format_number(-0.0) == "0"
        assert format_number(0.0001) == "0.0001"
        assert format_number(12.5) == "12.5"

    def test_writer_counts_lines_and_bytes(self):
        stream = io.StringIO()
        writer = GCodeWriter(stream, flush_every=1)
        parser = GCodeParser()
        written = writer.write_all([parser.parse_line("G0 Z5", 1), parser.parse_line("", 2)])
        assert written == 2
        assert stream.getvalue() == "G0 Z5\n\n"
        assert writer.bytes_written == len("G0 Z5\n\n")

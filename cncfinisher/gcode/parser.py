"""G-code tokenizer and parser.

Parses raw G-code text into immutable Instruction records.  Parsing never
aborts a program: lines that cannot be tokenised are collected as
MalformedInstructionError values and skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from cncfinisher.errors import MalformedInstructionError
from cncfinisher.gcode.header import HeaderMetadata, parse_header

COMMAND_LETTERS = frozenset("GMT")
MOTION_COMMANDS = frozenset({"G0", "G1", "G2", "G3"})

# Axes other than depth; their presence makes a shallow move "multi-axis".
HORIZONTAL_AXES = ("X", "Y")
ROTARY_AXES = ("B",)  # Snapmaker 4-axis rotary module
DEPTH_AXIS = "Z"
FEED_RATE = "F"
NON_DEPTH_AXES = frozenset(HORIZONTAL_AXES + ROTARY_AXES)
POSITION_AXES = frozenset(NON_DEPTH_AXES | {DEPTH_AXIS})


@dataclass(frozen=True)
class Instruction:
    """A single parsed line of a G-code program."""

    line_number: int
    commands: tuple[str, ...] = ()  # e.g. ("G90", "G0")
    params: Mapping[str, float] = field(default_factory=dict)  # e.g. {"X": 10.0, "F": 1200.0}
    comment: str = ""
    raw: str | None = None  # None for synthesised instructions

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def command(self) -> str:
        """The motion word if any, otherwise the first command word."""
        motion = self.motion
        if motion:
            return motion
        return self.commands[0] if self.commands else ""

    @property
    def motion(self) -> str:
        for word in self.commands:
            if word in MOTION_COMMANDS:
                return word
        return ""

    @property
    def is_blank(self) -> bool:
        return not self.commands and not self.params and not self.comment

    @property
    def is_comment(self) -> bool:
        return bool(self.comment) and not self.commands and not self.params

    @property
    def is_rapid_move(self) -> bool:
        return self.motion == "G0"

    @property
    def is_linear_move(self) -> bool:
        """G0 or G1: a straight move that can carry a depth."""
        return self.motion in ("G0", "G1")

    @property
    def is_cutting_move(self) -> bool:
        return self.motion == "G1"

    @property
    def axes_present(self) -> frozenset[str]:
        """Position axes explicitly written on this line."""
        return frozenset(self.params) & POSITION_AXES

    def get(self, letter: str, default: float | None = None) -> float | None:
        return self.params.get(letter, default)


@dataclass
class ParsedProgram:
    """Everything the optimiser needs from one input file."""

    instructions: list[Instruction]
    header: HeaderMetadata
    errors: list[MalformedInstructionError] = field(default_factory=list)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __len__(self) -> int:
        return len(self.instructions)


# Regex patterns
_PAREN_COMMENT_RE = re.compile(r"\(([^()]*)\)")
_WORD_RE = re.compile(r"\s*([A-Z])\s*([-+]?(?:\d+\.?\d*|\.\d+))", re.IGNORECASE)


def _normalise_command(letter: str, value: float) -> str:
    if value == int(value):
        return f"{letter}{int(value)}"
    return f"{letter}{value}"


class GCodeParser:
    """Stateless parser that converts raw G-code text into Instructions."""

    def parse_line(self, line: str, line_number: int = 0) -> Instruction:
        """Parse a single line of G-code.

        Parameters
        ----------
        line:
            Raw G-code line, possibly including comments.  A trailing line
            terminator is ignored.
        line_number:
            The source line number (1-indexed by convention).

        Returns
        -------
        Instruction, which is blank for empty lines.

        Raises
        ------
        MalformedInstructionError
            If the code part contains anything other than word/number pairs.
        """
        raw = line.rstrip("\r\n")

        comment = ""
        if ";" in raw:
            code_part, comment = raw.split(";", 1)
            comment = comment.strip()
        else:
            code_part = raw

        paren_comments = _PAREN_COMMENT_RE.findall(code_part)
        if paren_comments:
            code_part = _PAREN_COMMENT_RE.sub(" ", code_part)
            inline = " ".join(c.strip() for c in paren_comments if c.strip())
            comment = f"{inline} {comment}".strip() if comment else inline

        code_part = code_part.strip()
        if code_part == "%":  # program delimiter
            comment = f"% {comment}".strip()
            code_part = ""
        commands: list[str] = []
        params: dict[str, float] = {}

        pos = 0
        while pos < len(code_part):
            match = _WORD_RE.match(code_part, pos)
            if match is None:
                if code_part[pos:].strip() == "":
                    break
                raise MalformedInstructionError(
                    f"unexpected text {code_part[pos:].strip()!r}",
                    line_number=line_number,
                    line_content=raw,
                )
            letter = match.group(1).upper()
            value = float(match.group(2))
            if letter in COMMAND_LETTERS:
                commands.append(_normalise_command(letter, value))
            elif letter != "N":  # block numbers carry no state
                params[letter] = value
            pos = match.end()

        return Instruction(
            line_number=line_number,
            commands=tuple(commands),
            params=params,
            comment=comment,
            raw=raw,
        )

    def iter_lines(
        self, lines: Iterable[str]
    ) -> Iterator[Instruction | MalformedInstructionError]:
        """Yield an Instruction, or the parse error, for every input line."""
        for idx, line in enumerate(lines, start=1):
            try:
                yield self.parse_line(line, line_number=idx)
            except MalformedInstructionError as exc:
                yield exc

    def parse_file(self, gcode_text: str) -> ParsedProgram:
        """Parse a complete G-code program.

        Parameters
        ----------
        gcode_text:
            Multi-line string containing the full G-code program.

        Returns
        -------
        ParsedProgram with instructions (blank lines kept), header metadata
        and the errors for any skipped lines.
        """
        lines = gcode_text.splitlines()
        instructions: list[Instruction] = []
        errors: list[MalformedInstructionError] = []
        for item in self.iter_lines(lines):
            if isinstance(item, MalformedInstructionError):
                errors.append(item)
            else:
                instructions.append(item)
        return ParsedProgram(
            instructions=instructions,
            header=parse_header(lines),
            errors=errors,
        )

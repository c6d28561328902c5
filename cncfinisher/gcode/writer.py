"""Serialise Instructions back to G-code text."""

from __future__ import annotations

from typing import IO, Iterable

import numpy as np

from cncfinisher.gcode.parser import Instruction

PARAM_ORDER = ("X", "Y", "Z", "A", "B", "C", "F", "S", "I", "J", "K", "P", "Q", "R")
FLUSH_EVERY_LINES = 1000


def format_number(value: float) -> str:
    """Render a word value without trailing zeros (``-9``, ``12.3456``)."""
    return np.format_float_positional(float(value) + 0.0, trim="-")


def format_instruction(instruction: Instruction) -> str:
    """Return the text for one line of output.

    Parsed instructions are written back exactly as read; synthesised ones
    (``raw is None``) get a canonical rendering.
    """
    if instruction.raw is not None:
        return instruction.raw

    words = list(instruction.commands)
    params = instruction.params
    for letter in PARAM_ORDER:
        if letter in params:
            words.append(f"{letter}{format_number(params[letter])}")
    for letter in sorted(set(params) - set(PARAM_ORDER)):
        words.append(f"{letter}{format_number(params[letter])}")
    if instruction.comment:
        words.append(f";{instruction.comment}")
    return " ".join(words)


class GCodeWriter:
    """Line-oriented writer that tracks how much it has written."""

    def __init__(self, stream: IO[str], flush_every: int = FLUSH_EVERY_LINES) -> None:
        self._stream = stream
        self._flush_every = flush_every
        self.line_count: int = 0
        self.bytes_written: int = 0

    def write(self, instruction: Instruction) -> None:
        self.write_line(format_instruction(instruction))

    def write_line(self, line: str) -> None:
        text = line + "\n"
        self._stream.write(text)
        self.line_count += 1
        self.bytes_written += len(text.encode("utf-8"))
        if self.line_count % self._flush_every == 0:
            self.flush()

    def write_all(self, instructions: Iterable[Instruction]) -> int:
        """Write every instruction; returns the number of lines written."""
        start = self.line_count
        for instruction in instructions:
            self.write(instruction)
        return self.line_count - start

    def flush(self) -> None:
        self._stream.flush()

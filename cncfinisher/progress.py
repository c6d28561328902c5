"""Progress display for long programs.

The bar counts input lines, not output lines: removed moves never reach the
writer, so progress follows the line number of each instruction written.
"""

from __future__ import annotations

from typing import IO, Iterable, Iterator

from tqdm import tqdm

from cncfinisher.gcode.parser import Instruction

PROGRESS_INTERVAL_SEC = 2.0


def progress_bar(
    total: int | None,
    disable: bool | None = None,
    file: IO[str] | None = None,
) -> tqdm:
    """Create the line progress bar.

    *disable* follows tqdm: ``None`` hides the bar when the output is not a
    terminal.
    """
    return tqdm(
        total=total or None,
        desc="Optimizing",
        unit="line",
        unit_scale=True,
        mininterval=PROGRESS_INTERVAL_SEC,
        disable=disable,
        file=file,
    )


def track_lines(
    instructions: Iterable[Instruction],
    bar: tqdm,
    line_count: int | None = None,
) -> Iterator[Instruction]:
    """Pass *instructions* through, advancing *bar* to each input line number."""
    position = 0
    for instruction in instructions:
        if instruction.line_number > position:
            bar.update(instruction.line_number - position)
            position = instruction.line_number
        yield instruction
    # Trailing removed or skipped lines
    if line_count and line_count > position:
        bar.update(line_count - position)

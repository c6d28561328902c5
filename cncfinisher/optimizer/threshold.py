"""First pass: find the depth that separates roughed stock from finishing work."""

from __future__ import annotations

import logging
from typing import Iterable

from cncfinisher.errors import NoMotionFoundError
from cncfinisher.gcode.parser import Instruction
from cncfinisher.optimizer.state import ModalStateTracker

logger = logging.getLogger(__name__)


def scan_min_depth(
    instructions: Iterable[Instruction],
    header_max_depth: float | None = None,
) -> float:
    """Return the lowest Z reached by any G0/G1 move.

    Uses a private tracker, so nothing seen here leaks into the second pass.

    Raises
    ------
    NoMotionFoundError
        If the program contains no G0/G1 moves at all.
    """
    tracker = ModalStateTracker(header_max_depth)
    min_depth: float | None = None

    for instruction in instructions:
        state = tracker.update(instruction)
        if not instruction.is_linear_move:
            continue
        if min_depth is None or state.z < min_depth:
            min_depth = state.z

    if min_depth is None:
        raise NoMotionFoundError("no G0/G1 motion instructions found")
    return min_depth


def resolve_threshold(
    instructions: Iterable[Instruction],
    allowance: float,
    header_max_depth: float | None = None,
) -> float:
    """Threshold = minimum observed depth + *allowance*."""
    min_depth = scan_min_depth(instructions, header_max_depth)
    threshold = min_depth + allowance
    logger.debug("Min depth %.4f, allowance %.4f -> threshold %.4f", min_depth, allowance, threshold)
    return threshold

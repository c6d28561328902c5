"""Classification of moves relative to the depth threshold.

Depth follows the usual CNC convention: smaller (more negative) Z is deeper.
A point exactly on the threshold counts as deep, so a classified crossing
always has a non-zero length on both sides of the threshold.
"""

from __future__ import annotations

from enum import Enum


class MoveClassification(Enum):
    SHALLOW = "shallow"  # both ends above the threshold: remove
    DEEP = "deep"  # both ends at/below the threshold: keep
    CROSSING_ENTER = "crossing_enter"  # above -> at/below
    CROSSING_LEAVE = "crossing_leave"  # at/below -> above
    NON_MOTION = "non_motion"  # not a classifiable move: keep

    @property
    def is_crossing(self) -> bool:
        return self in (MoveClassification.CROSSING_ENTER, MoveClassification.CROSSING_LEAVE)

    def __str__(self) -> str:
        return self.value


def classify_move(start_depth: float, end_depth: float, threshold: float) -> MoveClassification:
    """Classify a straight move from *start_depth* to *end_depth*."""
    start_deep = start_depth <= threshold
    end_deep = end_depth <= threshold

    if start_deep and end_deep:
        return MoveClassification.DEEP
    if not start_deep and not end_deep:
        return MoveClassification.SHALLOW
    if end_deep:
        return MoveClassification.CROSSING_ENTER
    return MoveClassification.CROSSING_LEAVE

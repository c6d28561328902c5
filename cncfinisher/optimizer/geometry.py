"""Threshold intersection and move splitting.

A straight move is ``P(t) = start + t * (end - start)`` for t in [0, 1].
The crossing point is where ``P(t).z`` equals the threshold; every other
axis is interpolated with the same t.
"""

from __future__ import annotations

from dataclasses import dataclass

from cncfinisher.config import COORDINATE_DECIMALS, DEPTH_TOLERANCE
from cncfinisher.errors import GeometryError, NotCrossingError
from cncfinisher.gcode.parser import DEPTH_AXIS, FEED_RATE, POSITION_AXES, Instruction
from cncfinisher.optimizer.classify import MoveClassification
from cncfinisher.optimizer.state import ModalState
from cncfinisher.utils.math_helpers import inverse_lerp, lerp, round_coordinate


@dataclass(frozen=True)
class IntersectionPoint:
    """Where a move meets the threshold plane."""

    x: float
    y: float
    z: float  # always exactly the threshold
    b: float
    t: float  # fraction of the move, 0 < t < 1

    def axis(self, letter: str) -> float:
        return getattr(self, letter.lower())


def calculate_intersection(
    start: ModalState,
    end: ModalState,
    threshold: float,
) -> IntersectionPoint:
    """Find where the move from *start* to *end* crosses *threshold*.

    Raises
    ------
    NotCrossingError
        If the move is level in Z, or the crossing lies outside the open
        interval (0, 1) of the move.
    """
    delta_z = end.z - start.z
    if abs(delta_z) < DEPTH_TOLERANCE:
        raise NotCrossingError(
            f"move does not cross threshold vertically (dz={delta_z:g})"
        )

    t = inverse_lerp(start.z, end.z, threshold)
    if not 0.0 < t < 1.0:
        raise NotCrossingError(f"intersection parameter t={t:g} out of range (0, 1)")

    return IntersectionPoint(
        x=round_coordinate(lerp(start.x, end.x, t), COORDINATE_DECIMALS),
        y=round_coordinate(lerp(start.y, end.y, t), COORDINATE_DECIMALS),
        z=threshold,
        b=round_coordinate(lerp(start.b, end.b, t), COORDINATE_DECIMALS),
        t=t,
    )


def _move(
    commands: tuple[str, ...],
    axes: dict[str, float],
    feed_rate: float | None,
    extra: dict[str, float] | None = None,
    comment: str = "",
    line_number: int = 0,
) -> Instruction:
    params = dict(axes)
    if feed_rate is not None:
        params[FEED_RATE] = feed_rate
    if extra:
        params.update(extra)
    return Instruction(
        line_number=line_number,
        commands=commands,
        params=params,
        comment=comment,
        raw=None,
    )


def split_move(
    instruction: Instruction,
    intersection: IntersectionPoint,
    classification: MoveClassification,
    start_state: ModalState,
) -> tuple[Instruction, Instruction | None]:
    """Cut a crossing move at *intersection*.

    CROSSING_ENTER yields (move to intersection, move on to the original end).
    CROSSING_LEAVE yields (move to intersection, None); the shallow remainder
    is dropped.

    Only the axes written on the original line are written on the new lines,
    and the feed rate in effect is carried through unchanged on G1 moves.

    Raises
    ------
    GeometryError
        If the instruction is not a G0/G1 move or the classification is not
        a crossing.
    """
    motion = instruction.motion
    if motion not in ("G0", "G1"):
        raise GeometryError(f"line {instruction.line_number} is not a G0 or G1 move")
    if not classification.is_crossing:
        raise GeometryError(f"cannot split a {classification} move")

    feed_rate: float | None = None
    if motion == "G1":
        feed = instruction.get(FEED_RATE, start_state.f)
        if feed and feed > 0:
            feed_rate = feed

    present = [letter for letter in instruction.params if letter in POSITION_AXES]
    if DEPTH_AXIS not in present:
        raise GeometryError(f"line {instruction.line_number} does not move in Z")

    extra = {
        letter: value
        for letter, value in instruction.params.items()
        if letter not in POSITION_AXES and letter != FEED_RATE
    }

    to_intersection = _move(
        instruction.commands,
        {letter: intersection.axis(letter) for letter in present},
        feed_rate,
        extra=extra,
        comment=instruction.comment,
        line_number=instruction.line_number,
    )

    if classification is MoveClassification.CROSSING_LEAVE:
        return to_intersection, None

    to_end = _move(
        (motion,),
        {letter: instruction.params[letter] for letter in present},
        feed_rate,
        line_number=instruction.line_number,
    )
    return to_intersection, to_end

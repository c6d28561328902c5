"""Strategies for crossing moves and multi-axis shallow moves.

Two independent choices govern a run:

* ``CrossingStrategy`` decides what happens to a move that crosses the
  threshold: keep it whole (conservative) or cut it at the crossing point
  (aggressive).
* ``FilterStrategy`` decides whether a shallow move that also travels in
  X, Y or the rotary B axis may be removed.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from cncfinisher.errors import InvalidStrategyError
from cncfinisher.gcode.parser import NON_DEPTH_AXES
from cncfinisher.optimizer.classify import MoveClassification


class Action(Enum):
    REMOVE = "remove"
    PRESERVE = "preserve"
    SPLIT = "split"


class CrossingStrategy(Enum):
    CONSERVATIVE = "conservative"
    AGGRESSIVE = "aggressive"

    def __str__(self) -> str:
        return self.value


class FilterStrategy(Enum):
    SAFE = "safe"  # keep shallow moves that also move X, Y or B
    ALL_AXES = "all-axes"  # depth alone decides
    SPLIT = "split"  # accepted, currently behaves as SAFE
    AGGRESSIVE = "aggressive"  # depth alone decides

    @property
    def keeps_multi_axis(self) -> bool:
        return self in (FilterStrategy.SAFE, FilterStrategy.SPLIT)

    def __str__(self) -> str:
        return self.value


def _parse(enum_cls, kind: str, value: str):
    key = (value or "").strip().lower()
    for member in enum_cls:
        if member.value == key:
            return member
    raise InvalidStrategyError(kind, value, [m.value for m in enum_cls])


def parse_crossing_strategy(value: str) -> CrossingStrategy:
    """Parse ``conservative``/``aggressive`` (case-insensitive).

    Raises InvalidStrategyError listing the valid names.
    """
    return _parse(CrossingStrategy, "crossing", value)


def parse_filter_strategy(value: str) -> FilterStrategy:
    """Parse ``safe``/``all-axes``/``split``/``aggressive`` (case-insensitive).

    Raises InvalidStrategyError listing the valid names.
    """
    return _parse(FilterStrategy, "filter", value)


def decide(
    classification: MoveClassification,
    axes_present: Iterable[str],
    crossing: CrossingStrategy = CrossingStrategy.AGGRESSIVE,
    filter_strategy: FilterStrategy = FilterStrategy.SAFE,
) -> Action:
    """Map a classified move to the action the pipeline should take."""
    if classification in (MoveClassification.DEEP, MoveClassification.NON_MOTION):
        return Action.PRESERVE

    if classification is MoveClassification.SHALLOW:
        if filter_strategy.keeps_multi_axis and NON_DEPTH_AXES.intersection(axes_present):
            return Action.PRESERVE
        return Action.REMOVE

    if classification.is_crossing:
        if crossing is CrossingStrategy.AGGRESSIVE:
            return Action.SPLIT
        return Action.PRESERVE

    raise ValueError(f"Unknown classification: {classification!r}")


class Strategy:
    """Both strategy choices bound together for one run."""

    def __init__(
        self,
        crossing: CrossingStrategy = CrossingStrategy.AGGRESSIVE,
        filter_strategy: FilterStrategy = FilterStrategy.SAFE,
    ) -> None:
        self.crossing = crossing
        self.filter_strategy = filter_strategy

    def decide(self, classification: MoveClassification, axes_present: Iterable[str]) -> Action:
        return decide(classification, axes_present, self.crossing, self.filter_strategy)

    def __repr__(self) -> str:
        return f"Strategy(crossing={self.crossing}, filter_strategy={self.filter_strategy})"

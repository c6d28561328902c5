"""OptimizerConfig and run-wide constants."""

from __future__ import annotations

import math
from dataclasses import dataclass

from cncfinisher.errors import InvalidAllowanceError
from cncfinisher.optimizer.strategy import (
    CrossingStrategy,
    FilterStrategy,
    parse_crossing_strategy,
    parse_filter_strategy,
)

# --- Physical defaults ---
DEFAULT_FEED_RATE: float = 1000.0  # mm/min, used when no F word is in effect

# --- Geometry ---
DEPTH_TOLERANCE: float = 1e-9  # |dz| below this is treated as a level move
COORDINATE_DECIMALS: int = 4  # rounding applied to computed intersection points


@dataclass(frozen=True)
class OptimizerConfig:
    """Settings for one optimisation run; immutable once created."""

    allowance: float = 0.0  # mm of material left by the rough pass
    crossing_strategy: CrossingStrategy = CrossingStrategy.AGGRESSIVE
    filter_strategy: FilterStrategy = FilterStrategy.SAFE

    def __post_init__(self) -> None:
        if (
            isinstance(self.allowance, bool)
            or not isinstance(self.allowance, (int, float))
            or not math.isfinite(self.allowance)
            or self.allowance < 0
        ):
            raise InvalidAllowanceError(self.allowance)

    @classmethod
    def create(
        cls,
        allowance: float,
        crossing: str | CrossingStrategy = CrossingStrategy.AGGRESSIVE,
        filter_strategy: str | FilterStrategy = FilterStrategy.SAFE,
    ) -> OptimizerConfig:
        """Build a config from user-facing values, validating each one.

        Raises
        ------
        InvalidAllowanceError
            If *allowance* is negative or not finite.
        InvalidStrategyError
            If either strategy name is unknown.
        """
        if not isinstance(crossing, CrossingStrategy):
            crossing = parse_crossing_strategy(crossing)
        if not isinstance(filter_strategy, FilterStrategy):
            filter_strategy = parse_filter_strategy(filter_strategy)
        return cls(
            allowance=allowance,
            crossing_strategy=crossing,
            filter_strategy=filter_strategy,
        )


# Singleton default config
DEFAULT_CONFIG = OptimizerConfig()

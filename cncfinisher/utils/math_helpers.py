"""Utility math functions for toolpath geometry."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def lerp(a: float, b: float, t: float) -> float:
    """Linearly interpolate between *a* and *b* by factor *t*."""
    return a + (b - a) * t


def inverse_lerp(a: float, b: float, value: float) -> float:
    """Return the interpolation parameter *t* such that ``lerp(a, b, t) == value``.

    Returns 0.0 when ``a == b`` to avoid division by zero.
    """
    if b == a:
        return 0.0
    return (value - a) / (b - a)


def distance(start: Sequence[float], end: Sequence[float]) -> float:
    """Euclidean distance between two points of equal dimension."""
    delta = np.asarray(end, dtype=float) - np.asarray(start, dtype=float)
    return float(np.linalg.norm(delta))


def round_coordinate(value: float, decimals: int = 4) -> float:
    """Round a machine coordinate, normalising ``-0.0`` to ``0.0``."""
    rounded = float(np.round(value, decimals))
    return rounded + 0.0

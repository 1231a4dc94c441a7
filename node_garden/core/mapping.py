"""Scalar helpers shared by nodes and connections.

:func:`remap` accepts plain floats as well as numpy arrays so the engine can
remap a whole tick's worth of pair distances in one call.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np


def remap(
    value: Any,
    start1: float,
    end1: float,
    start2: float,
    end2: float,
) -> Any:
    """Linearly map *value* from ``[start1, end1]`` onto ``[start2, end2]``.

    The result is not clamped.  A degenerate source range (``end1 == start1``)
    maps everything to *start2*.
    """
    if end1 == start1:
        if isinstance(value, np.ndarray):
            return np.full_like(value, start2, dtype=float)
        return start2
    return start2 + (value - start1) / (end1 - start1) * (end2 - start2)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def distance(a: Any, b: Any) -> float:
    """Euclidean distance between two 2D points."""
    return float(math.hypot(a[0] - b[0], a[1] - b[1]))


def segment_rotation(start: Any, end: Any) -> float:
    """Sprite rotation for a line segment drawn from *start* to *end*.

    A line sprite is an unrotated rectangle that grows downward from its
    origin; this is the angle that turns that axis onto ``end - start`` in
    screen coordinates (y pointing down).
    """
    return math.pi / 2 - math.atan2(end[1] - start[1], start[0] - end[0])

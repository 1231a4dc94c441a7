"""Expanding rings emitted by a node when it is pinged.

Each node keeps its own list of ripples.  A ripple that has grown past the
maximum radius turns invisible and is reused by the next ping before a new
record is allocated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .mapping import clamp, remap

if TYPE_CHECKING:
    from ..simulation.config import GardenConfig


@dataclass
class Ripple:
    """One ring around a node; *radius* grows by a fixed amount per tick."""

    color: tuple[float, float, float, float]
    radius: float = 0.0
    thickness: float = 0.0
    shade: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    visible: bool = True


def reset_ripple(
    ripple: Ripple,
    color: tuple[float, float, float, float],
    config: GardenConfig,
) -> None:
    ripple.color = color
    ripple.shade = color
    ripple.radius = 0.0
    ripple.thickness = config.ripple_stroke_max
    ripple.visible = True


def grow_ripple(ripple: Ripple, config: GardenConfig) -> None:
    """Expand *ripple* by one tick: thinner and fainter as it widens."""
    if not ripple.visible:
        return
    ripple.radius += config.ripple_velocity
    ripple.thickness = clamp(
        remap(ripple.radius, 0.0, config.min_dist,
              config.ripple_stroke_max, config.ripple_stroke_min),
        config.ripple_stroke_min, config.ripple_stroke_max,
    )
    fade = clamp(remap(ripple.radius, 0.0, config.ripple_fade_radius, 1.0, 0.0),
                 0.0, 1.0)
    r, g, b, a = ripple.color
    ripple.shade = (r, g, b, a * fade)
    if ripple.radius > config.ripple_max_radius:
        ripple.visible = False


def spawn_ripple(
    ripples: list[Ripple],
    color: tuple[float, float, float, float],
    config: GardenConfig,
) -> Ripple:
    """Start a ripple in *ripples*, recycling an invisible one when possible."""
    for ripple in ripples:
        if not ripple.visible:
            reset_ripple(ripple, color, config)
            return ripple
    ripple = Ripple(color=color)
    reset_ripple(ripple, color, config)
    ripples.append(ripple)
    return ripple

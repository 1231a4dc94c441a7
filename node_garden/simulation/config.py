"""Tunable constants for the garden simulation.

Distances and sizes are in surface pixels, ``speed`` is the fraction of the
remaining offset covered per second of ``delta_time``.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.node import NodeKind

PRIMARY_MODES = ("preserve", "replace")


@dataclass(frozen=True)
class GardenConfig:
    """All simulation and presentation constants.

    Derive variants with :func:`dataclasses.replace`; every instance is
    validated on construction.
    """

    # Proximity
    min_dist: float = 250.0

    # Motion
    speed: float = 0.6
    settle_tolerance: float = 0.5
    wander_probability: float = 0.001

    # Node size, mapped from normalised connectedness
    node_size_min: float = 20.0
    node_size_max: float = 50.0

    # Line thickness, mapped from distance
    stroke_min: float = 2.0
    stroke_max: float = 7.0

    # Shadow layers
    outline_min: float = 4.0
    outline_max: float = 12.0
    shadow1_multiplier: float = 85.0
    shadow2_multiplier: float = 110.0

    # Running maximum of connectedness: starting value and floor, and the
    # amount it decays after every finalised node.
    initial_max_connectedness: float = 0.1
    connectedness_decay: float = 1e-5

    # Ripples emitted on a ping: growth in pixels per tick, ring thickness
    # (mapped from radius over min_dist), radius at which the ring has faded
    # out and radius past which it is hidden.
    ripple_velocity: float = 3.0
    ripple_stroke_min: float = 1.0
    ripple_stroke_max: float = 20.0
    ripple_fade_radius: float = 800.0
    ripple_max_radius: float = 1000.0

    # Input
    touch_radius: float = 60.0

    # Node-count rebuilds keep ("preserve") or recreate ("replace") the
    # primary node.
    primary_mode: str = "preserve"
    node_kind: NodeKind = NodeKind.SHADOW

    def __post_init__(self) -> None:
        for name in ("min_dist", "speed", "touch_radius",
                     "initial_max_connectedness", "ripple_velocity",
                     "ripple_fade_radius", "ripple_max_radius"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        for name in ("settle_tolerance", "connectedness_decay"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)!r}")
        if not 0.0 <= self.wander_probability <= 1.0:
            raise ValueError(
                f"wander_probability must lie in [0, 1], got {self.wander_probability!r}"
            )
        for low, high in (("node_size_min", "node_size_max"),
                          ("stroke_min", "stroke_max"),
                          ("outline_min", "outline_max"),
                          ("ripple_stroke_min", "ripple_stroke_max")):
            if getattr(self, low) > getattr(self, high):
                raise ValueError(f"{low} must not exceed {high}")
        if self.primary_mode not in PRIMARY_MODES:
            raise ValueError(
                f"primary_mode must be one of {PRIMARY_MODES}, got {self.primary_mode!r}"
            )
        if self.node_kind is NodeKind.PRIMARY:
            raise ValueError("node_kind cannot be PRIMARY; the primary node is created by the engine")

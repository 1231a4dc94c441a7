"""Pointer input for the primary node."""

from __future__ import annotations

import logging

from ..core.mapping import distance
from .engine import SimulationEngine

logger = logging.getLogger(__name__)


class InputController:
    """Routes press/move/release to the primary node and nothing else.

    A press close enough to the primary node grabs it; moves while grabbed
    place it exactly under the pointer; release lets go.  A grab released
    without the pointer having moved is a tap, and pings the primary node.
    Every press starts over, so a press away from the primary node ends any
    drag still in progress.
    """

    def __init__(self, engine: SimulationEngine) -> None:
        self.engine = engine
        self.dragging = False
        self._held_at: tuple[float, float] | None = None
        self._moved = False

    @property
    def touch_radius(self) -> float:
        return self.engine.config.touch_radius

    def press(self, x: float, y: float) -> bool:
        """Start dragging if ``(x, y)`` is on the primary node."""
        self.dragging = False
        self._held_at = None
        self._moved = False
        pos = self.engine.get_primary_node_position()
        if pos is None:
            return False
        if distance(pos, (x, y)) < self.touch_radius:
            self.dragging = True
            self._held_at = (x, y)
            logger.debug("primary node grabbed at (%.1f, %.1f)", x, y)
        return self.dragging

    def move(self, x: float, y: float) -> bool:
        if not self.dragging:
            return False
        if (x, y) != self._held_at:
            self._moved = True
        if not self.engine.move_primary_to(x, y):
            # Primary went away mid-drag.
            self.dragging = False
            return False
        return True

    def release(self) -> bool:
        was_dragging = self.dragging
        if was_dragging and not self._moved:
            self.engine.ping()
        self.dragging = False
        self._held_at = None
        self._moved = False
        return was_dragging

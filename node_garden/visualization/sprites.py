"""Snapshot → sprite draw records.

Rendering backends draw textured rectangles: an ellipse texture for node
layers and a thin line texture for connections.  This module produces those
rectangles, colours, rotations and depth keys from a :class:`Snapshot`, in
back-to-front order (largest depth first).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..simulation.snapshot import ConnectionView, NodeView, Snapshot

OUTLINE_COLOR = (0.6, 0.6, 0.6, 1.0)
SHADOW1_COLOR = (1.0, 1.0, 1.0, 0.3)
SHADOW2_COLOR = (1.0, 1.0, 1.0, 0.2)

OUTLINE_DEPTH = 0.2
SHADOW1_DEPTH = 0.3
SHADOW2_DEPTH = 0.4
RIPPLE_DEPTH = 0.05


@dataclass(frozen=True)
class Sprite:
    """One draw call: *rect* is ``(left, top, width, height)`` in surface pixels.

    Line sprites are rotated by *rotation* radians about their top-left corner.
    Ring sprites are unfilled ellipses drawn with a *stroke* wide edge.
    """

    shape: str  # "ellipse", "ring" or "line"
    rect: tuple[float, float, float, float]
    color: tuple[float, float, float, float]
    rotation: float
    depth: float
    stroke: float = 0.0

    @property
    def center(self) -> tuple[float, float]:
        left, top, w, h = self.rect
        return left + w / 2, top + h / 2

    def axis_end(self) -> tuple[float, float]:
        """Far end of a rotated line sprite (its origin is the rect's top-left)."""
        left, top, _w, h = self.rect
        return (left - h * math.sin(self.rotation),
                top + h * math.cos(self.rotation))


def _centered(x: float, y: float, size: float) -> tuple[float, float, float, float]:
    return (x - size / 2, y - size / 2, size, size)


def node_sprites(view: NodeView) -> list[Sprite]:
    sprites = [Sprite("ellipse", _centered(view.x, view.y, view.size),
                      view.color, 0.0, view.depth)]
    if view.kind.has_shadow:
        sprites += [
            Sprite("ellipse", _centered(view.x, view.y, view.outline_size),
                   OUTLINE_COLOR, 0.0, OUTLINE_DEPTH),
            Sprite("ellipse", _centered(view.x, view.y, view.shadow1_size),
                   SHADOW1_COLOR, 0.0, SHADOW1_DEPTH),
            Sprite("ellipse", _centered(view.x, view.y, view.shadow2_size),
                   SHADOW2_COLOR, 0.0, SHADOW2_DEPTH),
        ]
    # Rings still inside the body are not drawn yet.
    sprites += [
        Sprite("ring", _centered(view.x, view.y, 2 * ripple.radius),
               ripple.color, 0.0, RIPPLE_DEPTH, ripple.thickness)
        for ripple in view.ripples
        if ripple.radius > view.size / 2
    ]
    return sprites


def connection_sprite(view: ConnectionView) -> Sprite | None:
    if not view.visible:
        return None
    return Sprite(
        "line",
        (view.start[0], view.start[1], view.thickness, view.length),
        (1.0, 1.0, 1.0, view.alpha),
        view.rotation,
        view.depth,
    )


def build_sprites(snapshot: Snapshot) -> list[Sprite]:
    """All sprites for *snapshot*, sorted back to front."""
    sprites: list[Sprite] = []
    for view in snapshot.nodes:
        sprites.extend(node_sprites(view))
    for cview in snapshot.connections:
        sprite = connection_sprite(cview)
        if sprite is not None:
            sprites.append(sprite)
    # Stable sort keeps submission order within a depth layer.
    sprites.sort(key=lambda s: -s.depth)
    return sprites

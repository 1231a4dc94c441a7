"""Read-only per-tick views handed to presentation code."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.connection import Connection
from ..core.node import Node, NodeKind
from ..core.ripple import Ripple


@dataclass(frozen=True)
class RippleView:
    radius: float
    thickness: float
    color: tuple[float, float, float, float]

    @classmethod
    def of(cls, ripple: Ripple) -> RippleView:
        return cls(radius=float(ripple.radius),
                   thickness=float(ripple.thickness), color=ripple.shade)


@dataclass(frozen=True)
class NodeView:
    id: int
    kind: NodeKind
    x: float
    y: float
    size: float
    normalized_connectedness: float
    outline_size: float
    shadow1_size: float
    shadow2_size: float
    color: tuple[float, float, float, float]
    depth: float
    ripples: tuple[RippleView, ...] = ()

    @classmethod
    def of(cls, node: Node) -> NodeView:
        return cls(
            id=node.id,
            kind=node.kind,
            x=float(node.position[0]),
            y=float(node.position[1]),
            size=float(node.size),
            normalized_connectedness=float(node.normalized_connectedness),
            outline_size=float(node.outline_size),
            shadow1_size=float(node.shadow1_size),
            shadow2_size=float(node.shadow2_size),
            color=node.color,
            depth=node.depth,
            ripples=tuple(RippleView.of(r) for r in node.ripples if r.visible),
        )


@dataclass(frozen=True)
class ConnectionView:
    slot: int
    visible: bool
    start: tuple[float, float]
    end: tuple[float, float]
    thickness: float
    alpha: float
    rotation: float
    length: float
    depth: float

    @classmethod
    def of(cls, slot: int, conn: Connection) -> ConnectionView:
        return cls(
            slot=slot,
            visible=conn.visible,
            start=(float(conn.start[0]), float(conn.start[1])),
            end=(float(conn.end[0]), float(conn.end[1])),
            thickness=float(conn.thickness),
            alpha=float(conn.alpha),
            rotation=float(conn.rotation),
            length=float(conn.length),
            depth=conn.depth,
        )


@dataclass(frozen=True)
class Snapshot:
    """State of the garden after one tick."""

    tick: int
    total_time: float
    max_connectedness: float
    width: float
    height: float
    nodes: tuple[NodeView, ...]
    connections: tuple[ConnectionView, ...]

    @property
    def visible_connections(self) -> tuple[ConnectionView, ...]:
        return tuple(c for c in self.connections if c.visible)


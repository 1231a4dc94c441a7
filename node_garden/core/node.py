"""Node model for the garden.

A node is a point that eases toward a target position.  Its rendered size is
derived once per tick from how strongly it is connected to its neighbours.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from .mapping import clamp, remap
from .ripple import Ripple

if TYPE_CHECKING:
    from ..simulation.config import GardenConfig


UNASSIGNED_ID = -1

WHITE = (1.0, 1.0, 1.0, 1.0)


class NodeKind(Enum):
    """Presentation variant of a node.

    ``SHADOW`` and ``PRIMARY`` nodes carry an outline and two halo layers;
    ``PLAIN`` nodes only have a body.  Exactly one ``PRIMARY`` node may exist
    and it is the only one that takes pointer input.
    """

    PLAIN = "plain"
    SHADOW = "shadow"
    PRIMARY = "primary"

    @property
    def has_shadow(self) -> bool:
        return self is not NodeKind.PLAIN

    @property
    def depth(self) -> float:
        return 0.0 if self is NodeKind.PRIMARY else 0.1


@dataclass
class Node:
    """A single point in the garden.

    ``id`` is ``-1`` for anonymous nodes, which wander on their own.  Nodes
    with an id are steered from outside (by :meth:`update_node_position` or
    pointer input) and keep still otherwise.
    """

    position: np.ndarray  # shape (2,)
    target: np.ndarray  # shape (2,)
    kind: NodeKind = NodeKind.SHADOW
    id: int = UNASSIGNED_ID
    size: float = 0.0
    connectedness: float = 0.0
    normalized_connectedness: float = 0.0
    outline_size: float = 0.0
    shadow1_size: float = 0.0
    shadow2_size: float = 0.0
    color: tuple[float, float, float, float] = field(default=WHITE)
    ripples: list[Ripple] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=float)
        self.target = np.asarray(self.target, dtype=float)

    @property
    def is_anonymous(self) -> bool:
        return self.id == UNASSIGNED_ID

    @property
    def is_primary(self) -> bool:
        return self.kind is NodeKind.PRIMARY

    @property
    def depth(self) -> float:
        return self.kind.depth


def random_point(
    rng: np.random.Generator,
    width: float,
    height: float,
    margin: float,
) -> np.ndarray:
    """Uniform random point inside the surface, *margin* away from each edge.

    When the surface is too small for the margin the point collapses onto
    the centre line of that axis.
    """
    x = rng.uniform(margin, max(margin, width - margin))
    y = rng.uniform(margin, max(margin, height - margin))
    return np.array([x, y], dtype=float)


def integrate(node: Node, delta_time: float, config: GardenConfig) -> None:
    """Move *node* a fraction of the way toward its target.

    The step is proportional to the remaining offset, so nodes slow down as
    they arrive.  A single step never passes the target, however long the
    tick.  Once both axis offsets are within the settle tolerance the node
    stays put.
    """
    offset = node.target - node.position
    if np.all(np.abs(offset) <= config.settle_tolerance):
        return
    fraction = min(config.speed * delta_time, 1.0)
    node.position = node.position + offset * fraction


def maybe_wander(
    node: Node,
    rng: np.random.Generator,
    width: float,
    height: float,
    config: GardenConfig,
) -> bool:
    """Occasionally give an anonymous node a new random target."""
    if not node.is_anonymous or node.is_primary:
        return False
    if rng.random() >= config.wander_probability:
        return False
    node.target = random_point(rng, width, height, config.node_size_max)
    return True


def normalize(connectedness: float, running_max: float) -> float:
    """Rescale raw *connectedness* into ``[0, 1]`` against *running_max*."""
    return clamp(remap(connectedness, 0.0, running_max, 0.0, 1.0), 0.0, 1.0)


def derive_visuals(node: Node, config: GardenConfig) -> None:
    """Set size, outline and halo sizes from normalised connectedness."""
    nc = node.normalized_connectedness
    node.size = remap(nc, 0.0, 1.0, config.node_size_min, config.node_size_max)
    if node.kind.has_shadow:
        node.outline_size = node.size + remap(
            nc, 0.0, 1.0, config.outline_min, config.outline_max
        )
        node.shadow1_size = nc * config.shadow1_multiplier
        node.shadow2_size = nc * config.shadow2_multiplier
    else:
        node.outline_size = 0.0
        node.shadow1_size = 0.0
        node.shadow2_size = 0.0


def primary_color(rng: np.random.Generator) -> tuple[float, float, float, float]:
    """Random pastel colour: each channel in ``[0.5, 1.0]``, opaque."""
    r, g, b = (float(c) for c in rng.uniform(0.5, 1.0, size=3))
    return (r, g, b, 1.0)

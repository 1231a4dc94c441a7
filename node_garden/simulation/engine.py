"""Simulation engine: owns the garden's nodes and connections and advances them per tick."""

from __future__ import annotations

import logging

import numpy as np

from ..core.connection import ConnectionPool, break_connection, form_connection
from ..core.mapping import remap
from ..core.node import (
    UNASSIGNED_ID,
    Node,
    NodeKind,
    derive_visuals,
    integrate,
    maybe_wander,
    normalize,
    primary_color,
    random_point,
)
from ..core.ripple import grow_ripple, spawn_ripple
from .config import GardenConfig
from .snapshot import ConnectionView, NodeView, Snapshot

logger = logging.getLogger(__name__)


class SimulationEngine:
    """Synchronous, tick-driven node garden.

    Each :meth:`advance` moves every node, evaluates every unordered pair of
    nodes, updates the pooled connection of each pair and derives node sizes
    from the accumulated connectedness.  The connection pool always holds
    exactly ``n * (n - 1) / 2`` records for ``n`` nodes.

    Callers must serialise calls; nothing here is thread-safe.
    """

    def __init__(
        self,
        width: float,
        height: float,
        config: GardenConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.width = max(float(width), 0.0)
        self.height = max(float(height), 0.0)
        self.config = config or GardenConfig()
        self.rng = rng or np.random.default_rng()
        self.nodes: list[Node] = []
        self.connections = ConnectionPool()
        # Running maximum of raw connectedness, used for normalisation.
        self.max_connectedness = self.config.initial_max_connectedness
        self.tick_count = 0
        self.total_time = 0.0
        self._next_id = 0

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def _allocate_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def _reserve_id(self, node_id: int) -> None:
        """Keep generated ids clear of an externally supplied one."""
        self._next_id = max(self._next_id, node_id + 1)

    def find_node(self, node_id: int) -> Node | None:
        if node_id == UNASSIGNED_ID:
            return None
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def connection_count(self) -> int:
        return len(self.connections)

    @property
    def primary_node(self) -> Node | None:
        for node in self.nodes:
            if node.is_primary:
                return node
        return None

    def get_primary_node_position(self) -> tuple[float, float] | None:
        primary = self.primary_node
        if primary is None:
            return None
        return float(primary.position[0]), float(primary.position[1])

    # ------------------------------------------------------------------
    # Node construction
    # ------------------------------------------------------------------

    def _random_point(self) -> np.ndarray:
        return random_point(self.rng, self.width, self.height,
                            self.config.node_size_max)

    def _new_primary(self) -> Node:
        pos = self._random_point()
        node = Node(position=pos, target=pos.copy(), kind=NodeKind.PRIMARY,
                    id=self._allocate_id(), color=primary_color(self.rng))
        derive_visuals(node, self.config)
        return node

    def _new_anonymous(self) -> Node:
        node = Node(position=self._random_point(), target=self._random_point(),
                    kind=self.config.node_kind)
        derive_visuals(node, self.config)
        return node

    def _append(self, x: float, y: float, node_id: int) -> Node:
        pos = np.array([x, y], dtype=float)
        node = Node(position=pos, target=pos.copy(), kind=self.config.node_kind,
                    id=node_id)
        derive_visuals(node, self.config)
        self.nodes.append(node)
        self.connections.resize(len(self.nodes))
        return node

    # ------------------------------------------------------------------
    # Collection management
    # ------------------------------------------------------------------

    def create_primary_node(self) -> tuple[float, float] | None:
        """Reset the garden to a single fresh primary node; return its position."""
        self.nodes = [self._new_primary()]
        self.connections.rebuild(1)
        logger.debug("created primary node %d", self.nodes[0].id)
        return self.get_primary_node_position()

    def set_node_count(self, n: int) -> None:
        """Rebuild the garden with *n* nodes: the primary plus ``n - 1`` anonymous ones.

        Every connection is reallocated.  ``n <= 0`` leaves an empty garden.
        """
        n = max(int(n), 0)
        if n == 0:
            self.nodes = []
        else:
            primary = self.primary_node
            if primary is None or self.config.primary_mode == "replace":
                primary = self._new_primary()
            self.nodes = [primary] + [self._new_anonymous() for _ in range(n - 1)]
        self.connections.rebuild(n)
        logger.debug("node count set to %d (%d connections)",
                     n, len(self.connections))

    def add_node(self, x: float, y: float) -> int:
        """Append a node at ``(x, y)`` and return its newly assigned id."""
        node = self._append(x, y, self._allocate_id())
        logger.debug("added node %d at (%.1f, %.1f)", node.id, x, y)
        return node.id

    def remove_node(self, node_id: int) -> bool:
        """Remove the node with *node_id*.

        The primary node and unknown ids are left alone.  Returns whether a
        node was removed.
        """
        index = next((i for i, node in enumerate(self.nodes)
                      if node_id != UNASSIGNED_ID and node.id == node_id), None)
        if index is None:
            logger.debug("remove_node(%d): no such node", node_id)
            return False
        if self.nodes[index].is_primary:
            logger.debug("remove_node(%d): primary node is not removable", node_id)
            return False

        last = self.nodes.pop()
        if index < len(self.nodes):
            self.nodes[index] = last
        # The swap changes which pair every slot stands for.
        self.connections.resize(len(self.nodes))
        self.connections.hide_all()
        logger.debug("removed node %d", node_id)
        return True

    def update_node_position(self, node_id: int, x: float, y: float) -> None:
        """Steer the node known as *node_id* toward ``(x, y)``.

        An unknown id takes over the first anonymous node, or a new node is
        appended when none is left.  The primary node never takes part.
        """
        if node_id == UNASSIGNED_ID:
            return
        primary = self.primary_node
        if primary is not None and primary.id == node_id:
            logger.debug("update_node_position(%d): ignoring primary node", node_id)
            return

        target = np.array([x, y], dtype=float)
        for node in self.nodes:
            if not node.is_primary and node.id == node_id:
                node.target = target
                return

        self._reserve_id(node_id)
        for node in self.nodes:
            if not node.is_primary and node.is_anonymous:
                node.id = node_id
                node.target = target
                logger.debug("node %d adopted an anonymous slot", node_id)
                return

        self._append(x, y, node_id)
        logger.debug("node %d appended at (%.1f, %.1f)", node_id, x, y)

    def move_primary_to(self, x: float, y: float) -> bool:
        """Place the primary node at ``(x, y)`` immediately, without easing."""
        primary = self.primary_node
        if primary is None:
            return False
        primary.position = np.array([x, y], dtype=float)
        primary.target = primary.position.copy()
        return True

    def ping(self, node_id: int | None = None) -> bool:
        """Emit a ripple from *node_id*, or from the primary node when omitted."""
        node = self.primary_node if node_id is None else self.find_node(node_id)
        if node is None:
            return False
        spawn_ripple(node.ripples, node.color, self.config)
        logger.debug("node %d pinged (%d ripples)", node.id, len(node.ripples))
        return True

    def resize_surface(self, width: float, height: float) -> None:
        """Change the surface bounds; nodes keep their positions."""
        self.width = max(float(width), 0.0)
        self.height = max(float(height), 0.0)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def _positions(self) -> np.ndarray:
        if not self.nodes:
            return np.empty((0, 2))
        return np.array([node.position for node in self.nodes], dtype=float)

    def _evaluate_pairs(self) -> None:
        """Accumulate connectedness and form or break every pooled connection."""
        cfg = self.config
        n = len(self.nodes)
        positions = self._positions()
        # triu_indices walks pairs row by row, which is the pool's slot order.
        ii, jj = np.triu_indices(n, k=1)
        dists = np.linalg.norm(positions[ii] - positions[jj], axis=1)
        near = dists < cfg.min_dist
        proximity = np.where(near, remap(dists, 0.0, cfg.min_dist, 1.0, 0.0), 0.0)

        totals = np.zeros(n)
        np.add.at(totals, ii, proximity)
        np.add.at(totals, jj, proximity)

        for slot in range(len(dists)):
            conn = self.connections[slot]
            if near[slot]:
                form_connection(conn, positions[ii[slot]], positions[jj[slot]],
                                float(dists[slot]), cfg)
            else:
                break_connection(conn)

        for node, total in zip(self.nodes, totals):
            node.connectedness = float(total)

    def _finalize(self, node: Node) -> None:
        cfg = self.config
        self.max_connectedness = max(self.max_connectedness, node.connectedness)
        node.normalized_connectedness = normalize(node.connectedness,
                                                  self.max_connectedness)
        derive_visuals(node, cfg)
        self.max_connectedness = max(
            self.max_connectedness - cfg.connectedness_decay,
            cfg.initial_max_connectedness,
        )

    def advance(self, total_time: float, delta_time: float) -> Snapshot:
        """Advance the garden by one tick and return the resulting snapshot."""
        dt = max(float(delta_time), 0.0)
        for node in self.nodes:
            if node.is_primary:
                continue
            maybe_wander(node, self.rng, self.width, self.height, self.config)
            integrate(node, dt, self.config)

        self._evaluate_pairs()
        for node in self.nodes:
            self._finalize(node)
            for ripple in node.ripples:
                grow_ripple(ripple, self.config)

        self.tick_count += 1
        self.total_time = float(total_time)
        return self.snapshot()

    def run(self, num_ticks: int, delta_time: float = 1.0 / 30.0) -> Snapshot:
        """Advance *num_ticks* ticks of *delta_time* each; return the last snapshot."""
        snap = self.snapshot()
        for _ in range(num_ticks):
            snap = self.advance(self.total_time + delta_time, delta_time)
        return snap

    def snapshot(self) -> Snapshot:
        return Snapshot(
            tick=self.tick_count,
            total_time=self.total_time,
            max_connectedness=self.max_connectedness,
            width=self.width,
            height=self.height,
            nodes=tuple(NodeView.of(node) for node in self.nodes),
            connections=tuple(ConnectionView.of(slot, conn)
                              for slot, conn in enumerate(self.connections)),
        )

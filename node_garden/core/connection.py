"""Pooled connection records.

One connection exists per unordered node pair.  Connections do not store
which nodes they join: slot ``k`` belongs to the ``k``-th pair ``(i, j)`` with
``i < j`` when the node list is walked row by row, which is the order
``numpy.triu_indices(n, k=1)`` produces.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

import numpy as np

from .mapping import distance, remap, segment_rotation

if TYPE_CHECKING:
    from ..simulation.config import GardenConfig


LINE_DEPTH = 1.0


def pair_count(n: int) -> int:
    """Number of unordered pairs among *n* nodes."""
    n = max(n, 0)
    return n * (n - 1) // 2


def slot_index(i: int, j: int, n: int) -> int:
    """Pool slot of the pair ``(i, j)`` among *n* nodes.

    The pair is unordered; ``i`` and ``j`` must differ and lie in
    ``range(n)``.
    """
    if i == j or not (0 <= i < n and 0 <= j < n):
        raise IndexError(f"no pair ({i}, {j}) among {n} nodes")
    if i > j:
        i, j = j, i
    return i * n - i * (i + 1) // 2 + (j - i - 1)


@dataclass
class Connection:
    """Visual state of the line between one pair of nodes."""

    visible: bool = False
    thickness: float = 0.0
    alpha: float = 0.0
    start: np.ndarray = field(default_factory=lambda: np.zeros(2))
    end: np.ndarray = field(default_factory=lambda: np.zeros(2))
    length: float = 0.0
    rotation: float = 0.0

    @property
    def depth(self) -> float:
        return LINE_DEPTH


def form_connection(
    conn: Connection,
    start: np.ndarray,
    end: np.ndarray,
    dist: float,
    config: GardenConfig,
) -> None:
    """Show *conn* between *start* and *end*; closer means thicker and more opaque."""
    conn.visible = True
    conn.thickness = remap(dist, 0.0, config.min_dist,
                           config.stroke_max, config.stroke_min)
    conn.alpha = remap(dist, 0.0, config.min_dist, 1.0, 0.0)
    conn.start = np.array(start, dtype=float)
    conn.end = np.array(end, dtype=float)
    conn.length = distance(conn.start, conn.end)
    conn.rotation = segment_rotation(conn.start, conn.end)


def break_connection(conn: Connection) -> None:
    conn.visible = False


class ConnectionPool:
    """Recycled connection records, sized to the pair count of the node list.

    Growing appends fresh invisible records and shrinking truncates; records
    that survive a resize keep whatever state they had, so callers re-evaluate
    every slot on the next tick.
    """

    def __init__(self) -> None:
        self._slots: list[Connection] = []

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[Connection]:
        return iter(self._slots)

    def __getitem__(self, slot: int) -> Connection:
        return self._slots[slot]

    def resize(self, node_count: int) -> None:
        """Grow or shrink to exactly ``pair_count(node_count)`` slots."""
        target = pair_count(node_count)
        if target < len(self._slots):
            del self._slots[target:]
        else:
            self._slots.extend(
                Connection() for _ in range(target - len(self._slots))
            )

    def rebuild(self, node_count: int) -> None:
        """Discard every record and allocate fresh ones for *node_count* nodes."""
        self._slots = [Connection() for _ in range(pair_count(node_count))]

    def hide_all(self) -> None:
        for conn in self._slots:
            break_connection(conn)

    def visible_count(self) -> int:
        return sum(1 for conn in self._slots if conn.visible)

"""Remote peers demo.

Simulates a handful of peers, each reporting its position under its own id
every few ticks.  Reports go through ``update_node_position``: the first
reports take over anonymous nodes, later peers append new nodes once none
are left.  One peer drops out halfway, and now and then a peer pings.
Saves a before/after figure.
"""

from __future__ import annotations

import logging
import math

import matplotlib.pyplot as plt

from ..simulation.engine import SimulationEngine
from ..visualization.renderer import GardenRenderer

logger = logging.getLogger(__name__)

WIDTH, HEIGHT = 900.0, 900.0


def peer_position(peer_id: int, t: float) -> tuple[float, float]:
    """Each peer circles the centre on its own orbit."""
    radius = 120.0 + 45.0 * (peer_id % 6)
    angle = 0.4 * t + peer_id
    return (WIDTH / 2 + radius * math.cos(angle),
            HEIGHT / 2 + radius * math.sin(angle))


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)

    engine = SimulationEngine(WIDTH, HEIGHT)
    engine.set_node_count(5)  # primary + 4 anonymous nodes
    peers = [101, 102, 103, 104, 105, 106, 107]

    renderer = GardenRenderer(engine)
    fig, axes = plt.subplots(1, 2, figsize=(16, 8))

    dt = 1.0 / 30.0
    for tick in range(600):
        t = tick * dt
        if tick % 10 == 0:
            for peer_id in peers:
                engine.update_node_position(peer_id, *peer_position(peer_id, t))
        if tick % 90 == 45:
            engine.ping(peers[(tick // 90) % len(peers)])
        if tick == 300:
            renderer.render_snapshot(ax=axes[0], title=f"Tick {tick}")
            engine.remove_node(peers.pop())
        engine.advance(t, dt)

    renderer.render_snapshot(ax=axes[1], title=f"Tick {engine.tick_count}")
    logger.info("%d nodes, %d connections (%d visible)", engine.node_count,
                engine.connection_count, engine.connections.visible_count())
    plt.tight_layout()
    plt.savefig("remote_peers_demo.png", dpi=120)
    plt.show()


if __name__ == "__main__":
    main()

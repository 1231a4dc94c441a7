"""Interactive garden demo.

Opens a matplotlib window with 25 wandering nodes.  Drag the coloured
primary node with the mouse and watch lines form as it passes its
neighbours.

Run with:
    python -m node_garden.examples.garden_demo
"""

from __future__ import annotations

import logging

import matplotlib.pyplot as plt

from ..simulation.engine import SimulationEngine
from ..simulation.input import InputController
from ..visualization.renderer import GardenRenderer


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    engine = SimulationEngine(1000, 800)
    engine.set_node_count(25)
    controller = InputController(engine)

    renderer = GardenRenderer(engine, controller)
    anim = renderer.animate(interval_ms=33)  # noqa: F841  (keep a reference)
    plt.show()


if __name__ == "__main__":
    main()

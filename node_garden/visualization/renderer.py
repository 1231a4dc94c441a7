"""Matplotlib-based 2D rendering of a node garden."""

from __future__ import annotations

from typing import Any

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.lines import Line2D
from matplotlib.patches import Circle

from ..simulation.engine import SimulationEngine
from ..simulation.input import InputController
from ..simulation.snapshot import Snapshot
from .sprites import Sprite, build_sprites

BACKGROUND = (0.1, 0.1, 0.1)


class GardenRenderer:
    """Draws garden snapshots and runs an interactive animation.

    Sprites are turned into matplotlib artists: ellipse and ring sprites
    become filled and unfilled circles, line sprites become segments from
    their origin to :meth:`Sprite.axis_end`.  Lower depth draws on top.
    """

    def __init__(
        self,
        engine: SimulationEngine,
        controller: InputController | None = None,
    ) -> None:
        self.engine = engine
        self.controller = controller
        self._artists: list[Any] = []

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _prepare_axes(self, ax: Any, width: float, height: float) -> None:
        ax.set_facecolor(BACKGROUND)
        ax.set_xlim(0, width)
        ax.set_ylim(height, 0)  # surface y grows downward
        ax.set_aspect("equal")
        ax.set_xticks([])
        ax.set_yticks([])

    @staticmethod
    def _artist(sprite: Sprite) -> Any:
        zorder = 2.0 - sprite.depth
        if sprite.shape == "line":
            x0, y0 = sprite.rect[0], sprite.rect[1]
            x1, y1 = sprite.axis_end()
            return Line2D([x0, x1], [y0, y1], color=sprite.color[:3],
                          alpha=sprite.color[3], linewidth=sprite.rect[2],
                          solid_capstyle="round", zorder=zorder)
        if sprite.shape == "ring":
            return Circle(sprite.center, radius=sprite.rect[2] / 2, fill=False,
                          edgecolor=sprite.color[:3], alpha=sprite.color[3],
                          linewidth=sprite.stroke, zorder=zorder)
        return Circle(sprite.center, radius=sprite.rect[2] / 2,
                      facecolor=sprite.color[:3], alpha=sprite.color[3],
                      edgecolor="none", zorder=zorder)

    def _add_sprites(self, ax: Any, snap: Snapshot) -> list[Any]:
        artists = []
        for sprite in build_sprites(snap):
            artist = self._artist(sprite)
            if isinstance(artist, Line2D):
                ax.add_line(artist)
            else:
                ax.add_patch(artist)
            artists.append(artist)
        return artists

    def draw(self, ax: Any, snapshot: Snapshot | None = None) -> list[Any]:
        """Replace the artists from the previous :meth:`draw` with *snapshot*'s sprites."""
        snap = snapshot if snapshot is not None else self.engine.snapshot()
        for artist in self._artists:
            artist.remove()
        self._artists = self._add_sprites(ax, snap)
        return self._artists

    def render_snapshot(
        self,
        snapshot: Snapshot | None = None,
        *,
        title: str = "Node Garden",
        ax: Any = None,
    ) -> Any:
        """Draw a single snapshot (the engine's current one by default)."""
        if ax is None:
            _fig, ax = plt.subplots(1, 1, figsize=(8, 8))
        snap = snapshot if snapshot is not None else self.engine.snapshot()
        self._prepare_axes(ax, snap.width, snap.height)
        self._add_sprites(ax, snap)
        ax.set_title(title)
        return ax

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------

    def connect_input(self, fig: Any) -> list[int]:
        """Forward mouse press/drag/release on *fig* to the input controller."""
        controller = self.controller
        if controller is None:
            return []

        def on_press(event: Any) -> None:
            if event.inaxes is not None and event.xdata is not None:
                controller.press(event.xdata, event.ydata)

        def on_move(event: Any) -> None:
            if event.inaxes is not None and event.xdata is not None:
                controller.move(event.xdata, event.ydata)

        def on_release(_event: Any) -> None:
            controller.release()

        canvas = fig.canvas
        return [
            canvas.mpl_connect("button_press_event", on_press),
            canvas.mpl_connect("motion_notify_event", on_move),
            canvas.mpl_connect("button_release_event", on_release),
        ]

    # ------------------------------------------------------------------
    # Animation
    # ------------------------------------------------------------------

    def animate(
        self,
        *,
        frames: int | None = None,
        interval_ms: int = 33,
        title: str = "Node Garden",
    ) -> FuncAnimation:
        """Animate the garden, one engine tick per frame.

        With ``frames=None`` the animation runs until the window closes.
        """
        fig, ax = plt.subplots(1, 1, figsize=(8, 8))
        fig.patch.set_facecolor(BACKGROUND)
        self._prepare_axes(ax, self.engine.width, self.engine.height)
        title_obj = ax.set_title(f"{title}: tick 0", color="#e8eaed")
        self.connect_input(fig)
        dt = interval_ms / 1000.0

        def update(_frame: int) -> Any:
            snap = self.engine.advance(self.engine.total_time + dt, dt)
            artists = self.draw(ax, snap)
            title_obj.set_text(
                f"{title}: tick {snap.tick}, {len(snap.nodes)} nodes, "
                f"{len(snap.visible_connections)} lines"
            )
            return (*artists, title_obj)

        return FuncAnimation(fig, update, frames=frames,
                             interval=interval_ms, blit=False,
                             cache_frame_data=False)

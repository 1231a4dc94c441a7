"""Interactive Dash UI for the node garden.

Run with:
    python -m node_garden.visualization.dash_app

Opens at http://127.0.0.1:8050
"""

from __future__ import annotations

from typing import Any

import plotly.graph_objects as go

import dash
from dash import dcc, html, ctx, dash_table, Input, Output, State, no_update

from node_garden.core.node import NodeKind
from node_garden.simulation.engine import SimulationEngine
from node_garden.simulation.snapshot import Snapshot
from node_garden.visualization.sprites import Sprite, build_sprites

# ═══════════════════════════════════════════════════════════════════════
#  Dark plotly theme
# ═══════════════════════════════════════════════════════════════════════

_LAYOUT_DEFAULTS = dict(
    template="plotly_dark",
    paper_bgcolor="#1a1a1a",
    plot_bgcolor="#1a1a1a",
    font=dict(family="Inter, -apple-system, sans-serif", color="#e8eaed"),
    margin=dict(l=20, r=20, t=50, b=20),
    height=700,
    uirevision="stable",
)

SURFACE_WIDTH = 800.0
SURFACE_HEIGHT = 800.0
TICK_MS = 50
DEFAULT_NODE_COUNT = 20


# ═══════════════════════════════════════════════════════════════════════
#  Engine
# ═══════════════════════════════════════════════════════════════════════

_engine: SimulationEngine | None = None


def _get_or_create_engine(node_count: int = DEFAULT_NODE_COUNT) -> SimulationEngine:
    global _engine
    if _engine is None:
        _engine = SimulationEngine(SURFACE_WIDTH, SURFACE_HEIGHT)
        _engine.set_node_count(node_count)
    return _engine


# ═══════════════════════════════════════════════════════════════════════
#  Figures
# ═══════════════════════════════════════════════════════════════════════


def _rgba(color: tuple[float, float, float, float]) -> str:
    r, g, b, a = color
    return f"rgba({int(r * 255)},{int(g * 255)},{int(b * 255)},{a:.3f})"


def _sprite_shape(sprite: Sprite) -> dict[str, Any]:
    if sprite.shape == "line":
        x1, y1 = sprite.axis_end()
        return dict(
            type="line", xref="x", yref="y",
            x0=sprite.rect[0], y0=sprite.rect[1], x1=x1, y1=y1,
            line=dict(color=_rgba(sprite.color), width=sprite.rect[2]),
        )
    left, top, w, h = sprite.rect
    if sprite.shape == "ring":
        return dict(
            type="circle", xref="x", yref="y",
            x0=left, y0=top, x1=left + w, y1=top + h,
            fillcolor="rgba(0,0,0,0)",
            line=dict(color=_rgba(sprite.color), width=sprite.stroke),
        )
    return dict(
        type="circle", xref="x", yref="y",
        x0=left, y0=top, x1=left + w, y1=top + h,
        fillcolor=_rgba(sprite.color), line=dict(width=0),
    )


def _garden_figure(snap: Snapshot) -> go.Figure:
    fig = go.Figure()

    hover_text = [
        f"<b>Node {v.id if v.id != -1 else '(anonymous)'}</b><br>"
        f"Kind: {v.kind.value}<br>"
        f"Position: ({v.x:.1f}, {v.y:.1f})<br>"
        f"Connectedness: <b>{v.normalized_connectedness:.3f}</b>"
        for v in snap.nodes
    ]
    fig.add_trace(
        go.Scatter(
            x=[v.x for v in snap.nodes],
            y=[v.y for v in snap.nodes],
            customdata=[v.id for v in snap.nodes],
            mode="markers",
            marker=dict(size=6, color="rgba(0,0,0,0)"),
            text=hover_text,
            hoverinfo="text",
            showlegend=False,
        )
    )

    fig.update_layout(
        title=dict(
            text=(f"Tick {snap.tick}: {len(snap.nodes)} nodes, "
                  f"{len(snap.visible_connections)} lines"),
            font=dict(size=16),
        ),
        shapes=[_sprite_shape(s) for s in build_sprites(snap)],
        xaxis=dict(range=[0, snap.width], showgrid=False, zeroline=False,
                   visible=False, scaleanchor="y", constrain="domain"),
        yaxis=dict(range=[snap.height, 0], showgrid=False, zeroline=False,
                   visible=False, constrain="domain"),
        **_LAYOUT_DEFAULTS,
    )
    return fig


def _node_table(snap: Snapshot) -> list[dict[str, Any]]:
    return [
        {
            "id": v.id,
            "kind": v.kind.value,
            "x": round(v.x, 1),
            "y": round(v.y, 1),
            "size": round(v.size, 1),
            "connectedness": round(v.normalized_connectedness, 3),
        }
        for v in snap.nodes
    ]


# ═══════════════════════════════════════════════════════════════════════
#  Dash app + layout
# ═══════════════════════════════════════════════════════════════════════

app = dash.Dash(__name__, title="Node Garden")

_SIDEBAR_STYLE = {
    "width": "280px", "padding": "20px", "background": "#111",
    "color": "#e8eaed", "position": "fixed", "top": 0, "bottom": 0,
    "overflowY": "auto",
}

app.layout = html.Div([
    # ── Sidebar ──────────────────────────────────────────────────────
    html.Div([
        html.H2("Node Garden"),

        html.Label("Nodes"),
        dcc.Slider(id="node-count-slider", min=1, max=60, step=1,
                   value=DEFAULT_NODE_COUNT,
                   marks={1: "1", 20: "20", 40: "40", 60: "60"}),

        html.Button("Add Node", id="btn-add", n_clicks=0),
        html.Button("Ping", id="btn-ping", n_clicks=0,
                    style={"marginLeft": "8px"}),
        html.Div([
            dcc.Input(id="remove-id", type="number", placeholder="node id"),
            html.Button("Remove", id="btn-remove", n_clicks=0),
        ], style={"marginTop": "12px"}),

        html.Button("Pause", id="btn-pause", n_clicks=0,
                    style={"marginTop": "12px"}),
        html.Div(id="status", style={"marginTop": "12px", "color": "#9aa0a6"}),
    ], style=_SIDEBAR_STYLE),

    # ── Main area ────────────────────────────────────────────────────
    html.Div([
        dcc.Graph(id="garden-graph", config={"displayModeBar": False}),
        dash_table.DataTable(
            id="node-table",
            columns=[{"name": c, "id": c} for c in
                     ("id", "kind", "x", "y", "size", "connectedness")],
            page_size=15,
            style_header={"backgroundColor": "#222", "color": "#e8eaed"},
            style_cell={"backgroundColor": "#1a1a1a", "color": "#e8eaed"},
        ),
        dcc.Interval(id="tick-interval", interval=TICK_MS, n_intervals=0),
    ], style={"marginLeft": "320px", "padding": "20px"}),
])


# ═══════════════════════════════════════════════════════════════════════
#  Callbacks
# ═══════════════════════════════════════════════════════════════════════

# ── CB1: Tick / structural changes -> figure ────────────────────────

@app.callback(
    Output("garden-graph", "figure"),
    Output("node-table", "data"),
    Output("status", "children"),
    Input("tick-interval", "n_intervals"),
    Input("node-count-slider", "value"),
    Input("btn-add", "n_clicks"),
    Input("btn-remove", "n_clicks"),
    Input("btn-ping", "n_clicks"),
    State("remove-id", "value"),
)
def garden_update(n_intervals, node_count, add_clicks, remove_clicks,
                  ping_clicks, remove_id):
    engine = _get_or_create_engine(node_count or DEFAULT_NODE_COUNT)
    triggered = ctx.triggered_id
    status = no_update

    if triggered == "node-count-slider":
        engine.set_node_count(node_count or 0)
        status = f"Rebuilt with {engine.node_count} nodes"
    elif triggered == "btn-add":
        pos = engine.rng.uniform((0.0, 0.0), (engine.width, engine.height))
        new_id = engine.add_node(float(pos[0]), float(pos[1]))
        status = f"Added node {new_id}"
    elif triggered == "btn-remove":
        if remove_id is None:
            status = "Enter a node id to remove"
        elif engine.remove_node(int(remove_id)):
            status = f"Removed node {int(remove_id)}"
        else:
            status = f"Node {int(remove_id)} cannot be removed"
    elif triggered == "btn-ping":
        status = "Pinged" if engine.ping() else "No primary node to ping"

    dt = TICK_MS / 1000.0
    snap = engine.advance(engine.total_time + dt, dt)
    return _garden_figure(snap), _node_table(snap), status


# ── CB2: Pause toggle ───────────────────────────────────────────────

@app.callback(
    Output("tick-interval", "disabled"),
    Output("btn-pause", "children"),
    Input("btn-pause", "n_clicks"),
)
def toggle_pause(n_clicks):
    paused = bool(n_clicks and n_clicks % 2 == 1)
    return paused, ("Resume" if paused else "Pause")


# ── CB3: Click a node to pick it for removal ────────────────────────

@app.callback(
    Output("remove-id", "value"),
    Input("garden-graph", "clickData"),
    prevent_initial_call=True,
)
def pick_node(click_data):
    if not click_data or not click_data.get("points"):
        return no_update
    node_id = click_data["points"][0].get("customdata")
    engine = _get_or_create_engine()
    node = engine.find_node(node_id) if node_id is not None else None
    if node is None or node.kind is NodeKind.PRIMARY:
        return no_update
    return node_id


if __name__ == "__main__":
    app.run(debug=False)

"""Tests for the simulation engine."""

from __future__ import annotations

import math

import numpy as np
import pytest

from node_garden.core.connection import pair_count, slot_index
from node_garden.core.node import UNASSIGNED_ID, NodeKind
from node_garden.simulation.config import GardenConfig
from node_garden.simulation.engine import SimulationEngine


# ── Helpers ──────────────────────────────────────────────────────────

def _make_engine(n: int = 0, *, seed: int = 0, width: float = 1000.0,
                 height: float = 1000.0, **config) -> SimulationEngine:
    config.setdefault("wander_probability", 0.0)
    engine = SimulationEngine(width, height, GardenConfig(**config),
                              rng=np.random.default_rng(seed))
    if n:
        engine.set_node_count(n)
    return engine


def _place(engine: SimulationEngine, points: list[tuple[float, float]]) -> None:
    """Pin every node at the given point (position and target)."""
    for node, p in zip(engine.nodes, points):
        node.position = np.array(p, dtype=float)
        node.target = np.array(p, dtype=float)


def _ids(engine: SimulationEngine) -> list[int]:
    return [node.id for node in engine.nodes if node.id != UNASSIGNED_ID]


# ── Node count ───────────────────────────────────────────────────────

class TestSetNodeCount:
    @pytest.mark.parametrize("n", [0, 1, 2, 3, 7, 20])
    def test_pool_size(self, n):
        engine = _make_engine(n)
        assert engine.node_count == n
        assert engine.connection_count == n * (n - 1) // 2

    def test_negative_count_is_empty(self):
        engine = _make_engine()
        engine.set_node_count(-4)
        assert engine.node_count == 0
        assert engine.connection_count == 0

    def test_slot_zero_is_primary(self):
        engine = _make_engine(5)
        assert engine.nodes[0].kind is NodeKind.PRIMARY
        assert engine.nodes[0].id != UNASSIGNED_ID
        assert all(node.is_anonymous for node in engine.nodes[1:])

    def test_nodes_start_inside_bounds(self):
        engine = _make_engine(30, width=600, height=400)
        for node in engine.nodes:
            assert 50 <= node.position[0] <= 550
            assert 50 <= node.position[1] <= 350

    def test_preserve_keeps_primary(self):
        engine = _make_engine(4)
        primary = engine.primary_node
        engine.set_node_count(9)
        assert engine.primary_node is primary
        assert engine.connection_count == 36

    def test_replace_creates_new_primary(self):
        engine = _make_engine(4, primary_mode="replace")
        old_id = engine.primary_node.id
        engine.set_node_count(4)
        assert engine.primary_node.id != old_id
        assert sum(1 for node in engine.nodes if node.is_primary) == 1

    def test_connections_start_hidden(self):
        engine = _make_engine(6)
        assert all(not conn.visible for conn in engine.connections)

    def test_create_primary_node(self):
        engine = _make_engine(6)
        pos = engine.create_primary_node()
        assert engine.node_count == 1
        assert engine.connection_count == 0
        assert pos == engine.get_primary_node_position()


# ── Advance ──────────────────────────────────────────────────────────

class TestAdvance:
    def test_three_node_scenario(self):
        """(0,1) at 100 and (1,2) at 200 connect; (0,2) at 300 does not."""
        engine = _make_engine(3)
        _place(engine, [(100, 500), (200, 500), (400, 500)])
        snap = engine.advance(1.0, 1.0 / 30)

        assert engine.connections[slot_index(0, 1, 3)].visible
        assert engine.connections[slot_index(1, 2, 3)].visible
        assert not engine.connections[slot_index(0, 2, 3)].visible
        assert len(snap.visible_connections) == 2

    def test_connection_values(self):
        engine = _make_engine(3)
        _place(engine, [(100, 500), (200, 500), (400, 500)])
        engine.advance(1.0, 1.0 / 30)
        near = engine.connections[slot_index(0, 1, 3)]
        far = engine.connections[slot_index(1, 2, 3)]
        assert math.isclose(near.thickness, 5.0)
        assert math.isclose(near.alpha, 0.6)
        assert math.isclose(far.thickness, 3.0)
        assert math.isclose(far.alpha, 0.2)
        assert np.allclose(near.start, [100, 500])
        assert np.allclose(near.end, [200, 500])

    def test_connectedness_accumulates_on_both_nodes(self):
        engine = _make_engine(3)
        _place(engine, [(100, 500), (200, 500), (400, 500)])
        engine.advance(1.0, 1.0 / 30)
        c = [node.connectedness for node in engine.nodes]
        assert np.allclose(c, [0.6, 0.8, 0.2])
        # Nodes 0 and 1 set new maxima; node 2 is measured against 0.8.
        assert engine.nodes[1].normalized_connectedness == 1.0
        assert math.isclose(engine.nodes[2].normalized_connectedness,
                            0.2 / (0.8 - 1e-5), rel_tol=1e-9)

    def test_distant_pairs_are_hidden(self):
        engine = _make_engine(8, seed=4)
        for _ in range(5):
            engine.advance(engine.total_time + 0.1, 0.1)
            n = engine.node_count
            for i in range(n):
                for j in range(i + 1, n):
                    d = float(np.linalg.norm(engine.nodes[i].position
                                             - engine.nodes[j].position))
                    conn = engine.connections[slot_index(i, j, n)]
                    assert conn.visible == (d < engine.config.min_dist)

    def test_thickness_and_alpha_decrease_with_distance(self):
        cfg = GardenConfig()
        thickness, alpha = [], []
        for d in (1.0, 40.0, 100.0, 180.0, 249.0):
            engine = _make_engine(2)
            _place(engine, [(300, 300), (300 + d, 300)])
            engine.advance(1.0, 0.0)
            conn = engine.connections[0]
            assert conn.visible
            assert cfg.stroke_min <= conn.thickness <= cfg.stroke_max
            assert 0.0 <= conn.alpha <= 1.0
            thickness.append(conn.thickness)
            alpha.append(conn.alpha)
        assert all(a > b for a, b in zip(thickness, thickness[1:]))
        assert all(a > b for a, b in zip(alpha, alpha[1:]))

    def test_normalized_connectedness_in_unit_range(self):
        engine = _make_engine(30, seed=7, width=400, height=400,
                              wander_probability=0.05)
        for _ in range(60):
            snap = engine.advance(engine.total_time + 0.05, 0.05)
            for view in snap.nodes:
                assert 0.0 <= view.normalized_connectedness <= 1.0
                assert 20.0 <= view.size <= 50.0

    def test_anonymous_nodes_move_toward_target(self):
        engine = _make_engine(2)
        node = engine.nodes[1]
        node.position = np.array([100.0, 100.0])
        node.target = np.array([500.0, 500.0])
        engine.advance(1.0, 0.5)
        assert np.allclose(node.position, [220.0, 220.0])

    def test_long_ticks_keep_nodes_on_the_surface(self):
        engine = _make_engine(2)
        node = engine.nodes[1]
        node.position = np.array([100.0, 100.0])
        node.target = np.array([500.0, 500.0])
        for k in range(3):
            engine.advance(5.0 * (k + 1), 5.0)
            assert np.all(node.position >= 100.0)
            assert np.all(node.position <= 500.0)
        assert np.allclose(node.position, [500.0, 500.0])

    def test_primary_does_not_move_on_its_own(self):
        engine = _make_engine(3, wander_probability=1.0)
        before = engine.get_primary_node_position()
        engine.primary_node.target = np.array([10.0, 10.0])
        engine.run(20)
        assert engine.get_primary_node_position() == before

    def test_negative_delta_time_does_not_move(self):
        engine = _make_engine(3)
        positions = [node.position.copy() for node in engine.nodes]
        engine.advance(0.0, -1.0)
        for node, pos in zip(engine.nodes, positions):
            assert np.allclose(node.position, pos)

    def test_empty_and_single_node(self):
        engine = _make_engine()
        snap = engine.advance(0.1, 0.1)
        assert snap.nodes == () and snap.connections == ()
        engine.set_node_count(1)
        snap = engine.advance(0.2, 0.1)
        assert len(snap.nodes) == 1 and snap.connections == ()
        assert snap.nodes[0].size == 20.0

    def test_tick_and_time_bookkeeping(self):
        engine = _make_engine(3)
        snap = engine.run(10, delta_time=0.1)
        assert snap.tick == 10
        assert math.isclose(snap.total_time, 1.0)


class TestRunningMaximum:
    def test_starts_at_floor(self):
        engine = _make_engine()
        assert engine.max_connectedness == 0.1

    def test_rises_then_decays_to_floor(self):
        engine = _make_engine(3, connectedness_decay=0.05)
        _place(engine, [(100, 100), (110, 100), (120, 100)])
        engine.advance(1.0, 0.0)
        peak = engine.max_connectedness
        assert peak > 1.0

        _place(engine, [(100, 100), (500, 100), (900, 100)])
        engine.advance(2.0, 0.0)
        assert engine.max_connectedness < peak
        for _ in range(50):
            engine.advance(engine.total_time + 1.0, 0.0)
        assert engine.max_connectedness == 0.1

    def test_reported_in_snapshot(self):
        engine = _make_engine(3)
        snap = engine.advance(1.0, 0.1)
        assert snap.max_connectedness == engine.max_connectedness

    def test_engines_do_not_share_maximum(self):
        crowded = _make_engine(3)
        _place(crowded, [(100, 100), (101, 100), (102, 100)])
        crowded.advance(1.0, 0.0)
        other = _make_engine(3)
        assert other.max_connectedness == 0.1
        assert crowded.max_connectedness > 1.0


# ── Add / remove ─────────────────────────────────────────────────────

class TestAddRemove:
    def test_add_to_empty_garden(self):
        engine = _make_engine()
        nid = engine.add_node(10, 10)
        assert nid != UNASSIGNED_ID
        assert engine.node_count == 1
        assert engine.connection_count == 0
        assert np.allclose(engine.find_node(nid).position, [10, 10])

    def test_add_grows_pool(self):
        engine = _make_engine(4)
        engine.add_node(10, 10)
        assert engine.connection_count == pair_count(5)

    def test_add_then_remove_restores_counts(self):
        engine = _make_engine(6)
        nid = engine.add_node(300, 300)
        assert engine.remove_node(nid)
        assert engine.node_count == 6
        assert engine.connection_count == 15
        assert engine.find_node(nid) is None

    def test_ids_are_unique(self):
        engine = _make_engine(2)
        ids = [engine.add_node(i * 10.0, 0.0) for i in range(20)]
        assert len(set(ids)) == 20
        assert engine.primary_node.id not in ids

    def test_primary_cannot_be_removed(self):
        engine = _make_engine(4)
        pid = engine.primary_node.id
        assert not engine.remove_node(pid)
        assert engine.node_count == 4
        assert engine.primary_node.id == pid

    def test_primary_protected_even_when_not_in_slot_zero(self):
        engine = _make_engine(3)
        engine.nodes.reverse()
        assert not engine.remove_node(engine.primary_node.id)
        assert engine.node_count == 3

    def test_unknown_id_is_noop(self):
        engine = _make_engine(4)
        assert not engine.remove_node(12345)
        assert engine.node_count == 4

    def test_unassigned_id_is_noop(self):
        engine = _make_engine(4)
        assert not engine.remove_node(UNASSIGNED_ID)
        assert engine.node_count == 4

    def test_removal_hides_connections_until_next_tick(self):
        engine = _make_engine(4)
        _place(engine, [(100, 100), (120, 100), (140, 100), (160, 100)])
        engine.advance(1.0, 0.0)
        nid = engine.add_node(130, 110)
        engine.advance(2.0, 0.0)
        engine.remove_node(nid)
        assert engine.connections.visible_count() == 0
        engine.advance(3.0, 0.0)
        assert engine.connections.visible_count() == 6

    def test_removal_keeps_other_nodes(self):
        engine = _make_engine(1)
        a = engine.add_node(100, 100)
        b = engine.add_node(200, 200)
        c = engine.add_node(300, 300)
        engine.remove_node(a)
        assert sorted(_ids(engine)) == sorted([engine.primary_node.id, b, c])


# ── Upsert ───────────────────────────────────────────────────────────

class TestUpdateNodePosition:
    def test_adopts_anonymous_slot(self):
        engine = _make_engine(3)
        engine.update_node_position(500, 40, 60)
        assert engine.node_count == 3
        matches = [node for node in engine.nodes if node.id == 500]
        assert len(matches) == 1
        assert np.allclose(matches[0].target, [40, 60])
        assert not matches[0].is_primary

    def test_updates_existing(self):
        engine = _make_engine(3)
        engine.update_node_position(500, 40, 60)
        engine.update_node_position(500, 70, 80)
        assert engine.node_count == 3
        assert np.allclose(engine.find_node(500).target, [70, 80])

    def test_appends_when_no_anonymous_slot(self):
        engine = _make_engine(3)
        engine.update_node_position(500, 1, 1)
        engine.update_node_position(501, 2, 2)
        engine.update_node_position(502, 3, 3)
        assert engine.node_count == 4
        assert engine.connection_count == 6
        node = engine.find_node(502)
        assert np.allclose(node.position, [3, 3])
        assert np.allclose(node.target, [3, 3])

    def test_on_empty_garden(self):
        engine = _make_engine()
        engine.update_node_position(9, 5, 5)
        assert engine.node_count == 1
        assert engine.find_node(9) is not None

    def test_node_count_never_decreases(self):
        engine = _make_engine(5, seed=2)
        count = engine.node_count
        rng = np.random.default_rng(9)
        for nid in rng.integers(100, 120, size=40).tolist():
            engine.update_node_position(nid, 10.0, 20.0)
            assert engine.node_count >= count
            count = engine.node_count
            assert sum(1 for node in engine.nodes if node.id == nid) == 1

    def test_primary_is_never_touched(self):
        engine = _make_engine(3)
        primary = engine.primary_node
        before = primary.target.copy()
        engine.update_node_position(primary.id, 1, 1)
        assert np.allclose(primary.target, before)
        assert engine.node_count == 3
        assert sum(1 for node in engine.nodes if node.id == primary.id) == 1

    def test_unassigned_id_is_ignored(self):
        engine = _make_engine(3)
        engine.update_node_position(UNASSIGNED_ID, 1, 1)
        assert _ids(engine) == [engine.primary_node.id]

    def test_generated_ids_skip_external_ids(self):
        engine = _make_engine(2)
        engine.update_node_position(40, 1, 1)
        nid = engine.add_node(5, 5)
        assert nid > 40
        assert len(set(_ids(engine))) == len(_ids(engine))

    def test_adopted_node_stops_wandering(self):
        engine = _make_engine(2, wander_probability=1.0)
        engine.update_node_position(77, 300, 300)
        engine.run(5)
        assert np.allclose(engine.find_node(77).target, [300, 300])


class TestSurface:
    def test_resize_keeps_positions(self):
        engine = _make_engine(5)
        positions = [node.position.copy() for node in engine.nodes]
        engine.resize_surface(200, 100)
        assert (engine.width, engine.height) == (200.0, 100.0)
        for node, pos in zip(engine.nodes, positions):
            assert np.allclose(node.position, pos)

    def test_primary_position_when_empty(self):
        assert _make_engine().get_primary_node_position() is None


class TestPing:
    def test_ping_primary_by_default(self):
        engine = _make_engine(3)
        assert engine.ping()
        primary = engine.primary_node
        assert len(primary.ripples) == 1
        assert primary.ripples[0].color == primary.color

    def test_ping_by_id(self):
        engine = _make_engine(2)
        engine.update_node_position(42, 300, 300)
        assert engine.ping(42)
        assert len(engine.find_node(42).ripples) == 1
        assert engine.primary_node.ripples == []

    def test_ping_unknown_node(self):
        engine = _make_engine(2)
        assert not engine.ping(99)
        assert not engine.ping(UNASSIGNED_ID)
        assert not _make_engine().ping()

    def test_ripples_grow_each_tick(self):
        engine = _make_engine(2)
        engine.ping()
        snap = engine.run(4)
        assert snap.nodes[0].ripples[0].radius == 12.0
        assert snap.nodes[1].ripples == ()

    def test_expired_ripples_leave_the_snapshot_and_are_reused(self):
        engine = _make_engine(1)
        engine.ping()
        snap = engine.run(334)
        assert snap.nodes[0].ripples == ()
        engine.ping()
        assert len(engine.primary_node.ripples) == 1

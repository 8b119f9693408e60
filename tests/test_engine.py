"""End-to-end layout tests: engine guarantees and the record-diagram scenarios."""

from __future__ import annotations

import random

import networkx as nx
import pytest

from protodoc_diagram.config import MIN_NODE_HEIGHT, MIN_NODE_WIDTH, LayoutConfig
from protodoc_diagram.ir.graph import NodeData, SchemaGraph, build_graph
from protodoc_diagram.layout import DUMMY_PREFIX, LayoutNode, LayoutResult, SugiyamaLayout, layout
from protodoc_diagram.schema import Record, RecordField
from protodoc_diagram.types import Direction

# ─── Helpers ──────────────────────────────────────────────────────────────────


def _record(name: str, *refs: str) -> Record:
    return Record(
        full_name=f"pkg.{name}",
        long_name=name,
        fields=[RecordField(name=f"f{i}", full_type=f"pkg.{ref}") for i, ref in enumerate(refs)],
    )


def _named(full_name: str, *targets: str) -> Record:
    return Record(full_name=full_name, fields=[RecordField(name=f"f{i}", full_type=t) for i, t in enumerate(targets)])


def _layout(*records: Record, direction: Direction = Direction.TB, config: LayoutConfig | None = None) -> LayoutResult:
    return layout(build_graph(records, config), direction, config)


def _overlaps(a: LayoutNode, b: LayoutNode) -> bool:
    return a.left < b.right and b.left < a.right and a.top < b.bottom and b.top < a.bottom


def _random_records(rng: random.Random, acyclic: bool) -> list[Record]:
    count = rng.randint(1, 14)
    names = [f"M{i}{'x' * rng.randint(0, 8)}" for i in range(count)]
    records = []
    for i, name in enumerate(names):
        candidates = names[i + 1 :] if acyclic else names
        refs = rng.sample(candidates, k=min(len(candidates), rng.randint(0, 3)))
        records.append(_record(name, *refs))
    return records


def _primary(node: LayoutNode, direction: Direction) -> int:
    """Coordinate that grows along the layer direction."""
    return {
        Direction.TB: node.y,
        Direction.BT: -node.y,
        Direction.LR: node.x,
        Direction.RL: -node.x,
    }[direction]


ALL_DIRECTIONS = [Direction.TB, Direction.BT, Direction.LR, Direction.RL]


# ─── Scenarios ────────────────────────────────────────────────────────────────


class TestScenarios:
    def test_unrelated_records_share_one_layer(self):
        result = _layout(_record("A"), _record("B"), _record("C"))
        a, b, c = (result.nodes[f"pkg.{n}"] for n in "ABC")
        assert {a.layer, b.layer, c.layer} == {0}
        assert a.y == b.y == c.y
        assert a.x < b.x < c.x
        assert [a.order, b.order, c.order] == [0, 1, 2]
        assert result.edges == []

    def test_chain_makes_three_layers(self):
        result = _layout(_record("A", "B"), _record("B", "C"), _record("C"))
        a, b, c = (result.nodes[f"pkg.{n}"] for n in "ABC")
        assert [a.layer, b.layer, c.layer] == [0, 1, 2]
        assert a.y < b.y < c.y
        assert [(e.source, e.target) for e in result.edges] == [("pkg.A", "pkg.B"), ("pkg.B", "pkg.C")]
        assert not any(e.reversed for e in result.edges)

    def test_mutual_reference_does_not_crash(self):
        result = _layout(_record("A", "B"), _record("B", "A"))
        a, b = result.nodes["pkg.A"], result.nodes["pkg.B"]
        assert a.layer != b.layer
        assert {(e.source, e.target) for e in result.edges} == {("pkg.A", "pkg.B"), ("pkg.B", "pkg.A")}
        assert [e.reversed for e in result.edges] == [False, True]

    def test_reversed_edge_waypoints_run_source_to_target(self):
        result = _layout(_record("A", "B"), _record("B", "A"))
        a, b = result.nodes["pkg.A"], result.nodes["pkg.B"]
        back = result.edges[1]
        assert (back.source, back.target) == ("pkg.B", "pkg.A")
        assert back.waypoints[0].y == b.top - 1
        assert back.waypoints[-1].y == a.bottom

    def test_self_reference_leaves_other_nodes_alone(self):
        with_loop = _layout(_record("A", "A"), _record("B"))
        without = _layout(_record("A"), _record("B"))
        assert with_loop.nodes == without.nodes
        (loop,) = with_loop.edges
        assert (loop.source, loop.target) == ("pkg.A", "pkg.A")
        assert loop.self_loop
        assert not loop.reversed
        assert loop.waypoints == []

    def test_fan_out(self):
        spokes = [_record(f"R{i}", "Hub") for i in range(1, 10)]
        result = _layout(*spokes, _record("Hub"))
        hub = result.nodes["pkg.Hub"]
        referencing = [result.nodes[f"pkg.R{i}"] for i in range(1, 10)]
        assert all(hub.layer > r.layer for r in referencing)
        assert all(hub.y > r.y for r in referencing)
        assert [r.order for r in referencing] == list(range(9))
        assert [r.x for r in referencing] == sorted(r.x for r in referencing)

    def test_fan_out_is_deterministic(self):
        spokes = [_record(f"R{i}", "Hub") for i in range(1, 10)]
        first = _layout(*spokes, _record("Hub"))
        second = _layout(*spokes, _record("Hub"))
        assert first.to_dict() == second.to_dict()


# ─── Degenerate Input ─────────────────────────────────────────────────────────


class TestDegenerateInput:
    def test_empty_graph(self):
        result = _layout()
        assert result.nodes == {}
        assert result.edges == []
        assert (result.width, result.height) == (0, 0)

    def test_single_node_anchor_is_center(self):
        result = _layout(_record("Solo"))
        node = result.nodes["pkg.Solo"]
        assert (node.left, node.top) == (0, 0)
        assert (node.x, node.y) == (node.width // 2, node.height // 2)

    def test_missing_sizes_fall_back_to_minimum(self):
        g: nx.DiGraph = nx.DiGraph()
        g.add_node("X")
        g.add_node("Y", data=NodeData(id="Y", label="Y", width=0, height=-2))
        result = layout(SchemaGraph(g))
        for node_id in ("X", "Y"):
            assert result.nodes[node_id].width == MIN_NODE_WIDTH
            assert result.nodes[node_id].height == MIN_NODE_HEIGHT
        assert result.nodes["X"].label == "X"

    def test_disconnected_components_packed_side_by_side(self):
        result = _layout(_record("A", "B"), _record("B"), _record("C", "D"), _record("D"))
        a, b, c, d = (result.nodes[f"pkg.{n}"] for n in "ABCD")
        assert a.layer == c.layer == 0
        assert b.layer == d.layer == 1
        assert max(a.right, b.right) < min(c.left, d.left)

    def test_direction_string_accepted(self):
        graph = build_graph([_record("A", "B"), _record("B")])
        result = layout(graph, "lr")
        assert result.direction == Direction.LR
        assert result.nodes["pkg.A"].x < result.nodes["pkg.B"].x

    def test_unknown_direction_string_rejected(self):
        with pytest.raises(ValueError):
            layout(build_graph([_record("A")]), "diagonal")

    def test_config_direction_used_by_default(self):
        config = LayoutConfig(direction=Direction.BT)
        result = SugiyamaLayout(config).layout(build_graph([_record("A", "B"), _record("B")]))
        assert result.direction == Direction.BT
        assert result.nodes["pkg.A"].y > result.nodes["pkg.B"].y

    def test_rank_gap_too_small_rejected(self):
        with pytest.raises(ValueError, match="rank_gap"):
            LayoutConfig(rank_gap=1)

    def test_minimum_rank_gap_routes_forward(self):
        result = _layout(_record("A", "B"), _record("B"), config=LayoutConfig(rank_gap=2))
        a, b = result.nodes["pkg.A"], result.nodes["pkg.B"]
        (edge,) = result.edges
        assert [[p.x, p.y] for p in edge.waypoints] == [[2, a.bottom], [2, b.top - 1]]


# ─── Internal-Looking Record Names ────────────────────────────────────────────


class TestInternalLookingNames:
    def test_record_named_like_a_dummy_keeps_its_layer(self):
        lane = f"{DUMMY_PREFIX}0_0"
        result = layout(build_graph([_named("A", "B", lane), _named("B", lane), _named(lane)]))
        assert [result.nodes[n].layer for n in ("A", "B", lane)] == [0, 1, 2]
        for edge in result.edges:
            assert result.nodes[edge.target].y > result.nodes[edge.source].y

    def test_dummy_named_record_in_other_component_changes_nothing(self):
        lane = f"{DUMMY_PREFIX}0_0"
        plain = "Z" * len(lane)
        chain = [_named("A", "B", "C"), _named("B", "C"), _named("C")]
        with_lane = layout(build_graph([*chain, _named(lane)])).to_dict()
        with_plain = layout(build_graph([*chain, _named(plain)])).to_dict()
        assert with_lane["width"] == with_plain["width"]
        assert with_lane["nodes"][:3] == with_plain["nodes"][:3]
        assert with_lane["edges"] == with_plain["edges"]

    @pytest.mark.parametrize("seed", range(20))
    @pytest.mark.parametrize("direction", ALL_DIRECTIONS)
    def test_guarantees_hold_for_prefixed_names(self, seed, direction):
        rng = random.Random(seed)
        names = [f"{DUMMY_PREFIX}{i}_{rng.randint(0, 2)}" for i in range(rng.randint(2, 10))]
        names = list(dict.fromkeys(names))
        records = []
        for i, name in enumerate(names):
            later = names[i + 1 :]
            records.append(_named(name, *rng.sample(later, k=min(len(later), rng.randint(0, 3)))))
        result = layout(build_graph(records), direction)

        assert list(result.nodes) == names
        nodes = list(result.nodes.values())
        for i, a in enumerate(nodes):
            for b in nodes[i + 1 :]:
                assert not _overlaps(a, b), f"{a.id} overlaps {b.id}"
        for edge in result.edges:
            assert not edge.reversed
            src, tgt = result.nodes[edge.source], result.nodes[edge.target]
            assert _primary(tgt, direction) > _primary(src, direction)


# ─── Geometry ─────────────────────────────────────────────────────────────────


class TestGeometry:
    def test_chain_exact_coordinates(self):
        result = _layout(_record("A", "B"), _record("B"))
        a, b = result.nodes["pkg.A"], result.nodes["pkg.B"]
        assert (a.x, a.y, a.width, a.height) == (2, 1, 5, 3)
        assert (b.x, b.y, b.width, b.height) == (2, 7, 5, 3)
        assert (result.width, result.height) == (5, 9)
        assert a.rect() == (0, 0, 5, 3)
        assert b.rect() == (0, 6, 5, 3)

    def test_layer_nodes_share_primary_coordinate(self):
        result = _layout(_record("Root", "Left", "Right"), _record("Left"), _record("Right"))
        assert result.nodes["pkg.Left"].y == result.nodes["pkg.Right"].y

    def test_long_edge_routed_around_middle_layer(self):
        result = _layout(_record("A", "B", "C"), _record("B", "C"), _record("C"))
        a, b, c = (result.nodes[f"pkg.{n}"] for n in "ABC")
        long_edge = next(e for e in result.edges if (e.source, e.target) == ("pkg.A", "pkg.C"))
        assert long_edge.waypoints[0].y == a.bottom
        assert long_edge.waypoints[-1].y == c.top - 1
        for p in long_edge.waypoints:
            assert not (b.left <= p.x < b.right and b.top <= p.y < b.bottom)

    def test_fixed_size_nodes(self):
        config = LayoutConfig(node_width=20, node_height=2)
        result = _layout(_record("A", "B"), _record("B"), config=config)
        assert {(n.width, n.height) for n in result.nodes.values()} == {(20, 2)}

    @pytest.mark.parametrize("direction", ALL_DIRECTIONS)
    def test_chain_flows_along_direction(self, direction):
        result = _layout(_record("A", "B"), _record("B", "C"), _record("C"), direction=direction)
        a, b, c = (result.nodes[f"pkg.{n}"] for n in "ABC")
        assert _primary(a, direction) < _primary(b, direction) < _primary(c, direction)

    def test_to_dict_shape(self):
        data = _layout(_record("A", "B"), _record("B")).to_dict()
        assert data["direction"] == "TB"
        assert [n["id"] for n in data["nodes"]] == ["pkg.A", "pkg.B"]
        assert data["edges"][0]["source"] == "pkg.A"
        assert data["edges"][0]["waypoints"] == [[2, 3], [2, 5]]


# ─── Properties Over Generated Graphs ─────────────────────────────────────────


SEEDS = range(40)


class TestProperties:
    @pytest.mark.parametrize("seed", SEEDS)
    def test_totality(self, seed):
        records = _random_records(random.Random(seed), acyclic=False)
        result = _layout(*records)
        assert list(result.nodes) == [r.full_name for r in records]

    @pytest.mark.parametrize("seed", SEEDS)
    @pytest.mark.parametrize("direction", ALL_DIRECTIONS)
    def test_no_overlap(self, seed, direction):
        records = _random_records(random.Random(seed), acyclic=False)
        nodes = list(_layout(*records, direction=direction).nodes.values())
        for i, a in enumerate(nodes):
            for b in nodes[i + 1 :]:
                assert not _overlaps(a, b), f"{a.id} overlaps {b.id}"

    @pytest.mark.parametrize("seed", SEEDS)
    @pytest.mark.parametrize("direction", ALL_DIRECTIONS)
    def test_acyclic_edges_point_forward(self, seed, direction):
        records = _random_records(random.Random(seed), acyclic=True)
        result = _layout(*records, direction=direction)
        for edge in result.edges:
            src, tgt = result.nodes[edge.source], result.nodes[edge.target]
            assert not edge.reversed
            assert _primary(tgt, direction) > _primary(src, direction)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_cyclic_edges_consistent_with_reversal(self, seed):
        records = _random_records(random.Random(seed), acyclic=False)
        result = _layout(*records)
        for edge in result.edges:
            if edge.self_loop:
                continue
            src, tgt = result.nodes[edge.source], result.nodes[edge.target]
            if edge.reversed:
                assert tgt.y < src.y
            else:
                assert tgt.y > src.y

    @pytest.mark.parametrize("seed", SEEDS)
    def test_deterministic(self, seed):
        records = _random_records(random.Random(seed), acyclic=False)
        assert _layout(*records).to_dict() == _layout(*records).to_dict()

    @pytest.mark.parametrize("seed", SEEDS)
    def test_waypoints_orthogonal_and_outside_boxes(self, seed):
        records = _random_records(random.Random(seed), acyclic=False)
        result = _layout(*records)
        boxes = list(result.nodes.values())
        for edge in result.edges:
            for p0, p1 in zip(edge.waypoints, edge.waypoints[1:]):
                assert p0.x == p1.x or p0.y == p1.y
            for p in edge.waypoints:
                for n in boxes:
                    assert not (n.left <= p.x < n.right and n.top <= p.y < n.bottom)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_original_edges_preserved(self, seed):
        records = _random_records(random.Random(seed), acyclic=False)
        graph = build_graph(records)
        result = layout(graph)
        assert [(e.source, e.target) for e in result.edges] == graph.edges()

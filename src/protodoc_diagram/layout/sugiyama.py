"""Sugiyama-style layered graph layout engine.

Phases:
  1. Cycle removal (greedy-FAS)
  2. Layer assignment (longest path)
  3. Dummy node insertion
  4. Crossing minimization (barycenter)
  5. Coordinate assignment
  6. Edge routing (orthogonal)
  7. Component packing and direction transform

Phases 1-6 run per weakly connected component in a local frame where the
primary axis ``p`` grows with the layer index and the secondary axis ``s``
runs along a layer. Phase 7 packs the components side by side and maps
(s, p) onto (x, y) for the requested direction.
"""

from __future__ import annotations

import logging
from collections.abc import Container
from dataclasses import dataclass

import networkx as nx

from protodoc_diagram.config import MIN_NODE_HEIGHT, MIN_NODE_WIDTH, LayoutConfig
from protodoc_diagram.ir.graph import NodeData, SchemaGraph
from protodoc_diagram.layout.types import DUMMY_PREFIX, LayoutEdge, LayoutNode, LayoutResult, Point
from protodoc_diagram.types import Direction

logger = logging.getLogger(__name__)

DUMMY_EXTENT: int = 1


# ─── Cycle Removal (Greedy-FAS) ─────────────────────────────────────────────


def greedy_fas_ordering(graph: nx.DiGraph) -> list[str]:
    """Compute a node ordering using the greedy-FAS heuristic.

    Candidates are scanned in graph insertion order, so ties resolve the
    same way on every run.
    """
    active: dict[str, None] = dict.fromkeys(graph.nodes)
    out_deg: dict[str, int] = {}
    in_deg: dict[str, int] = {}
    for node in graph.nodes:
        out_deg[node] = sum(1 for succ in graph.successors(node) if succ != node)
        in_deg[node] = sum(1 for pred in graph.predecessors(node) if pred != node)

    s1: list[str] = []
    s2: list[str] = []

    while active:
        changed = True
        while changed:
            changed = False
            sinks = [n for n in active if out_deg[n] == 0]
            if sinks:
                changed = True
                for sink in sinks:
                    del active[sink]
                    s2.append(sink)
                    for pred in graph.predecessors(sink):
                        if pred in active:
                            out_deg[pred] -= 1

        changed = True
        while changed:
            changed = False
            sources = [n for n in active if in_deg[n] == 0]
            if sources:
                changed = True
                for source in sources:
                    del active[source]
                    s1.append(source)
                    for succ in graph.successors(source):
                        if succ in active:
                            in_deg[succ] -= 1

        if active:
            best = max(active, key=lambda n: out_deg[n] - in_deg[n])
            del active[best]
            s1.append(best)
            for succ in graph.successors(best):
                if succ in active:
                    in_deg[succ] -= 1
            for pred in graph.predecessors(best):
                if pred in active:
                    out_deg[pred] -= 1

    s2.reverse()
    s1.extend(s2)
    return s1


def remove_cycles(graph: nx.DiGraph) -> tuple[nx.DiGraph, set[tuple[str, str]]]:
    """Remove cycles using greedy-FAS. Returns (dag, reversed_edges).

    Self-loops count as reversed and are dropped from the DAG.
    """
    if graph.number_of_nodes() == 0:
        return graph.copy(), set()

    ordering = greedy_fas_ordering(graph)
    position: dict[str, int] = {node: pos for pos, node in enumerate(ordering)}

    reversed_edges: set[tuple[str, str]] = set()
    for src, tgt in graph.edges():
        if src == tgt or position[src] > position[tgt]:
            reversed_edges.add((src, tgt))

    dag: nx.DiGraph = nx.DiGraph()
    for node_id in graph.nodes:
        dag.add_node(node_id, **graph.nodes[node_id])

    for src, tgt in graph.edges():
        if src == tgt:
            continue
        if (src, tgt) in reversed_edges:
            dag.add_edge(tgt, src)
        else:
            dag.add_edge(src, tgt)

    if reversed_edges:
        logger.debug("Reversed %d edge(s) to break cycles: %s", len(reversed_edges), sorted(reversed_edges))
    return dag, reversed_edges


# ─── Layer Assignment ────────────────────────────────────────────────────────


class LayerAssignment:
    def __init__(
        self,
        layers: dict[str, int],
        layer_count: int,
        dag: nx.DiGraph,
        reversed_edges: set[tuple[str, str]],
    ) -> None:
        self.layers = layers
        self.layer_count = layer_count
        self.dag = dag
        self.reversed_edges = reversed_edges

    @classmethod
    def assign(cls, graph: nx.DiGraph) -> LayerAssignment:
        """Longest-path layering: sources on layer 0, every DAG edge goes down."""
        dag, reversed_edges = remove_cycles(graph)
        layers: dict[str, int] = {node_id: 0 for node_id in dag.nodes}

        for node_id in nx.topological_sort(dag):
            for succ in dag.successors(node_id):
                if layers[succ] < layers[node_id] + 1:
                    layers[succ] = layers[node_id] + 1

        layer_count = (max(layers.values()) + 1) if layers else 0
        return cls(layers=layers, layer_count=layer_count, dag=dag, reversed_edges=reversed_edges)


# ─── Dummy Node Insertion ────────────────────────────────────────────────────


@dataclass
class DummyEdge:
    original_src: str
    original_tgt: str
    dummy_ids: list[str]


@dataclass
class AugmentedGraph:
    graph: nx.DiGraph
    layers: dict[str, int]
    layer_count: int
    dummy_edges: dict[tuple[str, str], DummyEdge]


def insert_dummy_nodes(la: LayerAssignment, reserved: Container[str] = ()) -> AugmentedGraph:
    """Insert dummy nodes for edges spanning multiple layers.

    Dummy ids never reuse a node of the graph or any id in ``reserved``.
    """
    dag = la.dag
    g: nx.DiGraph = nx.DiGraph()
    for node_id in dag.nodes:
        g.add_node(node_id, **dag.nodes[node_id])

    layers: dict[str, int] = dict(la.layers)
    dummy_edges: dict[tuple[str, str], DummyEdge] = {}

    for src_id, tgt_id in dag.edges():
        src_layer = layers[src_id]
        span = layers[tgt_id] - src_layer

        if span <= 1:
            g.add_edge(src_id, tgt_id)
            continue

        edge_index = len(dummy_edges)
        dummy_ids: list[str] = []
        chain_prev = src_id
        for i in range(span - 1):
            dummy_id = f"{DUMMY_PREFIX}{edge_index}_{i}"
            while dummy_id in g or dummy_id in reserved:
                dummy_id += "_"
            g.add_node(dummy_id)
            layers[dummy_id] = src_layer + i + 1
            dummy_ids.append(dummy_id)
            g.add_edge(chain_prev, dummy_id)
            chain_prev = dummy_id
        g.add_edge(chain_prev, tgt_id)

        dummy_edges[(src_id, tgt_id)] = DummyEdge(original_src=src_id, original_tgt=tgt_id, dummy_ids=dummy_ids)

    return AugmentedGraph(graph=g, layers=layers, layer_count=la.layer_count, dummy_edges=dummy_edges)


# ─── Crossing Minimization ───────────────────────────────────────────────────


def initial_ordering(aug: AugmentedGraph) -> list[list[str]]:
    """Group nodes by layer, keeping graph insertion order within each layer."""
    ordering: list[list[str]] = [[] for _ in range(aug.layer_count)]
    for node_id in aug.graph.nodes:
        ordering[aug.layers[node_id]].append(node_id)
    return ordering


def minimise_crossings(aug: AugmentedGraph, max_passes: int) -> list[list[str]]:
    """Minimise edge crossings using the barycenter heuristic.

    Alternates down and up sweeps and keeps the best ordering seen. Stops
    after ``max_passes`` or as soon as a pass does not improve.
    """
    ordering = initial_ordering(aug)
    best = [list(layer) for layer in ordering]
    best_crossings = count_crossings(ordering, aug.graph)

    for _pass in range(max_passes):
        if best_crossings == 0:
            break

        for layer_idx in range(1, aug.layer_count):
            prev = {nid: float(i) for i, nid in enumerate(ordering[layer_idx - 1])}
            ordering[layer_idx] = _sort_by_barycenter(ordering[layer_idx], aug.graph, prev, "incoming")

        for layer_idx in range(aug.layer_count - 2, -1, -1):
            nxt = {nid: float(i) for i, nid in enumerate(ordering[layer_idx + 1])}
            ordering[layer_idx] = _sort_by_barycenter(ordering[layer_idx], aug.graph, nxt, "outgoing")

        crossings = count_crossings(ordering, aug.graph)
        if crossings >= best_crossings:
            break
        best = [list(layer) for layer in ordering]
        best_crossings = crossings

    logger.debug("Crossing minimisation finished with %d crossing(s)", best_crossings)
    return best


def _sort_by_barycenter(
    layer: list[str],
    graph: nx.DiGraph,
    neighbor_pos: dict[str, float],
    direction: str,
) -> list[str]:
    # Nodes without neighbours in the reference layer keep their own slot.
    keys: dict[str, float] = {}
    for i, node_id in enumerate(layer):
        bc = _barycenter(node_id, graph, neighbor_pos, direction)
        keys[node_id] = float(i) if bc is None else bc
    return sorted(layer, key=lambda n: keys[n])


def _barycenter(node_id: str, graph: nx.DiGraph, neighbor_pos: dict[str, float], direction: str) -> float | None:
    neighbors = graph.predecessors(node_id) if direction == "incoming" else graph.successors(node_id)
    positions = [neighbor_pos[nb] for nb in neighbors if nb in neighbor_pos]
    if not positions:
        return None
    return sum(positions) / len(positions)


def count_crossings(ordering: list[list[str]], graph: nx.DiGraph) -> int:
    total = 0
    for l_idx in range(len(ordering) - 1):
        tgt_pos: dict[str, int] = {nid: i for i, nid in enumerate(ordering[l_idx + 1])}
        edges: list[tuple[int, int]] = []
        for sp, src_id in enumerate(ordering[l_idx]):
            if src_id in graph:
                for nb in graph.successors(src_id):
                    if nb in tgt_pos:
                        edges.append((sp, tgt_pos[nb]))
        for i in range(len(edges)):
            for j in range(i + 1, len(edges)):
                ei, ej = edges[i], edges[j]
                if (ei[0] < ej[0] and ei[1] > ej[1]) or (ei[0] > ej[0] and ei[1] < ej[1]):
                    total += 1
    return total


# ─── Coordinate Assignment ───────────────────────────────────────────────────


@dataclass
class Placement:
    """A node's box in the local (secondary, primary) frame."""

    id: str
    layer: int
    order: int
    s_left: int
    p_top: int
    s_ext: int
    p_ext: int

    @property
    def s_center(self) -> int:
        return self.s_left + self.s_ext // 2

    @property
    def s_right(self) -> int:
        return self.s_left + self.s_ext

    @property
    def p_bottom(self) -> int:
        return self.p_top + self.p_ext


def assign_coordinates(
    ordering: list[list[str]],
    aug: AugmentedGraph,
    extents: dict[str, tuple[int, int]],
    band: int,
    node_gap: int,
    rank_gap: int,
) -> dict[str, Placement]:
    """Assign local (s, p) boxes to every node, dummies included.

    ``extents`` maps real nodes to (secondary, primary) sizes; ``band`` is
    the primary extent reserved for every layer.
    """
    pitch = band + rank_gap

    def dims(node_id: str) -> tuple[int, int]:
        return extents.get(node_id, (DUMMY_EXTENT, 0))

    layer_widths: list[int] = []
    for layer_nodes in ordering:
        w_sum = sum(dims(nid)[0] for nid in layer_nodes)
        gaps = (len(layer_nodes) - 1) * node_gap if len(layer_nodes) > 1 else 0
        layer_widths.append(w_sum + gaps)
    max_layer_w = max(layer_widths, default=0)

    placements: dict[str, Placement] = {}
    for layer_idx, layer_nodes in enumerate(ordering):
        s = (max_layer_w - layer_widths[layer_idx]) // 2
        for order, node_id in enumerate(layer_nodes):
            s_ext, p_ext = dims(node_id)
            placements[node_id] = Placement(
                id=node_id,
                layer=layer_idx,
                order=order,
                s_left=s,
                p_top=layer_idx * pitch + (band - p_ext) // 2,
                s_ext=s_ext,
                p_ext=p_ext,
            )
            s += s_ext + node_gap

    # Barycenter refinement: nudge whole layers toward their neighbours.
    for layer_idx in range(1, len(ordering)):
        _shift_layer(ordering[layer_idx], placements, aug.graph, "incoming", node_gap)
    for layer_idx in range(len(ordering) - 2, -1, -1):
        _shift_layer(ordering[layer_idx], placements, aug.graph, "outgoing", node_gap)

    if placements:
        min_s = min(pl.s_left for pl in placements.values())
        for pl in placements.values():
            pl.s_left -= min_s

    return placements


def _shift_layer(
    layer_nodes: list[str],
    placements: dict[str, Placement],
    graph: nx.DiGraph,
    direction: str,
    limit: int,
) -> None:
    sum_self = 0
    sum_other = 0
    count = 0
    for node_id in layer_nodes:
        here = placements[node_id].s_center
        neighbors = graph.predecessors(node_id) if direction == "incoming" else graph.successors(node_id)
        for nb in neighbors:
            sum_self += here
            sum_other += placements[nb].s_center
            count += 1
    if count == 0:
        return
    shift = sum_other // count - sum_self // count
    if abs(shift) > limit:
        return
    for node_id in layer_nodes:
        placements[node_id].s_left += shift


# ─── Edge Routing ────────────────────────────────────────────────────────────


def simplify_path(points: list[Point]) -> list[Point]:
    """Drop repeated points and interior points of straight runs."""
    deduped: list[Point] = []
    for p in points:
        if not deduped or deduped[-1] != p:
            deduped.append(p)
    if len(deduped) <= 2:
        return deduped
    result = [deduped[0]]
    for i in range(1, len(deduped) - 1):
        a, b, c = result[-1], deduped[i], deduped[i + 1]
        if (a.x == b.x == c.x) or (a.y == b.y == c.y):
            continue
        result.append(b)
    result.append(deduped[-1])
    return result


def route_edges(
    graph: nx.DiGraph,
    placements: dict[str, Placement],
    aug: AugmentedGraph,
    reversed_edges: set[tuple[str, str]],
    band: int,
    rank_gap: int,
) -> dict[tuple[str, str], list[Point]]:
    """Route every original edge as an orthogonal polyline in the local frame.

    Points are (x=s, y=p). Each polyline leaves the source box, runs through
    the dummy lanes of its chain, bends in the middle of the gap between
    layers and stops on the cell just outside the target box. The returned
    lists always run from the original source to the original target.
    """
    pitch = band + rank_gap
    routes: dict[tuple[str, str], list[Point]] = {}

    for src, tgt in graph.edges():
        if src == tgt:
            routes[(src, tgt)] = []
            continue

        is_reversed = (src, tgt) in reversed_edges
        upper, lower = (tgt, src) if is_reversed else (src, tgt)
        chain = aug.dummy_edges.get((upper, lower))
        hops = [upper, *(chain.dummy_ids if chain else []), lower]

        first = placements[upper]
        last = placements[lower]
        points = [Point(x=first.s_center, y=first.p_bottom)]
        for a, b in zip(hops, hops[1:]):
            pa, pb = placements[a], placements[b]
            bend = pa.layer * pitch + band + rank_gap // 2
            points.append(Point(x=pa.s_center, y=bend))
            points.append(Point(x=pb.s_center, y=bend))
        points.append(Point(x=last.s_center, y=last.p_top - 1))

        path = simplify_path(points)
        if is_reversed:
            path.reverse()
        routes[(src, tgt)] = path

    return routes


# ─── SugiyamaLayout Engine ───────────────────────────────────────────────────


@dataclass
class ComponentLayout:
    placements: dict[str, Placement]
    routes: dict[tuple[str, str], list[Point]]
    reversed_edges: set[tuple[str, str]]
    width: int


class SugiyamaLayout:
    """Sugiyama layered layout engine."""

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def layout(self, graph: SchemaGraph, direction: Direction | None = None) -> LayoutResult:
        direction = direction or self.config.direction
        digraph = graph.digraph
        if digraph.number_of_nodes() == 0:
            return LayoutResult(nodes={}, edges=[], direction=direction)

        extents = {node_id: _extent(digraph, node_id, direction) for node_id in digraph.nodes}
        band = max(p for _, p in extents.values())
        gap = self.config.node_gap

        placements: dict[str, Placement] = {}
        routes: dict[tuple[str, str], list[Point]] = {}
        reversed_edges: set[tuple[str, str]] = set()
        offset = 0
        for component in _components(digraph):
            part = self._layout_component(component, extents, band)
            for pl in part.placements.values():
                pl.s_left += offset
            for path in part.routes.values():
                for point in path:
                    point.x += offset
            placements.update(part.placements)
            routes.update(part.routes)
            reversed_edges |= part.reversed_edges
            offset += part.width + gap

        secondary_total = offset - gap
        primary_total = max(pl.p_bottom for pl in placements.values())

        # Packed components share layers; renumber orders across the whole row.
        by_layer: dict[int, list[Placement]] = {}
        for pl in placements.values():
            by_layer.setdefault(pl.layer, []).append(pl)
        for row in by_layer.values():
            for order, pl in enumerate(sorted(row, key=lambda r: r.s_left)):
                pl.order = order

        nodes: dict[str, LayoutNode] = {}
        for node_id in digraph.nodes:
            pl = placements[node_id]
            data: NodeData | None = digraph.nodes[node_id].get("data")
            left, top, width, height = _to_frame(pl, direction, primary_total)
            nodes[node_id] = LayoutNode(
                id=node_id,
                layer=pl.layer,
                order=pl.order,
                x=left + width // 2,
                y=top + height // 2,
                width=width,
                height=height,
                label=data.label if data is not None else node_id,
            )
        assert len(nodes) == digraph.number_of_nodes(), "layout must place every node"

        edges = [
            LayoutEdge(
                source=src,
                target=tgt,
                reversed=src != tgt and (src, tgt) in reversed_edges,
                self_loop=src == tgt,
                waypoints=[_point_to_frame(p, direction, primary_total) for p in routes[(src, tgt)]],
            )
            for src, tgt in digraph.edges()
        ]

        if direction.is_horizontal():
            width, height = primary_total, secondary_total
        else:
            width, height = secondary_total, primary_total
        return LayoutResult(nodes=nodes, edges=edges, direction=direction, width=width, height=height)

    def _layout_component(
        self,
        component: nx.DiGraph,
        extents: dict[str, tuple[int, int]],
        band: int,
    ) -> ComponentLayout:
        cfg = self.config
        la = LayerAssignment.assign(component)
        aug = insert_dummy_nodes(la, reserved=extents)
        ordering = minimise_crossings(aug, cfg.crossing_passes)
        placements = assign_coordinates(ordering, aug, extents, band, cfg.node_gap, cfg.rank_gap)
        routes = route_edges(component, placements, aug, la.reversed_edges, band, cfg.rank_gap)
        real = {nid: pl for nid, pl in placements.items() if nid in component}
        width = max(pl.s_right for pl in placements.values())
        return ComponentLayout(placements=real, routes=routes, reversed_edges=la.reversed_edges, width=width)


def _extent(digraph: nx.DiGraph, node_id: str, direction: Direction) -> tuple[int, int]:
    """(secondary, primary) size of a node; bad or missing sizes fall back to the minimums."""
    data: NodeData | None = digraph.nodes[node_id].get("data")
    width = data.width if data is not None and isinstance(data.width, int) and data.width > 0 else MIN_NODE_WIDTH
    height = data.height if data is not None and isinstance(data.height, int) and data.height > 0 else MIN_NODE_HEIGHT
    if direction.is_horizontal():
        return (height, width)
    return (width, height)


def _components(digraph: nx.DiGraph) -> list[nx.DiGraph]:
    """Weakly connected components as subgraphs, in input order."""
    position: dict[str, int] = {node_id: i for i, node_id in enumerate(digraph.nodes)}
    groups = sorted(nx.weakly_connected_components(digraph), key=lambda m: min(position[n] for n in m))

    components: list[nx.DiGraph] = []
    for members in groups:
        sub: nx.DiGraph = nx.DiGraph()
        for node_id in digraph.nodes:
            if node_id in members:
                sub.add_node(node_id, **digraph.nodes[node_id])
        for src, tgt in digraph.edges():
            if src in members:
                sub.add_edge(src, tgt)
        components.append(sub)
    return components


def _to_frame(pl: Placement, direction: Direction, primary_total: int) -> tuple[int, int, int, int]:
    """Map a local box to (left, top, width, height) for ``direction``."""
    p_start = primary_total - pl.p_bottom if direction.is_reversed() else pl.p_top
    if direction.is_horizontal():
        return (p_start, pl.s_left, pl.p_ext, pl.s_ext)
    return (pl.s_left, p_start, pl.s_ext, pl.p_ext)


def _point_to_frame(point: Point, direction: Direction, primary_total: int) -> Point:
    p = primary_total - 1 - point.y if direction.is_reversed() else point.y
    if direction.is_horizontal():
        return Point(x=p, y=point.x)
    return Point(x=point.x, y=p)

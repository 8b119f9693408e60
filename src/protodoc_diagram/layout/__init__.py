"""Layered layout engine and public API."""

from __future__ import annotations

from protodoc_diagram.layout.engine import layout
from protodoc_diagram.layout.sugiyama import (
    AugmentedGraph,
    DummyEdge,
    LayerAssignment,
    Placement,
    SugiyamaLayout,
    assign_coordinates,
    count_crossings,
    greedy_fas_ordering,
    initial_ordering,
    insert_dummy_nodes,
    minimise_crossings,
    remove_cycles,
    route_edges,
    simplify_path,
)
from protodoc_diagram.layout.types import DUMMY_PREFIX, LayoutEdge, LayoutNode, LayoutResult, Point

__all__ = [
    "DUMMY_PREFIX",
    "AugmentedGraph",
    "DummyEdge",
    "LayerAssignment",
    "LayoutEdge",
    "LayoutNode",
    "LayoutResult",
    "Placement",
    "Point",
    "SugiyamaLayout",
    "assign_coordinates",
    "count_crossings",
    "greedy_fas_ordering",
    "initial_ordering",
    "insert_dummy_nodes",
    "layout",
    "minimise_crossings",
    "remove_cycles",
    "route_edges",
    "simplify_path",
]

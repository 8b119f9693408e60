"""Layout engine convenience functions."""

from __future__ import annotations

from protodoc_diagram.config import LayoutConfig
from protodoc_diagram.ir.graph import SchemaGraph
from protodoc_diagram.layout.sugiyama import SugiyamaLayout
from protodoc_diagram.layout.types import LayoutResult
from protodoc_diagram.types import Direction


def layout(
    graph: SchemaGraph,
    direction: Direction | str | None = None,
    config: LayoutConfig | None = None,
) -> LayoutResult:
    """Run the default (Sugiyama) layout pipeline.

    ``direction`` may be a Direction or its name; None uses the config's.
    """
    if isinstance(direction, str):
        direction = Direction.parse(direction)
    engine = SugiyamaLayout(config)
    return engine.layout(graph, direction)

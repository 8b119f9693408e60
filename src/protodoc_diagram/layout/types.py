"""Layout types shared across the layout engine and renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from protodoc_diagram.types import Direction


@dataclass
class Point:
    """A 2D point in grid coordinates (column, row)."""

    x: int
    y: int


@dataclass
class LayoutNode:
    """A positioned node. ``x``/``y`` is the anchor: the rectangle's center."""

    id: str
    layer: int
    order: int
    x: int
    y: int
    width: int
    height: int
    label: str = ""

    @property
    def left(self) -> int:
        return self.x - self.width // 2

    @property
    def top(self) -> int:
        return self.y - self.height // 2

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    def rect(self) -> tuple[int, int, int, int]:
        """(x, y, width, height) of the top-left corner and size."""
        return (self.left, self.top, self.width, self.height)


@dataclass
class LayoutEdge:
    """An original edge with orthogonal waypoints running source -> target.

    ``reversed`` marks edges flipped internally to break a cycle; the
    endpoints here are always the original ones.
    """

    source: str
    target: str
    reversed: bool = False
    self_loop: bool = False
    waypoints: list[Point] = field(default_factory=list)


@dataclass
class LayoutResult:
    """Self-contained layout output — everything renderers need."""

    nodes: dict[str, LayoutNode]
    edges: list[LayoutEdge]
    direction: Direction
    width: int = 0
    height: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "direction": self.direction.name,
            "width": self.width,
            "height": self.height,
            "nodes": [
                {
                    "id": n.id,
                    "label": n.label,
                    "layer": n.layer,
                    "order": n.order,
                    "x": n.x,
                    "y": n.y,
                    "width": n.width,
                    "height": n.height,
                }
                for n in self.nodes.values()
            ],
            "edges": [
                {
                    "source": e.source,
                    "target": e.target,
                    "reversed": e.reversed,
                    "waypoints": [[p.x, p.y] for p in e.waypoints],
                }
                for e in self.edges
            ],
        }


DUMMY_PREFIX = "__dummy_"

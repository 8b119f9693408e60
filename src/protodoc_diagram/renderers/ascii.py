"""ASCII/Unicode text renderer for laid-out record diagrams."""

from __future__ import annotations

from protodoc_diagram.layout.types import LayoutEdge, LayoutNode, LayoutResult, Point
from protodoc_diagram.renderers.canvas import Canvas, Rect
from protodoc_diagram.renderers.charset import Arms, BoxChars, CharSet
from protodoc_diagram.types import Direction

# ─── Node Rendering ──────────────────────────────────────────────────────────


def _paint_node(canvas: Canvas, ln: LayoutNode) -> None:
    bc = BoxChars.for_charset(canvas.charset)
    canvas.draw_box(Rect(*ln.rect()), bc)

    inner_w = max(0, ln.width - 2)
    label = ln.label if len(ln.label) <= inner_w else ln.label[: max(0, inner_w - 1)] + "~"
    pad = max(0, inner_w - len(label)) // 2
    canvas.write_str(ln.left + 1 + pad, ln.y, label)


# ─── Edge Rendering ──────────────────────────────────────────────────────────


def _step_arms(p: Point, other: Point) -> Arms:
    """The arm of cell ``p`` that points toward ``other``."""
    if other.x > p.x:
        return Arms(right=True)
    if other.x < p.x:
        return Arms(left=True)
    if other.y > p.y:
        return Arms(down=True)
    if other.y < p.y:
        return Arms(up=True)
    return Arms()


def _arrow_for(edge: LayoutEdge, direction: Direction, bc: BoxChars) -> str:
    points = edge.waypoints
    if len(points) >= 2:
        last, prev = points[-1], points[-2]
        if last.y > prev.y:
            return bc.arrow_down
        if last.y < prev.y:
            return bc.arrow_up
        if last.x > prev.x:
            return bc.arrow_right
        return bc.arrow_left
    if edge.reversed:
        direction = {
            Direction.TB: Direction.BT,
            Direction.BT: Direction.TB,
            Direction.LR: Direction.RL,
            Direction.RL: Direction.LR,
        }[direction]
    return {
        Direction.TB: bc.arrow_down,
        Direction.BT: bc.arrow_up,
        Direction.LR: bc.arrow_right,
        Direction.RL: bc.arrow_left,
    }[direction]


def _paint_edge(canvas: Canvas, edge: LayoutEdge) -> None:
    points = edge.waypoints
    if not points:
        return
    bc = BoxChars.for_charset(canvas.charset)

    # Draw interior cells of each segment (excluding waypoint endpoints)
    for p0, p1 in zip(points, points[1:]):
        if p0.y == p1.y:
            lo, hi = sorted((p0.x, p1.x))
            for col in range(lo + 1, hi):
                canvas.set_merge(col, p0.y, bc.horizontal)
        else:
            lo, hi = sorted((p0.y, p1.y))
            for row in range(lo + 1, hi):
                canvas.set_merge(p0.x, row, bc.vertical)

    # At each waypoint, compute exact arms from incoming/outgoing directions
    for i, p in enumerate(points):
        arms = Arms()
        if i > 0:
            arms = arms.merge(_step_arms(p, points[i - 1]))
        if i < len(points) - 1:
            arms = arms.merge(_step_arms(p, points[i + 1]))
        canvas.merge_arms(p.x, p.y, arms)


def _paint_arrow(canvas: Canvas, edge: LayoutEdge, direction: Direction) -> None:
    if not edge.waypoints:
        return
    last = edge.waypoints[-1]
    canvas.set(last.x, last.y, _arrow_for(edge, direction, BoxChars.for_charset(canvas.charset)))


def _paint_exit_stub(canvas: Canvas, edge: LayoutEdge, source: LayoutNode) -> None:
    """Join the first waypoint to the source box with a tee on its border."""
    if not edge.waypoints:
        return
    first = edge.waypoints[0]
    if first.y >= source.bottom:
        col, row, arms = first.x, source.bottom - 1, Arms(down=True)
    elif first.y < source.top:
        col, row, arms = first.x, source.top, Arms(up=True)
    elif first.x >= source.right:
        col, row, arms = source.right - 1, first.y, Arms(right=True)
    else:
        col, row, arms = source.left, first.y, Arms(left=True)
    canvas.merge_arms(col, row, arms)


# ─── Public Renderer ─────────────────────────────────────────────────────────


class AsciiRenderer:
    """ASCII/Unicode text renderer."""

    def __init__(self, unicode: bool = True) -> None:
        self.unicode = unicode

    def render(self, result: LayoutResult) -> str:
        if not result.nodes:
            return ""
        cs = CharSet.Unicode if self.unicode else CharSet.Ascii

        width = max([result.width, *(n.right for n in result.nodes.values())])
        height = max([result.height, *(n.bottom for n in result.nodes.values())])
        for edge in result.edges:
            for p in edge.waypoints:
                width = max(width, p.x + 1)
                height = max(height, p.y + 1)
        canvas = Canvas(width, height, cs)

        for ln in result.nodes.values():
            _paint_node(canvas, ln)

        # Arrowheads are painted after all lines.
        for edge in result.edges:
            _paint_edge(canvas, edge)
        for edge in result.edges:
            _paint_arrow(canvas, edge, result.direction)
            _paint_exit_stub(canvas, edge, result.nodes[edge.source])

        return canvas.to_string()

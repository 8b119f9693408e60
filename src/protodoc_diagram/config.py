"""Centralized configuration for protodoc-diagram."""

from __future__ import annotations

from dataclasses import dataclass

from protodoc_diagram.types import Direction

# Node geometry, in grid cells.
NODE_PADDING: int = 1
NODE_HEIGHT: int = 3
MIN_NODE_WIDTH: int = 5
MIN_NODE_HEIGHT: int = 3

# Spacing between nodes in a layer, and between layers.
NODE_GAP: int = 4
RANK_GAP: int = 3
# Edges need a row to leave the source and a row to enter the target.
MIN_RANK_GAP: int = 2

CROSSING_PASSES: int = 24


@dataclass
class LayoutConfig:
    """Configuration for graph building and the layout pipeline.

    ``node_width`` fixes every node's width; when None the width is derived
    from the node label.
    """

    direction: Direction = Direction.TB
    node_width: int | None = None
    node_height: int = NODE_HEIGHT
    padding: int = NODE_PADDING
    node_gap: int = NODE_GAP
    rank_gap: int = RANK_GAP
    crossing_passes: int = CROSSING_PASSES

    def __post_init__(self) -> None:
        if self.rank_gap < MIN_RANK_GAP:
            raise ValueError(f"rank_gap must be at least {MIN_RANK_GAP}, got {self.rank_gap}")


@dataclass
class RenderConfig:
    """Configuration for the text rendering pipeline."""

    unicode: bool = True
    output_format: str = "text"

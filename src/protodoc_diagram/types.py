"""Shared type definitions for protodoc-diagram.

Enums and small types used across the graph builder, layout and renderers.
"""

from __future__ import annotations

from enum import Enum, auto


class Direction(Enum):
    TB = auto()  # top to bottom
    BT = auto()  # bottom to top
    LR = auto()  # left to right
    RL = auto()  # right to left

    @classmethod
    def default(cls) -> Direction:
        return cls.TB

    @classmethod
    def parse(cls, value: str) -> Direction:
        """Parse a direction name; TD is accepted as an alias of TB."""
        key = value.strip().upper()
        if key == "TD":
            key = "TB"
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown direction '{value}'; use TB, BT, LR, or RL") from None

    def is_horizontal(self) -> bool:
        """True when layers are stacked along the x axis."""
        return self in (Direction.LR, Direction.RL)

    def is_reversed(self) -> bool:
        """True when layer 0 sits at the far end of the primary axis."""
        return self in (Direction.BT, Direction.RL)

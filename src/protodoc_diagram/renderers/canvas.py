"""Canvas — 2D character grid for rendering."""

from __future__ import annotations

from dataclasses import dataclass

from protodoc_diagram.renderers.charset import Arms, BoxChars, CharSet


@dataclass
class Rect:
    x: int
    y: int
    width: int
    height: int

    def right(self) -> int:
        return self.x + self.width

    def bottom(self) -> int:
        return self.y + self.height


class Canvas:
    """A 2D character grid onto which diagram elements are painted.

    Writes outside the grid are ignored.
    """

    def __init__(self, width: int, height: int, charset: CharSet) -> None:
        self.width = width
        self.height = height
        self.charset = charset
        self.cells: list[list[str]] = [[" "] * width for _ in range(height)]

    def contains(self, col: int, row: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def get(self, col: int, row: int) -> str:
        if self.contains(col, row):
            return self.cells[row][col]
        return " "

    def set(self, col: int, row: int, c: str) -> None:
        if self.contains(col, row):
            self.cells[row][col] = c

    def set_merge(self, col: int, row: int, c: str) -> None:
        """Write ``c``, joining it with any line character already there."""
        self.merge_arms(col, row, Arms.from_char(c), fallback=c)

    def merge_arms(self, col: int, row: int, arms: Arms | None, fallback: str = " ") -> None:
        if not self.contains(col, row):
            return
        existing = Arms.from_char(self.cells[row][col])
        if arms is None:
            self.cells[row][col] = fallback
        elif existing is None:
            self.cells[row][col] = arms.to_char(self.charset)
        else:
            self.cells[row][col] = existing.merge(arms).to_char(self.charset)

    def draw_box(self, rect: Rect, bc: BoxChars) -> None:
        if rect.width < 2 or rect.height < 2:
            return
        x0, y0 = rect.x, rect.y
        x1, y1 = rect.right() - 1, rect.bottom() - 1
        for col in range(x0 + 1, x1):
            self.set(col, y0, bc.horizontal)
            self.set(col, y1, bc.horizontal)
        for row in range(y0 + 1, y1):
            self.set(x0, row, bc.vertical)
            self.set(x1, row, bc.vertical)
        self.set(x0, y0, bc.top_left)
        self.set(x1, y0, bc.top_right)
        self.set(x0, y1, bc.bottom_left)
        self.set(x1, y1, bc.bottom_right)

    def write_str(self, col: int, row: int, s: str) -> None:
        for i, ch in enumerate(s):
            self.set(col + i, row, ch)

    def to_string(self) -> str:
        out = "\n".join("".join(row).rstrip() for row in self.cells)
        return out.rstrip("\n") + "\n"

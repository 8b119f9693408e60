"""Character sets and junction merging for box-drawing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CharSet(Enum):
    Unicode = "unicode"
    Ascii = "ascii"


@dataclass
class BoxChars:
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str
    horizontal: str
    vertical: str
    tee_right: str
    tee_left: str
    tee_down: str
    tee_up: str
    cross: str
    arrow_right: str
    arrow_left: str
    arrow_down: str
    arrow_up: str

    @classmethod
    def unicode(cls) -> BoxChars:
        return cls(*"┌┐└┘─│├┤┬┴┼►◄▼▲")

    @classmethod
    def ascii(cls) -> BoxChars:
        return cls(*"++++-|+++++><v^")

    @classmethod
    def for_charset(cls, cs: CharSet) -> BoxChars:
        if cs == CharSet.Unicode:
            return cls.unicode()
        return cls.ascii()


# (up, down, left, right) for every line-drawing character a canvas may hold.
_ARMS_BY_CHAR: dict[str, tuple[bool, bool, bool, bool]] = {
    "─": (False, False, True, True),
    "│": (True, True, False, False),
    "┌": (False, True, False, True),
    "┐": (False, True, True, False),
    "└": (True, False, False, True),
    "┘": (True, False, True, False),
    "├": (True, True, False, True),
    "┤": (True, True, True, False),
    "┬": (False, True, True, True),
    "┴": (True, False, True, True),
    "┼": (True, True, True, True),
    "-": (False, False, True, True),
    "|": (True, True, False, False),
    "+": (True, True, True, True),
}


@dataclass
class Arms:
    """Which arms of a junction cell are active."""

    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False

    @classmethod
    def from_char(cls, c: str) -> Arms | None:
        entry = _ARMS_BY_CHAR.get(c)
        if entry is None:
            return None
        return cls(*entry)

    def merge(self, other: Arms) -> Arms:
        return Arms(
            up=self.up or other.up,
            down=self.down or other.down,
            left=self.left or other.left,
            right=self.right or other.right,
        )

    def to_char(self, cs: CharSet) -> str:
        bc = BoxChars.for_charset(cs)
        vertical = self.up or self.down
        horizontal = self.left or self.right
        if not vertical and not horizontal:
            return " "
        if not horizontal:
            return bc.vertical
        if not vertical:
            return bc.horizontal
        match (self.up, self.down, self.left, self.right):
            case (False, True, False, True):
                return bc.top_left
            case (False, True, True, False):
                return bc.top_right
            case (True, False, False, True):
                return bc.bottom_left
            case (True, False, True, False):
                return bc.bottom_right
            case (True, True, False, True):
                return bc.tee_right
            case (True, True, True, False):
                return bc.tee_left
            case (False, True, True, True):
                return bc.tee_down
            case (True, False, True, True):
                return bc.tee_up
            case _:
                return bc.cross

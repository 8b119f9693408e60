"""Tests for Direction parsing and axis helpers."""

import pytest

from protodoc_diagram.config import LayoutConfig
from protodoc_diagram.types import Direction


class TestDirection:
    def test_default_is_top_to_bottom(self):
        assert Direction.default() == Direction.TB
        assert LayoutConfig().direction == Direction.TB

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("TB", Direction.TB), ("td", Direction.TB), ("BT", Direction.BT), (" lr ", Direction.LR), ("Rl", Direction.RL)],
    )
    def test_parse(self, text, expected):
        assert Direction.parse(text) == expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown direction"):
            Direction.parse("sideways")

    def test_axes(self):
        assert Direction.LR.is_horizontal() and Direction.RL.is_horizontal()
        assert not Direction.TB.is_horizontal()
        assert Direction.BT.is_reversed() and Direction.RL.is_reversed()
        assert not Direction.LR.is_reversed()

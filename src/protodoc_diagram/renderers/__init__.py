"""Text renderers for laid-out diagrams."""

from protodoc_diagram.renderers.ascii import AsciiRenderer
from protodoc_diagram.renderers.canvas import Canvas, Rect
from protodoc_diagram.renderers.charset import Arms, BoxChars, CharSet

__all__ = [
    "Arms",
    "AsciiRenderer",
    "BoxChars",
    "Canvas",
    "CharSet",
    "Rect",
]

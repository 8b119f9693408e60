"""protodoc-diagram: layered reference diagrams for protobuf documentation."""

from protodoc_diagram.config import LayoutConfig, RenderConfig
from protodoc_diagram.ir.graph import SchemaGraph, build_graph
from protodoc_diagram.layout import LayoutResult, layout
from protodoc_diagram.renderers.ascii import AsciiRenderer
from protodoc_diagram.schema import DocFile, Documentation, load_documentation, parse_documentation
from protodoc_diagram.types import Direction

__all__ = [
    "Direction",
    "DocFile",
    "Documentation",
    "LayoutConfig",
    "LayoutResult",
    "RenderConfig",
    "SchemaGraph",
    "build_graph",
    "layout",
    "layout_file",
    "load_documentation",
    "parse_documentation",
    "render_file",
]


def layout_file(doc_file: DocFile, config: LayoutConfig | None = None) -> LayoutResult:
    """Build and lay out the reference diagram of one documented file."""
    config = config or LayoutConfig()
    graph = SchemaGraph.from_file(doc_file, config)
    return layout(graph, config.direction, config)


def render_file(doc_file: DocFile, config: LayoutConfig | None = None, unicode: bool = True) -> str:
    """Render one file's reference diagram as text.

    Args:
        doc_file: The documented schema file.
        config: Layout configuration; defaults to top-to-bottom.
        unicode: True for Unicode box-drawing characters; False for ASCII fallback.

    Returns:
        The rendered diagram, or an empty string if the file has no messages.
    """
    result = layout_file(doc_file, config)
    return AsciiRenderer(unicode=unicode).render(result)

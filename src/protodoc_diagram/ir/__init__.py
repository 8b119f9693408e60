"""Intermediate representation: the record reference graph."""

from protodoc_diagram.ir.graph import NodeData, SchemaGraph, build_graph, label_width

__all__ = [
    "NodeData",
    "SchemaGraph",
    "build_graph",
    "label_width",
]

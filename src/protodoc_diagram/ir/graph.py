"""Graph IR — converts one file's records into a networkx DiGraph for layout.

This module owns the canonical graph data structure used by the layout engine
and renderers. Nodes are records keyed by fully-qualified name; an edge
A -> B means "record A has a field typed as record B". Only references to
records of the same file produce edges.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import networkx as nx

from protodoc_diagram.config import MIN_NODE_WIDTH, LayoutConfig
from protodoc_diagram.schema import DocFile, Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeData:
    id: str
    label: str
    width: int
    height: int


def label_width(label: str, padding: int) -> int:
    """Box width that fits ``label`` on one line inside a border."""
    return max(MIN_NODE_WIDTH, len(label) + 2 + 2 * padding)


class SchemaGraph:
    """The graph intermediate representation built from a file's records.

    Wraps a networkx DiGraph and exposes helpers for topology queries.
    Node and edge iteration follow build order.
    """

    def __init__(self, digraph: nx.DiGraph, name: str = "") -> None:
        self.digraph = digraph
        self.name = name

    @classmethod
    def from_records(cls, records: Iterable[Record], config: LayoutConfig | None = None, name: str = "") -> SchemaGraph:
        """Build a SchemaGraph from an ordered sequence of records."""
        config = config or LayoutConfig()
        digraph: nx.DiGraph = nx.DiGraph()
        accepted: list[Record] = []

        for record in records:
            if not isinstance(record.full_name, str) or not record.full_name:
                logger.debug("Skipping record without a fully-qualified name: %r", record)
                continue
            if record.full_name in digraph:
                logger.warning("Duplicate record '%s' in %s; keeping the first", record.full_name, name or "graph")
                continue
            digraph.add_node(record.full_name, data=_node_data(record, config))
            accepted.append(record)

        for record in accepted:
            for fld in record.fields:
                target = fld.full_type
                if not isinstance(target, str) or target not in digraph:
                    continue
                digraph.add_edge(record.full_name, target)

        logger.debug(
            "Built graph %s: %d node(s), %d edge(s)",
            name or "<anonymous>",
            digraph.number_of_nodes(),
            digraph.number_of_edges(),
        )
        return cls(digraph=digraph, name=name)

    @classmethod
    def from_file(cls, doc_file: DocFile, config: LayoutConfig | None = None) -> SchemaGraph:
        return cls.from_records(doc_file.messages, config, name=doc_file.name)

    def node_ids(self) -> list[str]:
        return list(self.digraph.nodes)

    def node(self, node_id: str) -> NodeData:
        return self.digraph.nodes[node_id]["data"]

    def edges(self) -> list[tuple[str, str]]:
        return list(self.digraph.edges())

    def is_dag(self) -> bool:
        return nx.is_directed_acyclic_graph(self.digraph)

    def node_count(self) -> int:
        return self.digraph.number_of_nodes()

    def edge_count(self) -> int:
        return self.digraph.number_of_edges()

    def in_degree(self, node_id: str) -> int:
        if node_id not in self.digraph:
            return 0
        return self.digraph.in_degree(node_id)

    def out_degree(self, node_id: str) -> int:
        if node_id not in self.digraph:
            return 0
        return self.digraph.out_degree(node_id)

    def adjacency_list(self) -> list[tuple[str, list[str]]]:
        result: list[tuple[str, list[str]]] = []
        for node_id in self.digraph.nodes:
            neighbors = sorted(self.digraph.successors(node_id))
            result.append((node_id, neighbors))
        result.sort(key=lambda x: x[0])
        return result


def build_graph(records: Iterable[Record], config: LayoutConfig | None = None) -> SchemaGraph:
    """Build the reference graph of one file's records."""
    return SchemaGraph.from_records(records, config)


def _node_data(record: Record, config: LayoutConfig) -> NodeData:
    label = record.display_name
    width = config.node_width if config.node_width is not None else label_width(label, config.padding)
    return NodeData(id=record.full_name, label=label, width=width, height=config.node_height)

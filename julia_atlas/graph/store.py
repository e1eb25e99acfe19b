"""
julia_atlas/graph/store.py — Graph storage capability.

The pipeline only needs a handful of graph operations, so it talks to a
GraphStore rather than to NetworkX directly. NetworkXGraphStore is the
implementation used for real runs; tests may pass any object with the same
methods.
"""

from typing import Any, Iterator, Protocol

import networkx as nx


class GraphStore(Protocol):
    """Directed graph over integer package ids."""

    def add_node(self, node_id: int, **attrs: Any) -> None: ...

    def add_edge(self, source: int, target: int) -> None: ...

    def distances(self, source: int) -> dict[int, int]:
        """Unweighted hop count from source to every reachable node (source → 0)."""
        ...

    def nodes(self) -> Iterator[int]: ...

    def edges(self) -> Iterator[tuple[int, int]]: ...

    def in_degree(self, node_id: int) -> int: ...

    def out_degree(self, node_id: int) -> int: ...

    def node_attrs(self, node_id: int) -> dict[str, Any]: ...

    def set_node_attr(self, node_id: int, key: str, value: Any) -> None: ...

    def number_of_nodes(self) -> int: ...

    def number_of_edges(self) -> int: ...


class NetworkXGraphStore:
    """GraphStore backed by a networkx.DiGraph (exposed as .graph)."""

    def __init__(self, graph: nx.DiGraph | None = None) -> None:
        self.graph = graph if graph is not None else nx.DiGraph()
        self.skipped_dependents: list[tuple[str, str]] = []

    def add_node(self, node_id: int, **attrs: Any) -> None:
        self.graph.add_node(node_id, **attrs)

    def add_edge(self, source: int, target: int) -> None:
        self.graph.add_edge(source, target)

    def distances(self, source: int) -> dict[int, int]:
        return dict(nx.single_source_shortest_path_length(self.graph, source))

    def nodes(self) -> Iterator[int]:
        return iter(self.graph.nodes)

    def edges(self) -> Iterator[tuple[int, int]]:
        return iter(self.graph.edges)

    def in_degree(self, node_id: int) -> int:
        return self.graph.in_degree(node_id)

    def out_degree(self, node_id: int) -> int:
        return self.graph.out_degree(node_id)

    def node_attrs(self, node_id: int) -> dict[str, Any]:
        return self.graph.nodes[node_id]

    def set_node_attr(self, node_id: int, key: str, value: Any) -> None:
        self.graph.nodes[node_id][key] = value

    def number_of_nodes(self) -> int:
        return self.graph.number_of_nodes()

    def number_of_edges(self) -> int:
        return self.graph.number_of_edges()

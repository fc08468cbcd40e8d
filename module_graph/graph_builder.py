"""
Dependency Graph Builder
Materializes a caller-described module graph into an immutable networkx snapshot
"""

import networkx as nx
from typing import Callable, Container, Dict, Hashable, Iterable, List, Optional, Protocol, Tuple
import logging

from .errors import UnknownNodeError

logger = logging.getLogger(__name__)

Node = Hashable
DependenciesOf = Callable[[Node], Iterable[Node]]


class SemiGraph(Protocol):
    """Minimal directed graph: a node collection and the dependencies of each node"""

    def get_nodes(self) -> Iterable[Node]:
        ...

    def get_in(self, node: Node) -> Iterable[Node]:
        ...


class FunctionSemiGraph:
    """SemiGraph over an ordered node collection and a dependency callback"""

    def __init__(self, nodes: Iterable[Node], dependencies_of: DependenciesOf):
        self._nodes = nodes
        self._dependencies_of = dependencies_of

    def get_nodes(self) -> Iterable[Node]:
        return self._nodes

    def get_in(self, node: Node) -> Iterable[Node]:
        return self._dependencies_of(node)


class CachingSemiGraph:
    """Memoizes the node list and per-node dependency lists of another SemiGraph.

    The wrapped callbacks may be expensive (they can query a live project
    model), so each is evaluated at most once per instance. There is no
    invalidation: build a fresh instance for every query.
    """

    def __init__(self, semi_graph: SemiGraph):
        self._semi_graph = semi_graph
        self._nodes: Optional[List[Node]] = None
        self._in: Dict[Node, List[Node]] = {}

    def get_nodes(self) -> List[Node]:
        if self._nodes is None:
            self._nodes = _unique(self._semi_graph.get_nodes())
        return self._nodes

    def get_in(self, node: Node) -> List[Node]:
        deps = self._in.get(node)
        if deps is None:
            deps = _unique(self._semi_graph.get_in(node))
            self._in[node] = deps
        return deps


def _unique(items: Iterable[Node]) -> List[Node]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def build_graph(semi_graph: SemiGraph) -> nx.DiGraph:
    """Snapshot a SemiGraph into a frozen DiGraph with edges dependent -> dependency"""
    graph = nx.DiGraph()
    nodes = _unique(semi_graph.get_nodes())
    graph.add_nodes_from(nodes)

    dropped = 0
    for node in nodes:
        for dep in _unique(semi_graph.get_in(node)):
            if dep not in graph:
                dropped += 1
                logger.debug(f"Ignoring dependency {node!r} -> {dep!r}: target is not a graph node")
                continue
            graph.add_edge(node, dep)

    if dropped:
        logger.info(f"Dropped {dropped} dependencies on nodes outside the graph")
    return nx.freeze(graph)


def create_graph(nodes: Iterable[Node], dependencies_of: DependenciesOf) -> nx.DiGraph:
    """Build a frozen dependency graph from an ordered node collection and a callback"""
    return build_graph(CachingSemiGraph(FunctionSemiGraph(list(nodes), dependencies_of)))


def validate_edges(nodes: Container[Node], edges: Iterable[Tuple[Node, Node]]) -> None:
    """Reject edges whose endpoints are not in nodes (a graph or any node collection)"""
    for source, target in edges:
        for node in (source, target):
            if node not in nodes:
                raise UnknownNodeError(node)


def get_graph_stats(graph: nx.DiGraph) -> Dict:
    """Get statistics about the dependency graph"""
    node_count = graph.number_of_nodes()
    return {
        'total_nodes': node_count,
        'total_dependencies': graph.number_of_edges(),
        'is_connected': nx.is_weakly_connected(graph) if node_count > 0 else False,
        'density': nx.density(graph),
        'average_degree': sum(dict(graph.degree()).values()) / node_count if node_count > 0 else 0
    }

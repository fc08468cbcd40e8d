"""
Chunk Builder
Partitions a dependency graph into strongly connected components ("chunks")
and builds the acyclic condensation graph over them
"""

import networkx as nx
from typing import Dict, FrozenSet, Hashable, Iterator, List, Tuple
import logging

logger = logging.getLogger(__name__)


class Chunk:
    """A maximal set of mutually dependent nodes.

    Members are kept in the order the nodes were declared in the source graph
    so that reports are reproducible. Two chunks are equal when they hold the
    same members, regardless of order.
    """

    __slots__ = ('nodes', 'node_set', 'is_cyclic')

    def __init__(self, nodes: Tuple[Hashable, ...], self_loop: bool = False):
        if not nodes:
            raise ValueError("A chunk must contain at least one node")
        self.nodes = tuple(nodes)
        self.node_set: FrozenSet[Hashable] = frozenset(self.nodes)
        self.is_cyclic = len(self.nodes) > 1 or self_loop

    def contains(self, node: Hashable) -> bool:
        return node in self.node_set

    def __contains__(self, node: Hashable) -> bool:
        return node in self.node_set

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Chunk):
            return NotImplemented
        return self.node_set == other.node_set

    def __hash__(self) -> int:
        return hash(self.node_set)

    def __repr__(self) -> str:
        members = ', '.join(repr(node) for node in self.nodes)
        return f"Chunk([{members}])"


class ChunkGraph:
    """Condensation of a dependency graph: one node per chunk, always acyclic"""

    def __init__(self, graph: nx.DiGraph, chunk_of: Dict[Hashable, Chunk]):
        self.graph = graph
        self._chunk_of = chunk_of

    @property
    def chunks(self) -> List[Chunk]:
        return list(self.graph.nodes())

    def chunk_of(self, node: Hashable) -> Chunk:
        return self._chunk_of[node]

    def dependencies(self, chunk: Chunk) -> List[Chunk]:
        return list(self.graph.successors(chunk))


def compute_chunks(graph: nx.DiGraph) -> List[Chunk]:
    """Find strongly connected components using Tarjan's algorithm"""
    position = {node: index for index, node in enumerate(graph.nodes())}

    chunks = []
    for component in nx.strongly_connected_components(graph):
        members = tuple(sorted(component, key=position.__getitem__))
        self_loop = len(members) == 1 and graph.has_edge(members[0], members[0])
        chunks.append(Chunk(members, self_loop=self_loop))

    # NetworkX yields components in discovery order; report them in declaration order
    chunks.sort(key=lambda chunk: position[chunk.nodes[0]])

    cyclic = sum(1 for chunk in chunks if chunk.is_cyclic)
    logger.info(f"Found {len(chunks)} chunks, {cyclic} of them cyclic")
    return chunks


def to_chunk_graph(graph: nx.DiGraph) -> ChunkGraph:
    """Build the condensation graph whose nodes are the chunks of graph"""
    chunks = compute_chunks(graph)
    chunk_of = {node: chunk for chunk in chunks for node in chunk.nodes}

    chunk_graph = nx.DiGraph()
    chunk_graph.add_nodes_from(chunks)
    for chunk in chunks:
        for node in chunk.nodes:
            for dep in graph.successors(node):
                dep_chunk = chunk_of[dep]
                if dep_chunk is not chunk:
                    chunk_graph.add_edge(chunk, dep_chunk)

    return ChunkGraph(nx.freeze(chunk_graph), chunk_of)

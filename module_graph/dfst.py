"""
DFST Builder
Depth-first spanning forest over a dependency graph, used to order chunks for building
"""

import functools
import networkx as nx
from typing import Callable, Dict, Hashable, List, Optional, Tuple
import logging

from .chunks import Chunk, ChunkGraph
from .errors import InternalConsistencyError

logger = logging.getLogger(__name__)

_DONE = object()


class DFSTBuilder:
    """Builds a depth-first spanning forest and derives a topological order.

    Edges point from a dependent to its dependency. Roots are taken in the
    graph's node order and successors in edge insertion order, so the result
    is fully determined by the input graph. Ordering by ascending finish time
    puts every dependency before its dependents.
    """

    def __init__(self, graph: nx.DiGraph):
        self.graph = graph
        self._discovery: Dict[Hashable, int] = {}
        self._finish: Dict[Hashable, int] = {}
        self._parent: Dict[Hashable, Optional[Hashable]] = {}
        self._back_edges: List[Tuple[Hashable, Hashable]] = []
        self._build()

    def _build(self):
        clock = 0
        for root in self.graph.nodes():
            if root in self._discovery:
                continue
            self._parent[root] = None
            self._discovery[root] = clock
            clock += 1
            stack = [(root, iter(self.graph.successors(root)))]

            while stack:
                node, children = stack[-1]
                child = next(children, _DONE)
                if child is _DONE:
                    stack.pop()
                    self._finish[node] = clock
                    clock += 1
                elif child not in self._discovery:
                    self._parent[child] = node
                    self._discovery[child] = clock
                    clock += 1
                    stack.append((child, iter(self.graph.successors(child))))
                elif child not in self._finish:
                    # child is still on the stack
                    self._back_edges.append((node, child))

    def is_acyclic(self) -> bool:
        return not self._back_edges

    def back_edge(self) -> Optional[Tuple[Hashable, Hashable]]:
        """First edge found that closes a cycle, if any"""
        return self._back_edges[0] if self._back_edges else None

    def discovery_time(self, node: Hashable) -> int:
        return self._discovery[node]

    def finish_time(self, node: Hashable) -> int:
        return self._finish[node]

    def parent(self, node: Hashable) -> Optional[Hashable]:
        return self._parent[node]

    def comparator(self) -> Callable:
        """Sort key placing dependencies before their dependents"""
        def compare(a, b):
            return self._finish[a] - self._finish[b]
        return functools.cmp_to_key(compare)

    def sorted_nodes(self) -> List[Hashable]:
        return sorted(self.graph.nodes(), key=self.comparator())


def topological_sort(graph: nx.DiGraph) -> List[Hashable]:
    """Order an acyclic graph so that dependencies precede dependents.

    Raises InternalConsistencyError if the graph has a cycle.
    """
    builder = DFSTBuilder(graph)
    if not builder.is_acyclic():
        source, target = builder.back_edge()
        logger.error(f"Acyclic graph expected, found cycle through {source!r} -> {target!r}")
        raise InternalConsistencyError("Acyclic graph expected", edge=(source, target))
    return builder.sorted_nodes()


def sort_chunks(chunk_graph: ChunkGraph) -> List[Chunk]:
    """Order the chunks of a condensation graph for building"""
    return topological_sort(chunk_graph.graph)

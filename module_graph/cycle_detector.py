"""
Cycle Detector
Orders module chunks for building and probes whether a new dependency would
introduce a circular dependency
"""

import networkx as nx
from typing import Dict, Hashable, Iterable, List, Optional, Tuple
import logging

from .chunks import Chunk, ChunkGraph, to_chunk_graph
from .dfst import sort_chunks
from .errors import SelfDependencyError, UnknownNodeError
from .graph_builder import (
    CachingSemiGraph,
    DependenciesOf,
    FunctionSemiGraph,
    SemiGraph,
    build_graph,
    get_graph_stats,
    validate_edges,
)

logger = logging.getLogger(__name__)


def get_sorted_chunks(graph: nx.DiGraph) -> List[Chunk]:
    """Chunks of graph in build order: each chunk only depends on earlier ones"""
    return sort_chunks(to_chunk_graph(graph))


class ProbeResult:
    """Outcome of a circularity probe.

    ``ProbeResult.NO_CYCLE`` is the negative answer. A positive answer carries
    the proposed edge endpoints as the witness and the whole chunk they end up
    sharing.
    """

    NO_CYCLE: 'ProbeResult'

    def __init__(self, witness: Optional[Tuple[Hashable, Hashable]] = None, chunk: Optional[Chunk] = None):
        self.witness = witness
        self.chunk = chunk

    @property
    def creates_cycle(self) -> bool:
        return self.chunk is not None

    def __bool__(self) -> bool:
        return self.creates_cycle

    def __repr__(self) -> str:
        if not self.creates_cycle:
            return "ProbeResult.NO_CYCLE"
        return f"ProbeResult(witness={self.witness!r}, chunk={self.chunk!r})"


ProbeResult.NO_CYCLE = ProbeResult()


class EdgeOverlay:
    """Read-only SemiGraph view adding one extra edge source -> target"""

    def __init__(self, semi_graph: SemiGraph, source: Hashable, target: Hashable):
        self._semi_graph = semi_graph
        self.source = source
        self.target = target

    def get_nodes(self) -> Iterable[Hashable]:
        return self._semi_graph.get_nodes()

    def get_in(self, node: Hashable) -> List[Hashable]:
        deps = list(self._semi_graph.get_in(node))
        if node == self.source and self.target not in deps:
            deps.append(self.target)
        return deps


def _shared_chunk(chunk_graph: ChunkGraph, source: Hashable, target: Hashable) -> Optional[Chunk]:
    chunk = chunk_graph.chunk_of(source)
    return chunk if chunk.contains(target) else None


def probe_semi_graph(semi_graph: SemiGraph, source: Hashable, target: Hashable) -> ProbeResult:
    """Check whether adding source -> target to semi_graph forms a new cycle"""
    if source == target:
        raise SelfDependencyError(source)

    cached = CachingSemiGraph(semi_graph)
    # reject before any dependency list is read
    validate_edges(set(cached.get_nodes()), [(source, target)])

    before = to_chunk_graph(build_graph(cached))
    if _shared_chunk(before, source, target) is not None:
        logger.debug(f"{source!r} and {target!r} are already in one cycle")
        return ProbeResult.NO_CYCLE

    after = to_chunk_graph(build_graph(EdgeOverlay(cached, source, target)))
    chunk = _shared_chunk(after, source, target)
    if chunk is None:
        return ProbeResult.NO_CYCLE

    logger.info(f"Dependency {source!r} -> {target!r} would form a cycle of {len(chunk)} nodes")
    return ProbeResult(witness=(source, target), chunk=chunk)


def would_create_cycle(nodes: Iterable[Hashable], dependencies_of: DependenciesOf,
                       source: Hashable, target: Hashable) -> ProbeResult:
    """Check whether making source depend on target introduces a new cycle.

    Caller state is never touched: the extra edge only exists in an overlay
    view over dependencies_of.
    """
    return probe_semi_graph(FunctionSemiGraph(list(nodes), dependencies_of), source, target)


class CycleDetector:
    """Detects circular dependency groups and build order in a module graph"""

    def __init__(self, nodes: Iterable[Hashable], dependencies_of: DependenciesOf):
        self._semi_graph = CachingSemiGraph(FunctionSemiGraph(list(nodes), dependencies_of))
        self.graph = build_graph(self._semi_graph)
        self.chunk_graph = to_chunk_graph(self.graph)
        self._sorted_chunks: Optional[List[Chunk]] = None

    def sorted_chunks(self) -> List[Chunk]:
        """All chunks, dependencies first"""
        if self._sorted_chunks is None:
            self._sorted_chunks = sort_chunks(self.chunk_graph)
        return list(self._sorted_chunks)

    def cyclic_chunks(self) -> List[Chunk]:
        """Chunks that represent a real circular dependency, in build order"""
        return [chunk for chunk in self.sorted_chunks() if chunk.is_cyclic]

    def chunk_of(self, node: Hashable) -> Chunk:
        if node not in self.graph:
            raise UnknownNodeError(node)
        return self.chunk_graph.chunk_of(node)

    def is_dag(self) -> bool:
        return not self.cyclic_chunks()

    def would_create_cycle(self, source: Hashable, target: Hashable) -> ProbeResult:
        """Probe a hypothetical dependency against this detector's graph"""
        return probe_semi_graph(self._semi_graph, source, target)

    def get_analysis_summary(self) -> Dict:
        """Get a comprehensive summary of the chunk analysis"""
        sorted_chunks = self.sorted_chunks()
        cyclic = [chunk for chunk in sorted_chunks if chunk.is_cyclic]

        return {
            'graph_stats': get_graph_stats(self.graph),
            'chunks': {
                'count': len(sorted_chunks),
                'cyclic_count': len(cyclic),
                'largest_cyclic_size': max(len(chunk) for chunk in cyclic) if cyclic else 0,
                'cyclic': [list(chunk.nodes) for chunk in cyclic],
            },
            'build_order': [list(chunk.nodes) for chunk in sorted_chunks],
            'is_dag': not cyclic,
        }

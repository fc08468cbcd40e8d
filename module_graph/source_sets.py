"""
Source Set Expansion
Splits every module into production and test source sets so cycles can be
reported per kind of sources
"""

import enum
from dataclasses import dataclass
import networkx as nx
from typing import Callable, Hashable, Iterable, List, Optional
import logging

from .chunks import Chunk
from .cycle_detector import get_sorted_chunks
from .graph_builder import CachingSemiGraph, DependenciesOf, build_graph

logger = logging.getLogger(__name__)


class SourceKind(enum.Enum):
    PRODUCTION = 'production'
    TEST = 'test'


HasSources = Callable[[Hashable, SourceKind], bool]


@dataclass(frozen=True)
class ModuleSourceSet:
    """The production or test sources of one module"""
    module: Hashable
    kind: SourceKind

    def __str__(self) -> str:
        return f"{self.module} ({self.kind.value})"


class SourceSetSemiGraph:
    """SemiGraph over the source sets of a module list.

    A source set depends on the same kind of source set of every module its
    module depends on, when that module has sources of that kind. Test sources
    additionally depend on the production sources of their own module.
    """

    def __init__(self, modules: Iterable[Hashable], dependencies_of: DependenciesOf,
                 has_sources: HasSources,
                 production_dependencies_of: Optional[DependenciesOf] = None):
        self._modules = list(modules)
        self._dependencies_of = dependencies_of
        self._production_dependencies_of = production_dependencies_of or dependencies_of
        self._has_sources = has_sources

    def _add_if_any(self, result: List[ModuleSourceSet], module: Hashable, kind: SourceKind):
        if self._has_sources(module, kind):
            result.append(ModuleSourceSet(module, kind))

    def get_nodes(self) -> List[ModuleSourceSet]:
        result: List[ModuleSourceSet] = []
        for module in self._modules:
            self._add_if_any(result, module, SourceKind.PRODUCTION)
            self._add_if_any(result, module, SourceKind.TEST)
        return result

    def get_in(self, node: ModuleSourceSet) -> List[ModuleSourceSet]:
        if node.kind is SourceKind.PRODUCTION:
            modules = self._production_dependencies_of(node.module)
        else:
            modules = self._dependencies_of(node.module)

        deps: List[ModuleSourceSet] = []
        for module in modules:
            self._add_if_any(deps, module, node.kind)
        if node.kind is SourceKind.TEST:
            self._add_if_any(deps, node.module, SourceKind.PRODUCTION)
        return deps


def create_source_set_graph(modules: Iterable[Hashable], dependencies_of: DependenciesOf,
                            has_sources: HasSources,
                            production_dependencies_of: Optional[DependenciesOf] = None) -> nx.DiGraph:
    """Build the frozen source set dependency graph of a module list"""
    semi_graph = SourceSetSemiGraph(modules, dependencies_of, has_sources, production_dependencies_of)
    return build_graph(CachingSemiGraph(semi_graph))


def get_sorted_source_set_chunks(modules: Iterable[Hashable], dependencies_of: DependenciesOf,
                                 has_sources: HasSources,
                                 production_dependencies_of: Optional[DependenciesOf] = None) -> List[Chunk]:
    """Source set chunks in build order"""
    graph = create_source_set_graph(modules, dependencies_of, has_sources, production_dependencies_of)
    logger.debug(f"Source set graph has {graph.number_of_nodes()} nodes and {graph.number_of_edges()} edges")
    return get_sorted_chunks(graph)

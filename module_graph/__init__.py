"""
Module Graph
Dependency ordering and circular dependency analysis for build modules
"""

from .chunks import Chunk, ChunkGraph, compute_chunks, to_chunk_graph
from .cycle_detector import CycleDetector, ProbeResult, get_sorted_chunks, would_create_cycle
from .dfst import DFSTBuilder, sort_chunks, topological_sort
from .errors import (
    CallerMisuseError,
    InternalConsistencyError,
    ModuleGraphError,
    ProjectFormatError,
    SelfDependencyError,
    UnknownNodeError,
)
from .graph_builder import CachingSemiGraph, FunctionSemiGraph, build_graph, create_graph
from .project import Module, ModuleRegistry
from .source_sets import ModuleSourceSet, SourceKind, create_source_set_graph, get_sorted_source_set_chunks

__all__ = [
    'CachingSemiGraph', 'CallerMisuseError', 'Chunk', 'ChunkGraph', 'CycleDetector', 'DFSTBuilder',
    'FunctionSemiGraph', 'InternalConsistencyError', 'Module', 'ModuleGraphError', 'ModuleRegistry',
    'ModuleSourceSet', 'ProbeResult', 'ProjectFormatError', 'SelfDependencyError', 'SourceKind',
    'UnknownNodeError', 'build_graph', 'compute_chunks', 'create_graph', 'create_source_set_graph',
    'get_sorted_chunks', 'get_sorted_source_set_chunks', 'sort_chunks', 'to_chunk_graph',
    'topological_sort', 'would_create_cycle',
]

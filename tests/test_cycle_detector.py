"""Tests for the cycle detector facade and the circularity probe."""

import copy

import pytest

from module_graph.chunks import compute_chunks
from module_graph.cycle_detector import (
    CycleDetector,
    EdgeOverlay,
    ProbeResult,
    get_sorted_chunks,
    would_create_cycle,
)
from module_graph.errors import SelfDependencyError, UnknownNodeError
from module_graph.graph_builder import FunctionSemiGraph, create_graph


def _deps(edges):
    return lambda node: edges.get(node, [])


class TestGetSortedChunks:
    def test_abcd_scenario(self, abcd_graph):
        ordered = get_sorted_chunks(abcd_graph)
        assert len(ordered) == 2
        assert ordered[0].node_set == {'A', 'B', 'C'}
        assert ordered[1].node_set == {'D'}

    def test_pipeline_idempotent(self, random_graph):
        first = get_sorted_chunks(random_graph)
        second = get_sorted_chunks(random_graph)
        assert first == second
        assert [c.nodes for c in first] == [c.nodes for c in second]


class TestEdgeOverlay:
    def test_adds_only_to_source(self):
        base = FunctionSemiGraph(['a', 'b', 'c'], _deps({'a': ['c']}))
        overlay = EdgeOverlay(base, 'a', 'b')
        assert overlay.get_in('a') == ['c', 'b']
        assert list(overlay.get_in('b')) == []
        assert list(overlay.get_nodes()) == ['a', 'b', 'c']

    def test_existing_edge_not_duplicated(self):
        overlay = EdgeOverlay(FunctionSemiGraph(['a', 'b'], _deps({'a': ['b']})), 'a', 'b')
        assert overlay.get_in('a') == ['b']


class TestWouldCreateCycle:
    def test_new_cycle_detected(self):
        edges = {'B': ['C'], 'C': ['A']}
        result = would_create_cycle(['A', 'B', 'C'], _deps(edges), 'A', 'B')

        assert result.creates_cycle
        assert set(result.witness) >= {'A', 'B'}
        assert result.chunk.node_set == {'A', 'B', 'C'}

    def test_matches_direct_computation(self):
        nodes = ['A', 'B', 'C', 'D']
        edges = {'B': ['C'], 'C': ['A'], 'D': ['A']}
        result = would_create_cycle(nodes, _deps(edges), 'A', 'B')

        augmented = dict(edges, A=['B'])
        direct = compute_chunks(create_graph(nodes, _deps(augmented)))
        chunk_of_a = next(chunk for chunk in direct if 'A' in chunk)
        assert 'B' in chunk_of_a
        assert result.chunk == chunk_of_a

    def test_no_path_means_no_cycle(self):
        nodes = ['A', 'B', 'C']
        edges = {'A': ['C'], 'B': ['C']}
        result = would_create_cycle(nodes, _deps(edges), 'A', 'B')

        assert result is ProbeResult.NO_CYCLE
        assert not result
        assert result.witness is None

        augmented = dict(edges, A=['C', 'B'])
        direct = compute_chunks(create_graph(nodes, _deps(augmented)))
        assert not any(chunk.is_cyclic for chunk in direct)

    def test_pre_existing_cycle_is_not_new(self):
        edges = {'A': ['B'], 'B': ['A']}
        assert would_create_cycle(['A', 'B'], _deps(edges), 'A', 'B') is ProbeResult.NO_CYCLE
        assert would_create_cycle(['A', 'B'], _deps(edges), 'B', 'A') is ProbeResult.NO_CYCLE

    def test_self_dependency_rejected(self):
        calls = []

        def deps(node):
            calls.append(node)
            return []

        with pytest.raises(SelfDependencyError):
            would_create_cycle(['A'], deps, 'A', 'A')
        assert calls == []

    def test_unknown_node_rejected(self):
        with pytest.raises(UnknownNodeError):
            would_create_cycle(['A'], _deps({}), 'A', 'Z')

    def test_unknown_node_rejected_before_reading_dependencies(self):
        calls = []

        def deps(node):
            calls.append(node)
            return []

        with pytest.raises(UnknownNodeError) as exc_info:
            would_create_cycle(['A', 'B'], deps, 'A', 'Z')
        assert exc_info.value.node == 'Z'
        assert calls == []

        with pytest.raises(UnknownNodeError):
            would_create_cycle(['A', 'B'], deps, 'Z', 'B')
        assert calls == []

    def test_caller_state_untouched(self):
        edges = {'B': ['A'], 'A': []}
        snapshot = copy.deepcopy(edges)
        would_create_cycle(['A', 'B'], _deps(edges), 'A', 'B')
        assert edges == snapshot

    def test_caller_state_untouched_on_error(self):
        edges = {'A': ['B']}

        def deps(node):
            if node == 'B':
                raise RuntimeError("model unavailable")
            return edges.get(node, [])

        with pytest.raises(RuntimeError):
            would_create_cycle(['A', 'B'], deps, 'B', 'A')
        assert edges == {'A': ['B']}

    def test_dependencies_read_once_per_node(self):
        calls = {}

        def deps(node):
            calls[node] = calls.get(node, 0) + 1
            return {'B': ['A']}.get(node, [])

        would_create_cycle(['A', 'B'], deps, 'A', 'B')
        assert calls == {'A': 1, 'B': 1}


class TestCycleDetector:
    def test_sorted_and_cyclic_chunks(self):
        detector = CycleDetector(['A', 'B', 'C', 'D'], _deps({'A': ['B'], 'B': ['C'], 'C': ['A'], 'D': ['A']}))

        assert [c.node_set for c in detector.sorted_chunks()] == [{'A', 'B', 'C'}, {'D'}]
        assert [c.node_set for c in detector.cyclic_chunks()] == [{'A', 'B', 'C'}]
        assert detector.chunk_of('B').node_set == {'A', 'B', 'C'}
        assert not detector.is_dag()

    def test_chunk_of_unknown(self):
        with pytest.raises(UnknownNodeError):
            CycleDetector(['A'], _deps({})).chunk_of('Z')

    def test_probe(self):
        detector = CycleDetector(['app', 'lib'], _deps({'app': ['lib']}))
        assert detector.is_dag()
        assert detector.would_create_cycle('lib', 'app').chunk.node_set == {'app', 'lib'}
        assert not detector.would_create_cycle('app', 'lib')

    def test_analysis_summary(self):
        detector = CycleDetector(['a', 'b', 'c'], _deps({'a': ['b'], 'b': ['a'], 'c': ['c']}))
        summary = detector.get_analysis_summary()

        assert summary['chunks']['count'] == 2
        assert summary['chunks']['cyclic_count'] == 2
        assert summary['chunks']['largest_cyclic_size'] == 2
        assert summary['build_order'] == [['a', 'b'], ['c']]
        assert summary['is_dag'] is False
        assert summary['graph_stats']['total_nodes'] == 3

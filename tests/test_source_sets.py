"""Tests for production/test source set expansion."""

from module_graph.chunks import compute_chunks
from module_graph.source_sets import (
    ModuleSourceSet,
    SourceKind,
    SourceSetSemiGraph,
    create_source_set_graph,
    get_sorted_source_set_chunks,
)

PROD = SourceKind.PRODUCTION
TEST = SourceKind.TEST


def _has(kinds):
    return lambda module, kind: kind in kinds.get(module, ())


def _deps(edges):
    return lambda module: edges.get(module, [])


class TestSourceSetSemiGraph:
    def test_nodes_only_for_existing_sources(self):
        semi_graph = SourceSetSemiGraph(['m', 'n'], _deps({}), _has({'m': (PROD, TEST), 'n': (TEST,)}))
        assert semi_graph.get_nodes() == [
            ModuleSourceSet('m', PROD),
            ModuleSourceSet('m', TEST),
            ModuleSourceSet('n', TEST),
        ]

    def test_same_kind_edges(self):
        semi_graph = SourceSetSemiGraph(['app', 'lib'], _deps({'app': ['lib']}), _has({'app': (PROD,), 'lib': (PROD, TEST)}))
        assert semi_graph.get_in(ModuleSourceSet('app', PROD)) == [ModuleSourceSet('lib', PROD)]

    def test_missing_kind_on_dependency_skipped(self):
        semi_graph = SourceSetSemiGraph(['app', 'lib'], _deps({'app': ['lib']}), _has({'app': (PROD, TEST), 'lib': (PROD,)}))
        assert semi_graph.get_in(ModuleSourceSet('app', TEST)) == [ModuleSourceSet('app', PROD)]

    def test_str(self):
        assert str(ModuleSourceSet('core', TEST)) == "core (test)"


class TestSourceSetGraph:
    def test_single_module_scenario(self):
        graph = create_source_set_graph(['M'], _deps({}), _has({'M': (PROD, TEST)}))
        prod, test = ModuleSourceSet('M', PROD), ModuleSourceSet('M', TEST)

        assert set(graph.nodes()) == {prod, test}
        assert list(graph.edges()) == [(test, prod)]

        ordered = get_sorted_source_set_chunks(['M'], _deps({}), _has({'M': (PROD, TEST)}))
        assert [chunk.nodes for chunk in ordered] == [(prod,), (test,)]
        assert not any(chunk.is_cyclic for chunk in ordered)

    def test_cycle_only_in_test_sources(self):
        # a's production code uses b; b's tests use a
        modules = ['a', 'b']
        all_deps = _deps({'a': ['b'], 'b': ['a']})
        production_deps = _deps({'a': ['b']})
        has = _has({'a': (PROD, TEST), 'b': (PROD, TEST)})

        chunks = compute_chunks(create_source_set_graph(modules, all_deps, has, production_deps))
        cyclic = [chunk for chunk in chunks if chunk.is_cyclic]

        assert [chunk.node_set for chunk in cyclic] == [{ModuleSourceSet('a', TEST), ModuleSourceSet('b', TEST)}]

    def test_without_production_filter_both_kinds_cycle(self):
        chunks = compute_chunks(create_source_set_graph(
            ['a', 'b'], _deps({'a': ['b'], 'b': ['a']}), _has({'a': (PROD, TEST), 'b': (PROD, TEST)})
        ))
        cyclic = {chunk.node_set for chunk in chunks if chunk.is_cyclic}
        assert cyclic == {
            frozenset({ModuleSourceSet('a', PROD), ModuleSourceSet('b', PROD)}),
            frozenset({ModuleSourceSet('a', TEST), ModuleSourceSet('b', TEST)}),
        }

    def test_build_order_respects_test_to_production_edge(self):
        ordered = get_sorted_source_set_chunks(
            ['app', 'lib'], _deps({'app': ['lib']}), _has({'app': (PROD, TEST), 'lib': (PROD, TEST)})
        )
        position = {chunk.nodes[0]: i for i, chunk in enumerate(ordered)}
        assert position[ModuleSourceSet('lib', PROD)] < position[ModuleSourceSet('app', PROD)]
        assert position[ModuleSourceSet('lib', TEST)] < position[ModuleSourceSet('app', TEST)]
        assert position[ModuleSourceSet('app', PROD)] < position[ModuleSourceSet('app', TEST)]
        assert position[ModuleSourceSet('lib', PROD)] < position[ModuleSourceSet('lib', TEST)]

"""Shared fixtures for module graph tests."""

import networkx as nx
import pytest

from module_graph.graph_builder import create_graph


def _graph_from_edges(nodes, edges):
    adjacency = {node: [] for node in nodes}
    for source, target in edges:
        adjacency[source].append(target)
    return create_graph(nodes, lambda node: adjacency[node])


@pytest.fixture
def make_graph():
    """Build a snapshot from a node list and (dependent, dependency) pairs."""
    return _graph_from_edges


@pytest.fixture
def abcd_graph():
    # A, B and C depend on each other; D depends on A
    return _graph_from_edges(['A', 'B', 'C', 'D'], [('A', 'B'), ('B', 'C'), ('C', 'A'), ('D', 'A')])


@pytest.fixture(params=[1, 7, 42, 1234])
def random_graph(request):
    raw = nx.gnp_random_graph(30, 0.08, seed=request.param, directed=True)
    nodes = list(raw.nodes())
    return create_graph(nodes, lambda node: list(raw.successors(node)))

import matplotlib

matplotlib.use('Agg')

import pytest

from csp_engine import GraphColoringSolver, GraphModel


@pytest.fixture
def make_solver():
    """Factory: make_solver(node_ids, edges, palette, record=None).

    When record is a list, every step is appended to it as (vertex, color).
    """
    def factory(node_ids, edges, palette, record=None):
        graph = GraphModel(node_ids, edges)
        on_step = None
        if record is not None:
            on_step = lambda vertex, color: record.append((vertex, color))
        return GraphColoringSolver(graph, palette, on_step=on_step)
    return factory


@pytest.fixture
def path_graph():
    return ['A', 'B', 'C'], [('A', 'B'), ('B', 'C')]


@pytest.fixture
def triangle():
    return ['A', 'B', 'C'], [('A', 'B'), ('B', 'C'), ('C', 'A')]

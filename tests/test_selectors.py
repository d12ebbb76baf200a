import pytest

from monksearch.config import SelectorType
from monksearch.errors import ConfigurationError
from monksearch.graph import Graph
from monksearch.selectors import GreedySelector, SimpleSelector, make_selector


@pytest.fixture
def triangle():
    # 0->1, 0->2, 1->2, 2->0
    return Graph([[1, 2], [2], [0]])


def test_simple_selector_lists_contaminated_in_order(triangle):
    assert SimpleSelector().select_order(triangle, (0, 2, 1), (0, 0, 0), 1) == [1, 2]


def test_greedy_prefers_blocking_then_outdegree(triangle):
    indegree = tuple(triangle.indegree())
    assert indegree == (1, 1, 2)
    # One pursuer: 0 and 2 each block one vertex, 0 has the larger outdegree
    assert GreedySelector().select_order(triangle, indegree, indegree, 1) == [0, 2]


def test_greedy_breaks_ties_on_lowest_vertex(triangle):
    indegree = tuple(triangle.indegree())
    assert GreedySelector().select_order(triangle, indegree, indegree, 2) == [0, 1, 2]


def test_greedy_falls_back_to_lowest_contaminated():
    g = Graph([[], [], []])
    assert GreedySelector().select_order(g, (0, 1, 1), (0, 0, 0), 1) == [1]


def test_greedy_on_clean_graph(triangle):
    assert GreedySelector().select_order(triangle, (0, 0, 0), (0, 0, 0), 1) == []


def test_completeness_flags():
    assert SimpleSelector.complete
    assert not GreedySelector.complete


def test_make_selector():
    assert isinstance(make_selector(SelectorType.SIMPLE), SimpleSelector)
    assert isinstance(make_selector(SelectorType.GREEDY), GreedySelector)
    with pytest.raises(ConfigurationError):
        make_selector(None)

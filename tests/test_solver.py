import logging

import networkx as nx
import pytest

from monksearch.config import OuterSearch, SolverConfig
from monksearch.errors import StrategyVerificationError
from monksearch.graph import Graph
from monksearch.solver import Solver, solve
from monksearch.strategy import Strategy


def _widen(strategy):
    return Strategy.from_days(day + (day[-1],) for day in strategy.days)


def test_chain_needs_one_pursuer(chain):
    solver = Solver(SolverConfig.brute_force())
    strategy = solver.solve(chain)
    assert strategy.pursuer_count == 1
    assert strategy.verify(chain)

    [report] = solver.reports
    assert (report.lower_bound, report.upper_bound, report.estimate) == (1, 5, 1)
    assert report.pursuers == 1
    assert report.certified
    assert report.trials[-1].found


def test_greedy_search_on_chain(chain):
    strategy = Solver(SolverConfig.heuristic()).solve(chain)
    assert strategy.pursuer_count == 1
    assert strategy.days == [(1,), (2,), (3,), (1,), (2,), (3,)]
    assert strategy.verify(chain)


def test_directed_cycle():
    cycle = Graph([[1], [2], [0]])
    strategy = solve(cycle, SolverConfig.brute_force())
    assert strategy.pursuer_count == 1
    assert strategy.verify(cycle)


@pytest.mark.parametrize("preset", [SolverConfig.brute_force, SolverConfig.heuristic])
def test_complete_digraph(complete3, preset):
    strategy = Solver(preset()).solve(complete3)
    assert strategy.pursuer_count == 2
    assert strategy.verify(complete3)


def test_singletons_follow_topological_order():
    # Vertex 3 points at three isolated vertices
    g = Graph.from_edges(4, [(3, 0), (3, 1), (3, 2)])
    solver = Solver()
    strategy = solver.solve(g)
    assert strategy.days == [(3,), (0,), (1,), (2,)]
    assert strategy.verify(g)
    assert [r.vertices for r in solver.reports] == [(3,), (0,), (1,), (2,)]


def test_self_loop_singleton():
    g = Graph([[0]])
    strategy = solve(g)
    assert strategy.days == [(0,)]
    assert strategy.verify(g)


def test_empty_graph():
    strategy = solve(Graph([]))
    assert strategy.length == 0


def test_node_budget_makes_failures_inconclusive(complete3):
    solver = Solver(SolverConfig.brute_force(node_budget=1))
    strategy = solver.solve(complete3)
    # p=2 is cut short, p=3 covers every vertex on the first day
    assert strategy.pursuer_count == 3
    assert strategy.verify(complete3)
    [report] = solver.reports
    assert [t.pursuers for t in report.trials] == [2, 3]
    assert not report.trials[0].conclusive
    assert not report.certified


def test_search_for_fixed_pursuer_count(complete3):
    solver = Solver(SolverConfig.brute_force())
    assert solver.search(complete3, 1) is None
    strategy = solver.search(complete3, 2)
    assert strategy is not None and strategy.verify(complete3)


def test_binary_search_logs_progress(chain, caplog):
    with caplog.at_level(logging.INFO, logger="monksearch.solver"):
        Solver(SolverConfig(outer_search=OuterSearch.BINARY)).solve(chain)
    messages = [r.getMessage() for r in caplog.records]
    assert "Trying with 1 pursuers." in messages
    assert "Successful." in messages


def test_lower_bound_is_carried_between_components():
    # Two 2-cycles, the first needs 1 pursuer and feeds the second
    g = Graph.from_edges(4, [(0, 1), (1, 0), (1, 2), (2, 3), (3, 2)])
    solver = Solver(SolverConfig.brute_force())
    strategy = solver.solve(g)
    assert strategy.verify(g)
    assert [r.start for r in solver.reports] == [1, 1]


def test_verify_option_rejects_losing_strategy(chain, monkeypatch):
    monkeypatch.setattr(Strategy, "merge", classmethod(lambda cls, strategies: cls.from_days([[0]])))
    with pytest.raises(StrategyVerificationError) as excinfo:
        Solver(SolverConfig.brute_force(verify=True)).solve(chain)
    assert excinfo.value.states is not None


@pytest.mark.parametrize("seed", range(20))
def test_random_graphs(seed):
    nxg = nx.gnp_random_graph(6, 0.35, seed=seed, directed=True)
    g = Graph.from_networkx(nxg)

    strategy = Solver(SolverConfig.brute_force(verify=True)).solve(g)
    assert strategy.verify(g)
    # One more pursuer never hurts
    assert _widen(strategy).verify(g)

    components = g.strongly_connected_components()
    assert strategy.pursuer_count >= max(c.lower_bound() if c.vertex_count > 1 else 1 for c in components)
    assert strategy.pursuer_count <= max(c.vertex_count for c in components)


@pytest.mark.parametrize("seed", range(10))
def test_heuristic_finds_valid_strategies(seed):
    g = Graph.from_networkx(nx.gnp_random_graph(7, 0.3, seed=seed, directed=True))
    solver = Solver(SolverConfig.heuristic())
    strategy = solver.solve(g)
    assert strategy.verify(g)
    for report in solver.reports:
        assert report.lower_bound <= report.pursuers <= report.upper_bound


def test_depth_cap_makes_failures_inconclusive():
    # One pursuer sweeps a path of n vertices in 2n-4 days at best: 8 days here,
    # while a multiplier of 1 stops the search after 6 completed days
    path = Graph.from_edges(6, [(v, v + 1) for v in range(5)] + [(v + 1, v) for v in range(5)])
    solver = Solver(SolverConfig.brute_force(max_depth_multiplier=1))
    strategy = solver.solve(path)

    [report] = solver.reports
    first = report.trials[0]
    assert first.pursuers == 1
    assert not first.found
    assert not first.conclusive
    assert not report.certified
    assert strategy.pursuer_count >= 2
    assert strategy.verify(path)

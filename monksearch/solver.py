"""
Search engine for the Monk problem.

The graph is split into strongly connected components which are cleaned one
after the other in topological order. For each component the solver looks for
the smallest number of pursuers p that admits a winning strategy, trying
candidate values of p with a linear or binary outer search. Each trial is a
depth-first search over days: pursuers are placed one at a time in the order
proposed by a selector, and when the last pursuer of a day is placed the
search moves to the next day. Day states already seen are skipped with the
help of a state inspector.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import OuterSearch, SolverConfig
from .errors import StrategyVerificationError
from .inspectors import make_state_inspector
from .selectors import make_selector
from .strategy import Strategy
from .verifier import Verifier

LOGGER = logging.getLogger(__name__)


@dataclass
class Trial:
    """One attempt at cleaning a component with a fixed number of pursuers."""

    pursuers: int
    found: bool
    length: int = 0
    nodes: int = 0
    # A failed trial is conclusive only if nothing was pruned by approximation or a limit
    conclusive: bool = True


@dataclass
class SearchReport:
    """Bookkeeping for the outer search over one component."""

    vertices: Tuple[int, ...]
    lower_bound: int
    upper_bound: int
    estimate: int
    start: int
    trials: List[Trial] = field(default_factory=list)
    pursuers: int = 0

    @property
    def certified(self) -> bool:
        """False when some failed trial may have missed an existing strategy."""
        return all(t.found or t.conclusive for t in self.trials)


class _Frame:
    __slots__ = ("current", "nxt", "placed", "depth", "days", "seen", "order")

    def __init__(self, current, nxt, placed, depth, days, seen, order):
        self.current = current
        self.nxt = nxt
        self.placed = placed
        self.depth = depth
        self.days = days
        self.seen = seen
        self.order = order


class _PursuitSearch:
    """
    Depth-first search for a strategy with a fixed number of pursuers.

    States are tuples: current[v] is the number of free incoming edges of v
    today (0 means clean) and nxt[v] the number of free incoming edges v
    will have tomorrow given the pursuers placed so far today. Every frame
    owns its tuples, so backtracking is just popping the frame stack.
    """

    def __init__(self, graph, pursuers, selector, inspector, max_depth, node_budget=None):
        self.graph = graph
        self.pursuers = pursuers
        self.selector = selector
        self.inspector = inspector
        self.max_depth = max_depth
        self.node_budget = node_budget
        self.indegree = tuple(graph.indegree())

        self.nodes = 0
        self.depth_capped = False
        self.budget_exhausted = False

    def transition(self, state):
        """
        Free incoming edges for the day after ``state``: start from the
        indegree and block every edge leaving a vertex that is clean in
        ``state``.
        """
        nxt = list(self.indegree)
        for vertex, free in enumerate(state):
            if free == 0:
                for nb in self.graph.neighbours(vertex):
                    nxt[nb] -= 1
        return tuple(nxt)

    def decontaminate(self, current, nxt, vertex):
        """Place a pursuer on ``vertex``: it is clean today and its edges are blocked tomorrow."""
        if current[vertex] == 0:
            return current, nxt
        current = list(current)
        current[vertex] = 0
        nxt = list(nxt)
        for nb in self.graph.neighbours(vertex):
            nxt[nb] -= 1
        return tuple(current), tuple(nxt)

    def _frame(self, current, nxt, placed, depth, days, seen):
        order = self.selector.select_order(self.graph, current, nxt, self.pursuers - len(placed))
        return _Frame(current, nxt, placed, depth, days, seen, iter(order))

    def open_day(self, current, depth, days):
        """
        Start a new day in state ``current``.

        Returns the finished list of days if the remaining contaminated
        vertices can all be covered today, a frame to explore otherwise, or
        None when this day is pruned.
        """
        if depth > self.max_depth:
            self.depth_capped = True
            return None

        if self.inspector.is_visited(current):
            return None
        self.inspector.mark_visited(current)

        contaminated = [v for v, free in enumerate(current) if free > 0]
        if len(contaminated) <= self.pursuers:
            if LOGGER.isEnabledFor(logging.DEBUG):
                LOGGER.debug("Strategy found at depth %d, final day %s", depth, contaminated)
            if not contaminated:
                return days
            return days + (tuple(contaminated),)

        return self._frame(current, self.transition(current), (), depth, days, set())

    def run(self):
        """The days of a winning strategy in local labels, or None."""
        # Day one: everything is contaminated, even vertices without incoming edges
        first = tuple(max(1, d) for d in self.indegree)
        opened = self.open_day(first, 0, ())
        if not isinstance(opened, _Frame):
            return opened

        stack = [opened]
        while stack:
            frame = stack[-1]
            vertex = next(frame.order, None)
            if vertex is None:
                stack.pop()
                continue

            self.nodes += 1
            if self.node_budget is not None and self.nodes > self.node_budget:
                self.budget_exhausted = True
                LOGGER.debug("Abort. Node budget of %d exhausted.", self.node_budget)
                return None

            placed = frame.placed + (vertex,)
            # The same set of placements reached in another order leads to the same state
            key = frozenset(placed)
            if key in frame.seen:
                continue
            frame.seen.add(key)

            current, nxt = self.decontaminate(frame.current, frame.nxt, vertex)
            if len(placed) < self.pursuers:
                stack.append(self._frame(current, nxt, placed, frame.depth, frame.days, frame.seen))
                continue

            # Last pursuer of the day: tomorrow's state becomes today's
            opened = self.open_day(nxt, frame.depth + 1, frame.days + (placed,))
            if opened is None:
                continue
            if not isinstance(opened, _Frame):
                return opened
            stack.append(opened)

        return None


class Solver:
    def __init__(self, config: Optional[SolverConfig] = None):
        self.config = config or SolverConfig()
        self.reports: List[SearchReport] = []

    def solve(self, graph) -> Strategy:
        """Find a winning strategy for the whole graph, component by component."""
        self.reports = []
        if graph.vertex_count == 0:
            return Strategy(1)

        components = graph.strongly_connected_components()
        LOGGER.info("Number of strong components: %d", len(components))

        strategies = []
        # Pursuers needed by the components solved so far
        needed = 0
        for component in components:
            LOGGER.debug("Component with %d vertices:\n%s", component.vertex_count, component)
            if component.is_singleton():
                # Trivial strategy: one pursuer on the only vertex
                strategy = Strategy.singleton(component)
                self.reports.append(
                    SearchReport(
                        vertices=(component.translate(0),),
                        lower_bound=1,
                        upper_bound=1,
                        estimate=1,
                        start=1,
                        pursuers=1,
                    )
                )
            else:
                floor = needed if self.config.carry_lower_bound else 0
                strategy = self.solve_component(component, floor)
            needed = max(needed, strategy.pursuer_count)
            strategies.append(strategy)

        merged = Strategy.merge(strategies)

        if self.config.verify:
            verifier = Verifier(graph)
            result = verifier.check(merged.pursuer_count, merged.length, merged.days)
            if not result.winning:
                raise StrategyVerificationError(
                    f"Solver produced a losing strategy:\n{verifier.states_string()}",
                    states=result.states,
                )
        return merged

    def solve_component(self, component, floor=0) -> Strategy:
        """
        Search for the smallest pursuer count that cleans a strongly connected
        component. The search starts no lower than ``floor``, the number of
        pursuers the merged strategy needs anyway.
        """
        lower = component.lower_bound()
        upper = component.upper_bound()
        start = min(max(floor, lower), upper)
        report = SearchReport(
            vertices=tuple(component.translate(v) for v in range(component.vertex_count)),
            lower_bound=lower,
            upper_bound=upper,
            estimate=component.estimate(),
            start=start,
        )
        self.reports.append(report)
        LOGGER.info("Lower: %d Upper: %d Estimate: %d", lower, upper, report.estimate)

        if self.config.outer_search is OuterSearch.LINEAR:
            strategy = self.linear_search(start, upper, component, report)
        else:
            strategy = self.binary_search(start, upper, component, report)

        if strategy is None:
            # Only reachable if every trial up to |V| pursuers was cut short
            LOGGER.warning("No strategy found for component %s, placing a pursuer on every vertex", report.vertices)
            strategy = Strategy.all_at_once(component)

        report.pursuers = strategy.pursuer_count
        if not report.certified:
            LOGGER.warning(
                "Component %s solved with %d pursuers, but some failed trials were inconclusive",
                report.vertices,
                report.pursuers,
            )
        return strategy

    def linear_search(self, lower, upper, component, report=None) -> Optional[Strategy]:
        """Try every pursuer count from ``lower`` up to ``upper``; the first success wins."""
        for pursuers in range(lower, upper + 1):
            strategy = self.search(component, pursuers, report)
            if strategy is not None:
                return strategy
        return None

    def binary_search(self, lower, upper, component, report=None) -> Optional[Strategy]:
        """
        Binary search over the pursuer count, starting at the estimate.

        Relies on solvability being monotone in the pursuer count. A failure
        found with an approximate inspector or cut short by a limit may be a
        false negative; the search still moves past it but the trial is
        recorded as inconclusive.
        """
        best = None
        pursuers = min(max(component.estimate(), lower), upper)
        while lower <= upper:
            strategy = self.search(component, pursuers, report)
            if strategy is not None:
                best = strategy
                upper = pursuers - 1
            else:
                if report is not None and not report.trials[-1].conclusive:
                    LOGGER.warning(
                        "Failure with %d pursuers is not a proof of infeasibility, raising the lower bound anyway",
                        pursuers,
                    )
                lower = pursuers + 1
            pursuers = (lower + upper) // 2
        return best

    def search(self, component, pursuers, report=None) -> Optional[Strategy]:
        """A winning strategy for ``component`` with exactly ``pursuers`` pursuers, or None."""
        LOGGER.info("Trying with %d pursuers.", pursuers)
        selector = make_selector(self.config.selector)
        inspector = make_state_inspector(self.config.state_inspector, component.vertex_count, self.config)
        pursuit = _PursuitSearch(
            component,
            pursuers,
            selector,
            inspector,
            max_depth=self.config.max_depth_multiplier * component.vertex_count,
            node_budget=self.config.node_budget,
        )
        days = pursuit.run()

        strategy = None
        if days is not None:
            strategy = Strategy(pursuers, component)
            for day in days:
                strategy.add_last(day)
            LOGGER.info("Successful.")
        else:
            LOGGER.info("Failed.")

        if report is not None:
            report.trials.append(
                Trial(
                    pursuers=pursuers,
                    found=strategy is not None,
                    length=0 if strategy is None else strategy.length,
                    nodes=pursuit.nodes,
                    conclusive=(
                        inspector.exact
                        and selector.complete
                        and not pursuit.depth_capped
                        and not pursuit.budget_exhausted
                    ),
                )
            )
        return strategy


def solve(graph, config: Optional[SolverConfig] = None) -> Strategy:
    """Shortcut for ``Solver(config).solve(graph)``."""
    return Solver(config).solve(graph)

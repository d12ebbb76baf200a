"""
Selectors decide in which order the solver tries to place the next pursuer.

The solver tries the first vertex of the returned order, and moves on to the
next one when that branch fails.
"""

import heapq

from .config import SelectorType
from .errors import ConfigurationError


class Selector:
    #: True when the order contains every vertex that could usefully take a pursuer
    complete = True

    def select_order(self, graph, current, nxt, pursuers):
        """
        Order in which to try the still contaminated vertices.

        ``current`` holds the free incoming edges of today, ``nxt`` the free
        incoming edges projected for tomorrow given today's placements, and
        ``pursuers`` the number of pursuers still to place today.
        """
        raise NotImplementedError


class SimpleSelector(Selector):
    """Contaminated vertices in ascending order. Used for exhaustive search."""

    complete = True

    def select_order(self, graph, current, nxt, pursuers):
        return [v for v in range(len(current)) if current[v] > 0]


class _Candidate:
    """A vertex wrapped for the heap, ordered by blocking, then outdegree, then lowest id."""

    __slots__ = ("vertex", "blocking", "outdegree")

    def __init__(self, vertex, blocking, outdegree):
        self.vertex = vertex
        self.blocking = blocking
        self.outdegree = outdegree

    def key(self):
        return (self.blocking, self.outdegree, -self.vertex)

    def __lt__(self, other):
        # heapq pops the smallest item, so "smaller" means "better" here
        return self.key() > other.key()


class GreedySelector(Selector):
    """
    Prefer vertices whose pursuer lets the most neighbours get clean tomorrow.

    blocking(v) counts the out-neighbours u of v that are still exposed
    tomorrow (nxt[u] > 0) but by no more free edges than there are pursuers
    left today. Only vertices with positive blocking are offered; if there
    are none, the lowest contaminated vertex is offered so the search can
    still make a move.
    """

    complete = False

    def select_order(self, graph, current, nxt, pursuers):
        heap = []
        fallback = None
        for v in range(len(current)):
            if current[v] == 0:
                # v is already clean
                continue
            if fallback is None:
                fallback = v

            blocking = 0
            for nb in graph.neighbours(v):
                if 0 < nxt[nb] <= pursuers:
                    blocking += 1

            if blocking > 0:
                heapq.heappush(heap, _Candidate(v, blocking, graph.outdegree(v)))

        if not heap:
            return [] if fallback is None else [fallback]
        return [heapq.heappop(heap).vertex for _ in range(len(heap))]


def make_selector(kind) -> Selector:
    if kind is SelectorType.SIMPLE:
        return SimpleSelector()
    if kind is SelectorType.GREEDY:
        return GreedySelector()
    raise ConfigurationError(f"Unknown selector type {kind!r}")

"""
Independent check of a strategy.

The decontaminated vertices after day d form a bit vector s_d. With M the
adjacency matrix (M[v][u] = 1 iff u->v) and w the indegree vector,

    s_1     = e(seed[0])
    s_{d+1} = (M s_d == w)  OR  e(seed[d])

where e() marks the vertices holding a pursuer that day. A vertex stays clean
exactly when every one of its incoming edges starts in a clean vertex; a vertex
without incoming edges can never be entered again once it has been checked.
The strategy wins if the last state is all ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

from .errors import DimensionMismatchError


@dataclass
class Verification:
    winning: bool
    states: List[np.ndarray] = field(default_factory=list)


class Verifier:
    def __init__(self, graph):
        """Verifier for ``graph``; call ``verify`` for every strategy to check."""
        self.vertex_count = graph.vertex_count
        self.matrix = graph.adjacency_matrix().astype(np.int64)
        self.weights = self.matrix.sum(axis=1)
        self.states: List[np.ndarray] = []

    def _expand(self, vertices):
        # Bit vector with a one on every vertex in the seed row
        s = np.zeros(self.vertex_count, dtype=np.uint8)
        s[np.asarray(vertices, dtype=np.int64)] = 1
        return s

    def _step(self, s):
        # Reduced multiplication: a row survives only if all its incoming edges come from ones
        return (self.matrix @ s.astype(np.int64) == self.weights).astype(np.uint8)

    def check(self, pursuer_count, length, seed) -> Verification:
        """
        Replay ``seed`` (``length`` rows of ``pursuer_count`` vertices, 0-indexed)
        and return the verdict with the state after every day.
        """
        rows = [list(row) for row in seed]
        if len(rows) != length:
            raise DimensionMismatchError(f"Seed has {len(rows)} days, expected {length}")
        if length < 1:
            raise DimensionMismatchError("A strategy must last at least one day")
        for day, row in enumerate(rows):
            if len(row) != pursuer_count:
                raise DimensionMismatchError(
                    f"Day {day} places {len(row)} pursuers, expected {pursuer_count}"
                )
            for vertex in row:
                if vertex < 0 or vertex >= self.vertex_count:
                    raise DimensionMismatchError(
                        f"Day {day} places a pursuer on vertex {vertex}, outside 0..{self.vertex_count - 1}"
                    )

        states = []
        s = self._expand(rows[0])
        states.append(s)
        for row in rows[1:]:
            s = self._step(s) | self._expand(row)
            states.append(s)

        self.states = states
        return Verification(winning=bool(s.all()), states=states)

    def verify(self, pursuer_count, length, seed) -> bool:
        return self.check(pursuer_count, length, seed).winning

    def verify_strategy(self, strategy) -> bool:
        return self.verify(strategy.pursuer_count, strategy.length, strategy.days)

    def states_string(self) -> str:
        """The states of the last check, one day per line: X clean, _ contaminated."""
        lines = []
        for day, state in enumerate(self.states, start=1):
            cells = " ".join("X" if bit else "_" for bit in state)
            lines.append(f"{day:<7}{cells}")
        return "\n".join(lines)

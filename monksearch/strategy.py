"""A strategy says where to place the pursuers on each day."""

from __future__ import annotations

from collections import deque
from typing import Iterable, List, Sequence, Tuple

import numpy as np


class Strategy:
    def __init__(self, pursuer_count: int, graph=None):
        """
        Empty strategy for ``pursuer_count`` pursuers. When ``graph`` is a
        component carrying a translator, vertices added later are translated
        into whole-graph labels.
        """
        if pursuer_count < 1:
            raise ValueError("A strategy needs at least one pursuer")
        self.pursuer_count = pursuer_count
        self.graph = graph
        self._days = deque()

    @classmethod
    def from_days(cls, days: Iterable[Sequence[int]]) -> "Strategy":
        """Strategy over already translated days; every day must have the same width."""
        days = [tuple(int(v) for v in day) for day in days]
        if not days:
            raise ValueError("Cannot infer the pursuer count of an empty strategy")
        strategy = cls(len(days[0]))
        for day in days:
            strategy.add_last(day)
        return strategy

    @classmethod
    def singleton(cls, graph) -> "Strategy":
        """One pursuer on the only vertex of a singleton graph, for one day."""
        if not graph.is_singleton():
            raise ValueError("Singleton strategy requested for a graph with several vertices")
        return cls(1, graph).add_first([0])

    @classmethod
    def all_at_once(cls, graph) -> "Strategy":
        """A pursuer on every vertex for a single day."""
        return cls(max(1, graph.vertex_count), graph).add_first(list(range(graph.vertex_count)))

    @classmethod
    def merge(cls, strategies: Iterable["Strategy"]) -> "Strategy":
        """
        Concatenate strategies in the given order. Days are padded to the
        largest pursuer count by letting the extra pursuers stand on the last
        vertex of that day.
        """
        strategies = list(strategies)
        if not strategies:
            raise ValueError("Nothing to merge")
        width = max(s.pursuer_count for s in strategies)
        merged = cls(width)
        for strategy in strategies:
            for day in strategy.days:
                merged.add_last(day + (day[-1],) * (width - len(day)))
        return merged

    # --- BUILDING ---

    def _prepare(self, vertices) -> Tuple[int, ...]:
        vertices = [int(v) for v in vertices]
        if not vertices or len(vertices) > self.pursuer_count:
            raise ValueError(f"A day needs between 1 and {self.pursuer_count} placements, got {len(vertices)}")
        # Spare pursuers wait on the last vertex of the day
        vertices += [vertices[-1]] * (self.pursuer_count - len(vertices))
        if self.graph is not None:
            vertices = [self.graph.translate(v) for v in vertices]
        return tuple(vertices)

    def add_first(self, vertices) -> "Strategy":
        """Prepend a day."""
        self._days.appendleft(self._prepare(vertices))
        return self

    def add_last(self, vertices) -> "Strategy":
        self._days.append(self._prepare(vertices))
        return self

    # --- QUERIES ---

    @property
    def days(self) -> List[Tuple[int, ...]]:
        return list(self._days)

    @property
    def length(self) -> int:
        return len(self._days)

    def __len__(self):
        return len(self._days)

    def __iter__(self):
        return iter(self._days)

    def __eq__(self, other):
        if not isinstance(other, Strategy):
            return NotImplemented
        return self.pursuer_count == other.pursuer_count and self.days == other.days

    def seed(self) -> np.ndarray:
        """The strategy as a (length x pursuers) matrix, seed[d] = placements on day d."""
        if not self._days:
            return np.zeros((0, self.pursuer_count), dtype=np.int64)
        return np.array(self.days, dtype=np.int64)

    def verify(self, graph) -> bool:
        """True if this strategy decontaminates ``graph``."""
        from .verifier import Verifier

        return Verifier(graph).verify_strategy(self)

    def to_dict(self):
        return {
            "pursuers": self.pursuer_count,
            "length": self.length,
            "days": [list(day) for day in self._days],
        }

    # --- PRINTING ---

    def simple_representation(self) -> str:
        """Days on one line, e.g. ``(1 2) (3 4)``."""
        if not self._days:
            return "empty"
        return " ".join("(" + " ".join(str(v) for v in day) + ")" for day in self._days)

    def __str__(self):
        if not self._days:
            return "empty"
        return "\n".join(" ".join(str(v) for v in day) for day in self._days)

    def __repr__(self):
        return f"Strategy(pursuers={self.pursuer_count}, length={self.length})"

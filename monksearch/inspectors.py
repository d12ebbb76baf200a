"""
State inspectors remember which search states have been visited.

A state is the list of free incoming edges per vertex at the start of a day.
Inspectors only look at which vertices have zero free edges (are clean), so
two states with the same clean set are the same state to them. The clean set
is encoded as an integer with bit v set iff vertex v is clean.
"""

from __future__ import annotations

import numpy as np

from .bloom import BloomFilter
from .config import (
    AUTO_EXACT_LIMIT,
    DEFAULT_BLOOM_ERROR_RATE,
    MAX_INDEXED_VERTICES,
    MIN_BLOOM_CAPACITY,
    StateInspectorType,
)
from .errors import ConfigurationError


def state_key(state) -> int:
    """Bitset of the clean vertices in ``state``."""
    key = 0
    for vertex, free in enumerate(state):
        if free == 0:
            key |= 1 << vertex
    return key


class StateInspector:
    """Interface shared by the inspectors."""

    #: True when ``is_visited`` never reports a state that was not marked
    exact = True

    def is_visited(self, state) -> bool:
        raise NotImplementedError

    def mark_visited(self, state) -> None:
        raise NotImplementedError


class IndexedStateInspector(StateInspector):
    """Exact inspector: one boolean per possible clean set, O(1) lookup, 2^n memory."""

    exact = True

    def __init__(self, vertex_count):
        if vertex_count > MAX_INDEXED_VERTICES:
            raise ConfigurationError(
                f"An indexed state inspector needs 2^{vertex_count} entries; "
                f"use the bloom filter inspector above {MAX_INDEXED_VERTICES} vertices"
            )
        self.visited = np.zeros(2 ** vertex_count, dtype=bool)

    def is_visited(self, state):
        return bool(self.visited[state_key(state)])

    def mark_visited(self, state):
        self.visited[state_key(state)] = True


class ProbabilisticStateInspector(StateInspector):
    """
    Bloom filter inspector: small memory, O(1) lookup, occasional false positives.

    A false positive makes the solver skip a state it never explored. That can
    turn a solvable pursuer count into a reported failure, so results obtained
    with this inspector are not proofs of infeasibility.
    """

    exact = False

    def __init__(self, vertex_count, error_rate=DEFAULT_BLOOM_ERROR_RATE, capacity=None):
        if capacity is None:
            capacity = max(MIN_BLOOM_CAPACITY, 2 * vertex_count)
        self.visited = BloomFilter(error_rate, capacity)

    def is_visited(self, state):
        return state_key(state) in self.visited

    def mark_visited(self, state):
        self.visited.add(state_key(state))


def make_state_inspector(kind, vertex_count, config=None) -> StateInspector:
    """Create a fresh inspector of the requested kind for a graph of ``vertex_count`` vertices."""
    if kind is StateInspectorType.AUTO:
        kind = StateInspectorType.ARRAY if vertex_count <= AUTO_EXACT_LIMIT else StateInspectorType.BLOOM_FILTER
    if kind is StateInspectorType.ARRAY:
        return IndexedStateInspector(vertex_count)
    if kind is StateInspectorType.BLOOM_FILTER:
        if config is None:
            return ProbabilisticStateInspector(vertex_count)
        return ProbabilisticStateInspector(
            vertex_count,
            error_rate=config.bloom_error_rate,
            capacity=config.bloom_capacity,
        )
    raise ConfigurationError(f"Unknown state inspector type {kind!r}")

"""Immutable directed graph used by the decontamination engine.

Vertices are labelled ``0..n-1``. A graph that is a strongly connected
component of a larger graph carries a translator mapping its local labels to
the labels of the whole graph, so that strategies computed on a component can
be reported in whole-graph coordinates.
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from .errors import InvalidGraphError


class Graph:
    def __init__(self, adjacency, translator: Optional[Sequence[int]] = None):
        """
        Build a graph from an adjacency list.

        ``adjacency`` is either a sequence whose entry ``u`` lists the
        out-neighbours of ``u``, or a mapping ``{u: [v, ...]}`` over the
        vertices ``0..n-1``. Duplicate edges are collapsed.
        """
        if isinstance(adjacency, Mapping):
            n = len(adjacency)
            try:
                rows = [adjacency[u] for u in range(n)]
            except KeyError as exc:
                raise InvalidGraphError(f"Adjacency mapping must cover vertices 0..{n - 1}, missing {exc}") from None
        else:
            rows = list(adjacency)
            n = len(rows)

        adj = []
        for u, row in enumerate(rows):
            seen = []
            for v in row:
                v = int(v)
                if v < 0 or v >= n:
                    raise InvalidGraphError(f"Edge {u}->{v} points outside the vertex range 0..{n - 1}")
                if v not in seen:
                    seen.append(v)
            adj.append(tuple(seen))
        self._adj: Tuple[Tuple[int, ...], ...] = tuple(adj)

        if translator is not None:
            translator = tuple(int(t) for t in translator)
            if len(translator) != n:
                raise InvalidGraphError(f"Translator has {len(translator)} entries for {n} vertices")
        self._translator = translator

        # Derived data, filled in on first use
        self._indegree: Optional[List[int]] = None
        self._lower_bound = None
        self._upper_bound = None
        self._estimate = None

    # --- CONSTRUCTORS ---

    @classmethod
    def from_matrix(cls, matrix) -> "Graph":
        """
        Build a graph from a square matrix M with M[v][u] != 0 iff there is
        an edge u->v (note the transposed convention).
        """
        m = np.asarray(matrix)
        if m.size == 0:
            return cls([])
        if m.ndim != 2 or m.shape[0] != m.shape[1]:
            raise InvalidGraphError(f"Adjacency matrix must be square, got shape {m.shape}")
        n = m.shape[0]
        adj = [[] for _ in range(n)]
        for v in range(n):
            for u in range(n):
                if m[v][u] != 0:
                    adj[u].append(v)
        return cls(adj)

    @classmethod
    def from_edges(cls, vertex_count: int, edges: Iterable[Tuple[int, int]]) -> "Graph":
        """Build a graph with ``vertex_count`` vertices from ``(u, v)`` pairs meaning u->v."""
        if vertex_count < 0:
            raise InvalidGraphError("Vertex count cannot be negative")
        adj = [[] for _ in range(vertex_count)]
        for u, v in edges:
            if u < 0 or u >= vertex_count:
                raise InvalidGraphError(f"Edge {u}->{v} starts outside the vertex range 0..{vertex_count - 1}")
            adj[u].append(v)
        return cls(adj)

    @classmethod
    def from_networkx(cls, g) -> "Graph":
        """
        Build a graph from a networkx graph. Nodes are relabelled ``0..n-1`` in
        sorted order; undirected edges become a pair of opposite arcs.
        """
        nodes = sorted(g.nodes())
        index = {node: i for i, node in enumerate(nodes)}
        adj = [[] for _ in nodes]
        for u, v in g.edges():
            adj[index[u]].append(index[v])
            if not g.is_directed() and u != v:
                adj[index[v]].append(index[u])
        for row in adj:
            row.sort()
        return cls(adj)

    def to_networkx(self) -> nx.DiGraph:
        """Return this graph as a networkx DiGraph labelled with local vertex ids."""
        g = nx.DiGraph()
        g.add_nodes_from(range(self.vertex_count))
        g.add_edges_from((u, v) for u in range(self.vertex_count) for v in self._adj[u])
        return g

    # --- BASIC QUERIES ---

    @property
    def vertex_count(self) -> int:
        return len(self._adj)

    @property
    def edge_count(self) -> int:
        return sum(len(row) for row in self._adj)

    @property
    def translator(self):
        return self._translator

    def neighbours(self, vertex: int) -> Tuple[int, ...]:
        """Out-neighbours of ``vertex``."""
        return self._adj[vertex]

    def outdegree(self, vertex: int) -> int:
        return len(self._adj[vertex])

    def edges(self):
        for u, row in enumerate(self._adj):
            for v in row:
                yield u, v

    def indegree(self) -> List[int]:
        """Indegree of every vertex, as a fresh list the caller may modify."""
        if self._indegree is None:
            indegree = [0] * self.vertex_count
            for row in self._adj:
                for v in row:
                    indegree[v] += 1
            self._indegree = indegree
        return list(self._indegree)

    def adjacency_matrix(self) -> np.ndarray:
        """Matrix M with M[v][u] = 1 iff there is an edge u->v."""
        n = self.vertex_count
        m = np.zeros((n, n), dtype=np.uint8)
        for u, v in self.edges():
            m[v, u] = 1
        return m

    def is_singleton(self) -> bool:
        return self.vertex_count == 1

    def translate(self, vertex: int) -> int:
        """Label of ``vertex`` in the whole graph this graph was cut from."""
        if self._translator is None:
            return vertex
        return self._translator[vertex]

    # --- BOUNDS ---

    def lower_bound(self) -> int:
        """
        Lower bound for the search number: the vertex with the smallest
        indegree needs that many simultaneous blockers before it is ever clean.
        """
        if self._lower_bound is None:
            indegree = self.indegree()
            self._lower_bound = max(1, min(indegree)) if indegree else 1
        return self._lower_bound

    def upper_bound(self) -> int:
        # One pursuer per vertex clears everything on the first day
        if self._upper_bound is None:
            self._upper_bound = max(1, self.vertex_count)
        return self._upper_bound

    def estimate(self) -> int:
        """
        Edvin's estimate of the search number, clamped into
        ``[lower_bound(), upper_bound()]``.

        Vertices are tried in order of increasing indegree. For a start vertex
        v_0 with indegree x, look for a path v_0, v_1 ... v_k with
        indegree(v_i) <= x+i that ends in a vertex of maximal indegree. The
        first x for which such a path exists is the estimate.
        """
        if self._estimate is not None:
            return self._estimate

        estimate = self.lower_bound()
        indegree = self.indegree()
        if indegree:
            max_indegree = max(indegree)
            for v_0 in sorted(range(self.vertex_count), key=lambda v: indegree[v]):
                x = indegree[v_0]
                if self._estimate_path_exists(v_0, x, max_indegree, indegree):
                    estimate = x
                    break

        self._estimate = min(max(estimate, self.lower_bound()), self.upper_bound())
        return self._estimate

    def _estimate_path_exists(self, v_0, x, max_indegree, indegree):
        on_path = [False] * self.vertex_count
        on_path[v_0] = True
        if indegree[v_0] > x:
            return False
        if indegree[v_0] == max_indegree:
            return True

        # Iterative DFS; each frame is (vertex, steps taken, neighbour iterator)
        stack = [(v_0, 0, iter(self._adj[v_0]))]
        while stack:
            vertex, i, it = stack[-1]
            advanced = False
            for nb in it:
                if on_path[nb] or indegree[nb] > x + i + 1:
                    continue
                if indegree[nb] == max_indegree:
                    return True
                on_path[nb] = True
                stack.append((nb, i + 1, iter(self._adj[nb])))
                advanced = True
                break
            if not advanced:
                # Leaving a vertex makes it available to other paths again
                on_path[vertex] = False
                stack.pop()
        return False

    # --- STRONG COMPONENTS ---

    def strongly_connected_components(self) -> List["Graph"]:
        """
        Split this graph into its strongly connected components, each returned
        as a Graph with a translator back to this graph, in topological order:
        a component with an edge into another component comes first.
        """
        g = self.to_networkx()
        partitions = sorted((sorted(part) for part in nx.strongly_connected_components(g)), key=lambda p: p[0])

        # Component DAG, X -> Y iff some edge leaves X and enters Y
        membership = {}
        for number, part in enumerate(partitions):
            for vertex in part:
                membership[vertex] = number
        dag = nx.DiGraph()
        dag.add_nodes_from(range(len(partitions)))

        components = []
        for number, part in enumerate(partitions):
            old_to_new = {vertex: i for i, vertex in enumerate(part)}
            local_adj = [[] for _ in part]
            for vertex in part:
                for nb in self._adj[vertex]:
                    if nb in old_to_new:
                        local_adj[old_to_new[vertex]].append(old_to_new[nb])
                    else:
                        dag.add_edge(number, membership[nb])
            components.append(Graph(local_adj, translator=[self.translate(v) for v in part]))

        order = nx.lexicographical_topological_sort(dag)
        return [components[number] for number in order]

    # --- CYCLES ---

    def cycles(self) -> List[List[int]]:
        """
        Enumerate simple cycles by depth-first traversals started from every
        edge not yet traversed by an earlier traversal. Each cycle is listed
        backwards from the vertex where the traversal closed it.
        """
        n = self.vertex_count
        traversed = np.zeros(n * n, dtype=bool)
        cycles = []
        seen = set()

        def emit(path, tail):
            cycle = []
            for vertex in reversed(path):
                cycle.append(vertex)
                if vertex == tail:
                    break
            # Same cycle reached from another edge: rotate to a canonical form
            start = cycle.index(min(cycle))
            key = tuple(cycle[start:] + cycle[:start])
            if key not in seen:
                seen.add(key)
                cycles.append(cycle)

        for vertex in range(n):
            for first in self._adj[vertex]:
                if traversed[vertex * n + first]:
                    continue
                on_path = [False] * n
                on_path[vertex] = True
                path = [vertex]
                # Frames are (previous, current, iterator over current's neighbours or None)
                stack = [(vertex, first, None)]
                while stack:
                    previous, current, it = stack[-1]
                    if it is None:
                        traversed[previous * n + current] = True
                        if on_path[current]:
                            emit(path, current)
                            stack.pop()
                            continue
                        on_path[current] = True
                        path.append(current)
                        it = iter(self._adj[current])
                        stack[-1] = (previous, current, it)
                    nb = next(it, None)
                    if nb is None:
                        on_path[current] = False
                        path.pop()
                        stack.pop()
                    else:
                        stack.append((current, nb, None))
        return cycles

    # --- PRINTING ---

    def edge_string(self) -> str:
        """One ``u->v`` line per edge, whole-graph labels counted from one."""
        lines = []
        for u in range(self.vertex_count):
            for v in sorted(self._adj[u]):
                lines.append(f"{self.translate(u) + 1}->{self.translate(v) + 1}")
        if not lines:
            return "no edges"
        return "\n".join(lines)

    def __str__(self):
        vertices = ", ".join(str(self.translate(v)) for v in range(self.vertex_count))
        return f"[{vertices}]\n{self.edge_string()}"

    def __repr__(self):
        return f"Graph(vertices={self.vertex_count}, edges={self.edge_count})"

"""Reading graphs and writing strategies to disk."""

import json
import os
import logging

import numpy as np

from .errors import InvalidGraphError
from .graph import Graph
from .strategy import Strategy

LOGGER = logging.getLogger(__name__)

# --- CONFIGURATION ---
CACHE_DIR = "cached_solutions"
STATES_DIR = "verifier_states"


def _base_name(graph_name):
    # e.g. graphs/ring10.txt -> ring10
    return os.path.basename(str(graph_name)).split('.')[0] or "graph"


def parse_matrix(filepath):
    """
    Reads a text file of adjacency matrix rows ("0101") and returns a numpy
    array. Reading stops at a line starting with '-'. Row i, column j set
    means an edge j->i.
    """
    matrix_rows = []
    with open(filepath, 'r') as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            if line.startswith('-'):
                break
            row = [int(char) for char in line if char in '01']
            if row:
                matrix_rows.append(row)

    width = {len(row) for row in matrix_rows}
    if len(width) > 1 or (matrix_rows and len(matrix_rows) not in width):
        raise InvalidGraphError(
            f"Matrix in '{filepath}' is not square: {len(matrix_rows)} rows of widths {sorted(width)}"
        )
    return np.array(matrix_rows, dtype=np.uint8)


def load_matrix(filepath) -> Graph:
    graph = Graph.from_matrix(parse_matrix(filepath))
    LOGGER.info("Graph loaded: %d nodes.", graph.vertex_count)
    return graph


def load_edge_list(filepath) -> Graph:
    """
    Reads an edge list: the vertex count first, then one ``u v`` pair per
    line meaning u->v, vertices counted from zero. Text after '#' is ignored.
    """
    tokens = []
    with open(filepath, 'r') as f:
        for line in f:
            line = line.split('#', 1)[0].strip()
            if line:
                tokens.extend(line.split())

    if not tokens:
        raise InvalidGraphError(f"Edge list '{filepath}' is empty")
    try:
        numbers = [int(t) for t in tokens]
    except ValueError as exc:
        raise InvalidGraphError(f"Edge list '{filepath}' holds a non-integer token: {exc}") from None

    vertex_count, rest = numbers[0], numbers[1:]
    if len(rest) % 2:
        raise InvalidGraphError(f"Edge list '{filepath}' ends with an incomplete edge")
    graph = Graph.from_edges(vertex_count, zip(rest[0::2], rest[1::2]))
    LOGGER.info("Graph loaded: %d nodes, %d edges.", graph.vertex_count, graph.edge_count)
    return graph


def load_graph(filepath) -> Graph:
    """
    Load a graph from either format. The file is read as a matrix when it
    holds n rows of n '0'/'1' characters, and as an edge list otherwise.
    A single row only counts as a 1x1 matrix when the '-' terminator
    follows it, since "0" and "1" are also vertex counts.
    """
    lines = []
    terminated = False
    with open(filepath, 'r') as f:
        for line in f:
            line = line.strip()
            if line.startswith('-'):
                terminated = True
                break
            if line:
                lines.append(line)

    is_matrix = (
        (len(lines) > 1 or (len(lines) == 1 and terminated))
        and all(set(line) <= set('01') for line in lines)
        and all(len(line) == len(lines) for line in lines)
    )
    if is_matrix:
        return load_matrix(filepath)
    return load_edge_list(filepath)


def load_positions(filepath, vertex_count=None):
    """
    Node positions for the replay, one 'x,y' line per vertex in vertex
    order. Image coordinates grow downwards, so y is flipped for Matplotlib.
    """
    points = []
    with open(filepath, 'r') as f:
        for number, line in enumerate(f, start=1):
            line = line.split('#', 1)[0].strip()
            if not line:
                continue
            if line.startswith('-'):
                break
            try:
                x, y = (float(part) for part in line.split(',')[:2])
            except ValueError:
                raise InvalidGraphError(f"Line {number} of '{filepath}' is not an 'x,y' pair: {line!r}") from None
            points.append((x, y))

    if vertex_count is not None and len(points) != vertex_count:
        raise InvalidGraphError(f"'{filepath}' holds {len(points)} positions for {vertex_count} vertices")
    if not points:
        return {}
    top = max(y for _, y in points)
    return {vertex: (x, top - y) for vertex, (x, y) in enumerate(points)}


def export_strategy(strategy, graph_name="graph", cache_dir=CACHE_DIR, verified=None):
    """Saves a strategy to a JSON file for later replay and returns its path."""
    if not os.path.exists(cache_dir):
        os.makedirs(cache_dir)

    # e.g. ring10_2pursuers_strategy.json
    filename = f"{_base_name(graph_name)}_{strategy.pursuer_count}pursuers_strategy.json"
    filepath = os.path.join(cache_dir, filename)

    data = strategy.to_dict()
    data["verified"] = verified
    with open(filepath, 'w') as f:
        json.dump(data, f, indent=4)

    LOGGER.info("Strategy cached to: %s", filepath)
    return filepath


def load_strategy(filepath) -> Strategy:
    with open(filepath, 'r') as f:
        data = json.load(f)
    days = data.get("days")
    if not days:
        raise ValueError(f"Strategy file '{filepath}' has no days")
    strategy = Strategy.from_days(days)
    if "pursuers" in data and data["pursuers"] != strategy.pursuer_count:
        raise ValueError(
            f"Strategy file '{filepath}' claims {data['pursuers']} pursuers but its days place {strategy.pursuer_count}"
        )
    return strategy


def export_states(states, graph_name="graph", export_dir=STATES_DIR):
    """Saves the verifier's day-by-day states as a compressed (.npz) matrix, one row per day."""
    if not os.path.exists(export_dir):
        os.makedirs(export_dir)

    filepath = os.path.join(export_dir, f"{_base_name(graph_name)}_states.npz")
    np_matrix = np.array(states, dtype=np.uint8)
    np.savez_compressed(filepath, states=np_matrix)

    LOGGER.info("Verifier states saved to: %s", filepath)
    return filepath

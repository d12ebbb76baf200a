import json

import numpy as np
import pytest

from monksearch.errors import InvalidGraphError
from monksearch.io import (
    export_states,
    export_strategy,
    load_edge_list,
    load_graph,
    load_matrix,
    load_positions,
    load_strategy,
    parse_matrix,
)
from monksearch.strategy import Strategy


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_load_matrix_stops_at_terminator(tmp_path):
    path = _write(tmp_path, "cycle.txt", "001\n100\n010\n-\n111\n")
    g = load_matrix(path)
    assert g.vertex_count == 3
    # Row 1 column 0 set: 0->1
    assert list(g.edges()) == [(0, 1), (1, 2), (2, 0)]


def test_parse_matrix_rejects_ragged_rows(tmp_path):
    path = _write(tmp_path, "bad.txt", "01\n100\n")
    with pytest.raises(InvalidGraphError):
        parse_matrix(path)


def test_load_edge_list(tmp_path):
    path = _write(tmp_path, "edges.txt", "# three vertices\n3\n0 1\n1 2  # chain\n2 0\n")
    g = load_edge_list(path)
    assert g.vertex_count == 3
    assert list(g.edges()) == [(0, 1), (1, 2), (2, 0)]


@pytest.mark.parametrize("text", ["", "3\n0 1\n1\n", "3\n0 x\n", "2\n0 5\n"])
def test_load_edge_list_errors(tmp_path, text):
    path = _write(tmp_path, "edges.txt", text)
    with pytest.raises(InvalidGraphError):
        load_edge_list(path)


def test_load_graph_detects_format(tmp_path):
    matrix = _write(tmp_path, "m.txt", "01\n10\n")
    edges = _write(tmp_path, "e.txt", "10\n0 1\n")
    assert load_graph(matrix).vertex_count == 2
    assert load_graph(edges).vertex_count == 10


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_matrix(str(tmp_path / "nope.txt"))


def test_strategy_export_and_load(tmp_path):
    strategy = Strategy.from_days([[1, 2], [0, 0]])
    path = export_strategy(strategy, "graphs/ring.txt", cache_dir=str(tmp_path / "cache"), verified=True)
    assert path.endswith("ring_2pursuers_strategy.json")

    with open(path) as f:
        data = json.load(f)
    assert data == {"pursuers": 2, "length": 2, "days": [[1, 2], [0, 0]], "verified": True}
    assert load_strategy(path) == strategy


def test_load_strategy_checks_pursuers(tmp_path):
    path = _write(tmp_path, "s.json", json.dumps({"pursuers": 3, "days": [[1, 2]]}))
    with pytest.raises(ValueError):
        load_strategy(path)
    empty = _write(tmp_path, "e.json", json.dumps({"pursuers": 1, "days": []}))
    with pytest.raises(ValueError):
        load_strategy(empty)


def test_export_states(tmp_path):
    states = [np.array([0, 1, 0], dtype=np.uint8), np.array([1, 1, 1], dtype=np.uint8)]
    path = export_states(states, "cycle.txt", export_dir=str(tmp_path))
    with np.load(path) as data:
        assert data["states"].tolist() == [[0, 1, 0], [1, 1, 1]]


def test_load_positions_flips_y(tmp_path):
    path = _write(tmp_path, "pos.txt", "0,0\n1,2\n")
    assert load_positions(path) == {0: (0.0, 2.0), 1: (1.0, 0.0)}


@pytest.mark.parametrize("text, vertices, edges", [("1\n", 1, 0), ("0\n", 0, 0), ("1\n-\n", 1, 1), ("0\n-\n", 1, 0)])
def test_single_line_files(tmp_path, text, vertices, edges):
    g = load_graph(_write(tmp_path, "g.txt", text))
    assert g.vertex_count == vertices
    assert g.edge_count == edges


def test_load_positions_checks_vertex_count(tmp_path):
    path = _write(tmp_path, "pos.txt", "0,0\n1,2\n")
    assert len(load_positions(path, 2)) == 2
    with pytest.raises(InvalidGraphError):
        load_positions(path, 3)


def test_load_positions_rejects_malformed_lines(tmp_path):
    path = _write(tmp_path, "pos.txt", "0,0\n1\n")
    with pytest.raises(InvalidGraphError):
        load_positions(path)

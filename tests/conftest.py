import sys
from pathlib import Path

import matplotlib
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def pytest_sessionstart(session):  # noqa: D401
    matplotlib.use("Agg")


# Matrices use the M[v][u] = 1 iff u->v convention.
CHAIN5 = [
    [0, 1, 0, 0, 0],
    [1, 0, 1, 0, 0],
    [0, 1, 0, 1, 0],
    [0, 0, 1, 0, 1],
    [0, 0, 0, 1, 0],
]

SIX = [
    [0, 0, 1, 0, 0, 0],
    [0, 0, 1, 0, 0, 0],
    [1, 1, 1, 0, 1, 0],
    [0, 0, 0, 0, 1, 0],
    [0, 0, 0, 1, 0, 1],
    [0, 0, 0, 1, 0, 1],
]


@pytest.fixture
def chain():
    from monksearch.graph import Graph

    return Graph.from_matrix(CHAIN5)


@pytest.fixture
def complete3():
    from monksearch.graph import Graph

    return Graph([[1, 2], [0, 2], [0, 1]])

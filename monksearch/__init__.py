"""Search for decontamination strategies on directed graphs (the Monk problem)."""

from .config import OuterSearch, SelectorType, SolverConfig, StateInspectorType
from .errors import (
    ConfigurationError,
    DimensionMismatchError,
    InvalidGraphError,
    MonkSearchError,
    StrategyVerificationError,
)
from .graph import Graph
from .solver import SearchReport, Solver, Trial, solve
from .strategy import Strategy
from .verifier import Verification, Verifier

__all__ = [
    "ConfigurationError",
    "DimensionMismatchError",
    "Graph",
    "InvalidGraphError",
    "MonkSearchError",
    "OuterSearch",
    "SearchReport",
    "SelectorType",
    "Solver",
    "SolverConfig",
    "StateInspectorType",
    "Strategy",
    "StrategyVerificationError",
    "Trial",
    "Verification",
    "Verifier",
    "solve",
]

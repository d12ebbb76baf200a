"""Solver configuration.

Every search knob is a field on :class:`SolverConfig`, which is handed to
the solver when it is created.
"""

from __future__ import annotations

import os
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .errors import ConfigurationError

# --- CONFIGURATION ---
DEFAULT_MAX_DEPTH_MULTIPLIER = 2      # abort strategies longer than 2*|V| days
DEFAULT_BLOOM_ERROR_RATE = 0.001      # target false positive rate
MIN_BLOOM_CAPACITY = 1024             # never size a bloom filter below this
MAX_INDEXED_VERTICES = 26             # 2^26 booleans = 64 MiB
AUTO_EXACT_LIMIT = 20                 # AUTO inspector switches to bloom above this

_SELECTOR_ENV = "MONK_SELECTOR"
_INSPECTOR_ENV = "MONK_STATE_INSPECTOR"
_OUTER_SEARCH_ENV = "MONK_OUTER_SEARCH"
_DEPTH_ENV = "MONK_MAX_DEPTH_MULTIPLIER"
_BUDGET_ENV = "MONK_NODE_BUDGET"
_VERIFY_ENV = "MONK_VERIFY"

LOGGER = logging.getLogger(__name__)


class SelectorType(Enum):
    SIMPLE = "simple"
    GREEDY = "greedy"


class StateInspectorType(Enum):
    ARRAY = "array"
    BLOOM_FILTER = "bloom"
    AUTO = "auto"


class OuterSearch(Enum):
    LINEAR = "linear"
    BINARY = "binary"


def _parse_enum(enum_cls, raw):
    if isinstance(raw, enum_cls):
        return raw
    value = str(raw).strip().lower()
    for member in enum_cls:
        if value in (member.value, member.name.lower()):
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise ConfigurationError(f"Unknown {enum_cls.__name__} '{raw}' (expected one of: {choices})")


def _env_value(name: str) -> str | None:
    value = os.getenv(name)
    if not value:
        return None
    return value.strip() or None


def _env_int(name: str) -> int | None:
    raw = _env_value(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from None


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip().lower()
    if raw in {"", "0", "false", "no"}:
        return False
    if raw in {"1", "true", "yes"}:
        return True
    return default


@dataclass(frozen=True)
class SolverConfig:
    """How the solver searches.

    ``state_inspector=BLOOM_FILTER`` trades soundness for memory: a false
    positive in the filter prunes a state that was never explored, so a trial
    can report "no strategy" for a pursuer count that has one. Failures
    produced that way are reported as uncertified (see ``SearchReport``).
    """

    selector: SelectorType = SelectorType.GREEDY
    state_inspector: StateInspectorType = StateInspectorType.AUTO
    outer_search: OuterSearch = OuterSearch.BINARY
    max_depth_multiplier: int = DEFAULT_MAX_DEPTH_MULTIPLIER
    node_budget: Optional[int] = None
    bloom_error_rate: float = DEFAULT_BLOOM_ERROR_RATE
    bloom_capacity: Optional[int] = None
    carry_lower_bound: bool = True
    verify: bool = False

    def __post_init__(self):
        # Accept plain strings for the enum fields
        object.__setattr__(self, "selector", _parse_enum(SelectorType, self.selector))
        object.__setattr__(self, "state_inspector", _parse_enum(StateInspectorType, self.state_inspector))
        object.__setattr__(self, "outer_search", _parse_enum(OuterSearch, self.outer_search))

        if self.max_depth_multiplier < 1:
            raise ConfigurationError("max_depth_multiplier must be at least 1")
        if self.node_budget is not None and self.node_budget < 1:
            raise ConfigurationError("node_budget must be positive when given")
        if not 0.0 < self.bloom_error_rate < 1.0:
            raise ConfigurationError("bloom_error_rate must lie strictly between 0 and 1")
        if self.bloom_capacity is not None and self.bloom_capacity < 1:
            raise ConfigurationError("bloom_capacity must be positive when given")

    @classmethod
    def brute_force(cls, **overrides) -> "SolverConfig":
        """Exhaustive search: identity order, exact dedup, linear scan over p."""
        base = cls(
            selector=SelectorType.SIMPLE,
            state_inspector=StateInspectorType.ARRAY,
            outer_search=OuterSearch.LINEAR,
        )
        return replace(base, **overrides)

    @classmethod
    def heuristic(cls, **overrides) -> "SolverConfig":
        """Greedy order, bloom filter dedup, binary search seeded at the estimate."""
        base = cls(
            selector=SelectorType.GREEDY,
            state_inspector=StateInspectorType.BLOOM_FILTER,
            outer_search=OuterSearch.BINARY,
        )
        return replace(base, **overrides)

    @classmethod
    def from_env(cls, **overrides) -> "SolverConfig":
        """Build a config from ``MONK_*`` environment variables, then apply overrides."""
        values = {}
        selector = _env_value(_SELECTOR_ENV)
        if selector is not None:
            values["selector"] = selector
        inspector = _env_value(_INSPECTOR_ENV)
        if inspector is not None:
            values["state_inspector"] = inspector
        outer = _env_value(_OUTER_SEARCH_ENV)
        if outer is not None:
            values["outer_search"] = outer
        depth = _env_int(_DEPTH_ENV)
        if depth is not None:
            values["max_depth_multiplier"] = depth
        budget = _env_int(_BUDGET_ENV)
        if budget is not None:
            values["node_budget"] = budget
        values["verify"] = _env_bool(_VERIFY_ENV)
        values.update(overrides)
        config = cls(**values)
        LOGGER.debug("SolverConfig.from_env resolved %s", config)
        return config

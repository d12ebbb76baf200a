"""Exceptions raised by the decontamination engine."""


class MonkSearchError(Exception):
    """Base class for every error raised by monksearch."""


class InvalidGraphError(MonkSearchError, ValueError):
    """The graph given to the model is malformed (bad shape or vertex id)."""


class DimensionMismatchError(MonkSearchError, ValueError):
    """A seed handed to the verifier does not match its claimed dimensions."""


class ConfigurationError(MonkSearchError, ValueError):
    """A solver configuration value is unknown or cannot be honoured."""


class StrategyVerificationError(MonkSearchError):
    """The solver produced a strategy that the verifier rejects."""

    def __init__(self, message, states=None):
        super().__init__(message)
        self.states = states

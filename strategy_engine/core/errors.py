"""
Exception types raised by the strategy engine.
"""


class StrategyEngineError(Exception):
    """Base class for strategy engine errors."""


class RetrievalError(StrategyEngineError):
    """A feature-store or record-store read failed during retrieval."""

"""Exception types raised by the enhancement engine."""

from __future__ import annotations


class EnhancementError(ValueError):
    """Base class for every error the engine reports to its callers."""


class InvalidConfiguration(EnhancementError):
    """Raised when a configuration violates one of its invariants."""


class InvalidBatchRequest(EnhancementError):
    """Raised when a Monte Carlo batch is requested with unusable parameters."""


class NonTerminatingConfiguration(EnhancementError):
    """Raised when a stochastic run cannot finish (or exceeds its attempt ceiling)."""

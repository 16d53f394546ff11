# src/core/errors.py
"""
Typed errors for pricing and liquidation.

Exports
-------
- LiquidationError (base)
- ComputationError, NoConvergenceError, ValidationError,
  ExternalCallError, NoteNotFoundError
- PRICING_ERRORS
"""

from __future__ import annotations

# =========================
# Exception types
# =========================


class LiquidationError(RuntimeError):
    """Base class for pricing and liquidation failures."""


class ComputationError(LiquidationError):
    """Degenerate math input (zero rate, elapsed term, missing issue date)."""


class NoConvergenceError(LiquidationError):
    """Newton iteration hit its cap, a zero derivative, or a non-finite iterate."""


class ValidationError(LiquidationError):
    """A computed markup or asking price is not acceptable for a sale."""


class ExternalCallError(LiquidationError):
    """Fetch or submit failure reported by the trading platform layer."""


class NoteNotFoundError(LiquidationError, LookupError):
    """No note with the requested id exists in the collection."""


# Per-note failures that exclude the note instead of aborting a cohort
PRICING_ERRORS = (
    ComputationError,
    NoConvergenceError,
    ValidationError,
)


__all__ = [
    "LiquidationError",
    "ComputationError",
    "NoConvergenceError",
    "ValidationError",
    "ExternalCallError",
    "NoteNotFoundError",
    "PRICING_ERRORS",
]

"""
Error kinds raised by the fusion and clustering routines.
"""

from __future__ import annotations


__all__ = [
    "SNFError",
    "DimensionMismatch",
    "InvalidInput",
    "NumericalError",
    "NonConvergenceWarning",
]


class SNFError(Exception):
    """Base class for errors raised by ``snfclust``."""


class DimensionMismatch(SNFError, ValueError):
    """Inputs disagree on sample count or sample order."""


class InvalidInput(SNFError, ValueError):
    """A parameter or matrix entry is outside its valid range."""


class NumericalError(SNFError, ArithmeticError):
    """A matrix is degenerate and no safe fallback exists."""


class NonConvergenceWarning(UserWarning):
    """An iterative routine stopped at its iteration cap."""

"""
Exceptions raised by the numerical engine and the network.
"""

from __future__ import annotations


class CharReaderError(ValueError):
    """Base class for errors raised by charreader."""


class ShapeMismatchError(CharReaderError):
    """Matrix or vector dimensions are incompatible for the operation."""


class DecompositionError(CharReaderError):
    """A factorisation hit a zero-norm column (rank-deficient input)."""


class NullInputError(CharReaderError, TypeError):
    """A required matrix, vector or object argument was ``None``."""

"""Exceptions raised by matrix construction and arithmetic.

Every error derives from ``MatrixError`` and also from the builtin exception
a caller would naturally expect for a bad argument, so both
``except MatrixError`` and ``except ValueError`` work.
"""

from __future__ import annotations


class MatrixError(Exception):
    """Base class for all matrix errors."""


class InvalidDimensionsError(MatrixError, ValueError):
    """Raised when a matrix is built with non-positive or malformed dimensions."""


class NullSourceError(MatrixError, TypeError):
    """Raised when a source or operand matrix is missing."""


class DimensionMismatchError(MatrixError, ValueError):
    """Raised when element-wise operands differ in shape."""


class IncompatibleDimensionsError(MatrixError, ValueError):
    """Raised when the inner dimensions of a matrix product disagree."""


class InvalidSizeError(MatrixError, ValueError):
    """Raised when an identity matrix is requested with a non-positive size."""

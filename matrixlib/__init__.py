"""Dense real-valued matrices.

A small Python library for building matrices of double-precision values and
combining them with addition, subtraction, multiplication and transposition,
with tolerance-based equality for comparing floating-point results.
"""

from __future__ import annotations

from matrixlib.errors import (
    DimensionMismatchError,
    IncompatibleDimensionsError,
    InvalidDimensionsError,
    InvalidSizeError,
    MatrixError,
    NullSourceError,
)
from matrixlib.matrix import TOLERANCE, Matrix

__version__ = "0.1.0"

__all__ = [
    "Matrix",
    "TOLERANCE",
    "MatrixError",
    "InvalidDimensionsError",
    "NullSourceError",
    "DimensionMismatchError",
    "IncompatibleDimensionsError",
    "InvalidSizeError",
]

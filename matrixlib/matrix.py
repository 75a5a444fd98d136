"""Dense real-valued matrix type.

This module implements ``Matrix``, a fixed-shape 2D container of float64
values backed by a numpy array, with element access, addition, subtraction,
the row-by-column matrix product, transposition, identity construction and
tolerance-based equality.
"""

from __future__ import annotations

import logging
import math
import numbers
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Tuple

import numpy as np

from matrixlib.errors import (
    DimensionMismatchError,
    IncompatibleDimensionsError,
    InvalidDimensionsError,
    InvalidSizeError,
    NullSourceError,
)

logger = logging.getLogger(__name__)

# Absolute per-element tolerance used by equality
TOLERANCE = 1e-9

# numpy dtype kinds accepted as source values: signed, unsigned, float
REAL_KINDS = "iuf"

_CENT = Decimal("0.01")


def _format_cell(value: float) -> str:
    """Format one element to two decimals, right-aligned in six columns.

    Halfway cases round away from zero (0.125 -> 0.13) rather than to even.
    """
    # Floats this large are whole numbers, so there is no halfway case
    if not math.isfinite(value) or abs(value) >= 2.0 ** 52:
        return f"{value:6.2f}"
    rounded = Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    return f"{rounded:6.2f}"


def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


class Matrix:
    """A dense matrix of double-precision values.

    Dimensions are fixed at construction. Elements can be written in place
    through ``m[i, j] = value``; every arithmetic operation returns a new
    matrix with its own storage and leaves the operands untouched.

    Example:
        >>> a = Matrix(2, 2)
        >>> b = Matrix.identity(2)
        >>> c = a + b
    """

    __slots__ = ("_data",)

    # Make numpy operators and comparisons defer to the methods below
    __array_ufunc__ = None

    def __init__(self, rows: int, cols: int):
        """Create a zero-filled matrix.

        Args:
            rows: Number of rows, at least 1
            cols: Number of columns, at least 1

        Raises:
            InvalidDimensionsError: If either dimension is not a positive integer
        """
        if not _is_int(rows) or not _is_int(cols) or rows <= 0 or cols <= 0:
            raise InvalidDimensionsError(
                f"Matrix dimensions must be positive integers, got {rows!r}x{cols!r}"
            )
        self._data = np.zeros((int(rows), int(cols)), dtype=np.float64)

    @classmethod
    def from_source(cls, source: Any) -> "Matrix":
        """Create a matrix by copying a rectangular 2D source.

        Args:
            source: Nested sequences of numbers, a 2D numpy array or another Matrix

        Returns:
            New matrix with the source's shape and an independent copy of its values

        Raises:
            NullSourceError: If source is None
            InvalidDimensionsError: If source is not a non-empty rectangular 2D array of reals
        """
        if source is None:
            raise NullSourceError("source must not be None")

        if isinstance(source, Matrix):
            return source.copy()

        # Inspect the inferred dtype first so strings and booleans are not coerced
        try:
            raw = np.asarray(source)
        except (TypeError, ValueError) as exc:
            raise InvalidDimensionsError(
                f"Source must be a rectangular 2D array of real numbers: {exc}"
            ) from exc

        if raw.dtype.kind not in REAL_KINDS:
            raise InvalidDimensionsError(
                f"Source must contain only real numbers, got dtype {raw.dtype}"
            )

        # Fresh float64 copy, independent of the source
        data = np.array(raw, dtype=np.float64)

        if data.ndim != 2:
            raise InvalidDimensionsError(
                f"Source must be two-dimensional, got {data.ndim} dimension(s)"
            )
        if data.shape[0] == 0 or data.shape[1] == 0:
            raise InvalidDimensionsError(
                f"Source must have at least one row and one column, got shape {data.shape}"
            )

        matrix = cls.__new__(cls)
        matrix._data = data
        return matrix

    @classmethod
    def identity(cls, n: int) -> "Matrix":
        """Create an n x n identity matrix.

        Args:
            n: Size of the matrix

        Returns:
            Matrix with 1.0 on the main diagonal and 0.0 elsewhere

        Raises:
            InvalidSizeError: If n is not a positive integer
        """
        if not _is_int(n) or n <= 0:
            raise InvalidSizeError(f"Identity size must be a positive integer, got {n!r}")

        result = cls(n, n)
        for i in range(n):
            result._data[i, i] = 1.0
        return result

    @property
    def rows(self) -> int:
        """Number of rows."""
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        """Number of columns."""
        return self._data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        """The (rows, cols) pair."""
        return self._data.shape

    # Element access. Indices are passed straight to the backing array.

    def __getitem__(self, key: Tuple[int, int]) -> float:
        i, j = key
        return float(self._data[i, j])

    def __setitem__(self, key: Tuple[int, int], value: float) -> None:
        i, j = key
        self._data[i, j] = value

    def get(self, i: int, j: int) -> float:
        """Return the element at row i, column j."""
        return float(self._data[i, j])

    def set(self, i: int, j: int, value: float) -> None:
        """Write value at row i, column j."""
        self._data[i, j] = value

    def _validate_same_size(self, other: "Matrix") -> None:
        if other is None:
            raise NullSourceError("other matrix must not be None")
        if self.shape != other.shape:
            raise DimensionMismatchError(
                f"Matrices must be the same size, got {self.rows}x{self.cols} "
                f"and {other.rows}x{other.cols}"
            )

    def _wrap(self, data: np.ndarray) -> "Matrix":
        result = type(self).__new__(type(self))
        result._data = data
        return result

    def add(self, other: "Matrix") -> "Matrix":
        """Add two matrices element by element.

        Args:
            other: Matrix of the same shape

        Returns:
            New matrix holding the sum

        Raises:
            NullSourceError: If other is None
            DimensionMismatchError: If the shapes differ
        """
        self._validate_same_size(other)
        return self._wrap(self._data + other._data)

    def subtract(self, other: "Matrix") -> "Matrix":
        """Subtract other from this matrix element by element.

        Args:
            other: Matrix of the same shape

        Returns:
            New matrix holding the difference

        Raises:
            NullSourceError: If other is None
            DimensionMismatchError: If the shapes differ
        """
        self._validate_same_size(other)
        return self._wrap(self._data - other._data)

    def multiply(self, other: "Matrix") -> "Matrix":
        """Compute the matrix product self @ other.

        Each entry is the inner product of a row of self with a column of
        other, accumulated left to right over k. No BLAS call is made so the
        summation order is exactly k = 0, 1, ..., cols - 1.

        Args:
            other: Right-hand matrix with other.rows == self.cols

        Returns:
            New matrix of shape (self.rows, other.cols)

        Raises:
            NullSourceError: If other is None
            IncompatibleDimensionsError: If self.cols != other.rows
        """
        if other is None:
            raise NullSourceError("other matrix must not be None")
        if self.cols != other.rows:
            raise IncompatibleDimensionsError(
                f"Incompatible dimensions for multiplication: "
                f"{self.rows}x{self.cols} and {other.rows}x{other.cols}"
            )

        logger.debug(
            f"Multiplying {self.rows}x{self.cols} by {other.rows}x{other.cols}"
        )

        # Work on plain Python floats so every step is a single float64 operation
        a = self._data.tolist()
        b = other._data.tolist()
        inner = self.cols
        out = np.zeros((self.rows, other.cols), dtype=np.float64)

        for i in range(self.rows):
            row = a[i]
            for j in range(other.cols):
                # Inner product of row i with column j, ascending k
                total = 0.0
                for k in range(inner):
                    total += row[k] * b[k][j]
                out[i, j] = total

        return self._wrap(out)

    def scale(self, factor: float) -> "Matrix":
        """Return a new matrix with every element multiplied by factor."""
        return self._wrap(self._data * float(factor))

    def transpose(self) -> "Matrix":
        """Return a new matrix with rows and columns swapped."""
        return self._wrap(self._data.T.copy())

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    def copy(self) -> "Matrix":
        """Return an independent copy of this matrix."""
        return self._wrap(self._data.copy())

    def to_list(self) -> List[List[float]]:
        """Return the elements as nested lists of floats."""
        return self._data.tolist()

    def to_numpy(self) -> np.ndarray:
        """Return a float64 array copy of the elements."""
        return self._data.copy()

    # Operators

    def __add__(self, other: Any) -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Any) -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.subtract(other)

    def __matmul__(self, other: Any) -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.multiply(other)

    def __mul__(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            return self.multiply(other)
        if isinstance(other, numbers.Real) and not isinstance(other, bool):
            return self.scale(other)
        return NotImplemented

    def __rmul__(self, other: Any) -> "Matrix":
        if isinstance(other, numbers.Real) and not isinstance(other, bool):
            return self.scale(other)
        return NotImplemented

    # Comparison

    def approx_equals(self, other: Any, tolerance: float = TOLERANCE) -> bool:
        """Compare two matrices element by element within an absolute tolerance.

        Args:
            other: Matrix to compare against
            tolerance: Largest allowed absolute difference per element

        Returns:
            True if shapes match and every element differs by at most tolerance
        """
        if not isinstance(other, Matrix) or self.shape != other.shape:
            return False

        # Stop at the first element outside the tolerance
        a = self._data.tolist()
        b = other._data.tolist()
        for i in range(self.rows):
            for j in range(self.cols):
                if abs(a[i][j] - b[i][j]) > tolerance:
                    return False
        return True

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.approx_equals(other)

    def __hash__(self) -> int:
        # Only the shape: element values may differ within tolerance
        return hash((self.rows, self.cols))

    # Display

    def __str__(self) -> str:
        """Render one bracketed line per row, two decimals per element."""
        lines = []
        for row in self._data.tolist():
            cells = "".join(f"{_format_cell(value)} " for value in row)
            lines.append(f"[ {cells}]\n")
        return "".join(lines)

    def __repr__(self) -> str:
        return f"Matrix(rows={self.rows}, cols={self.cols}, data={self.to_list()!r})"

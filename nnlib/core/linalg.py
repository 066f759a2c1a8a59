"""Dense vector and matrix primitives used by the network engine.

Both types wrap a single contiguous ``float64`` NumPy buffer.  Every binary
elementwise operator checks the shapes of its operands up front and raises
:class:`~nnlib.core.errors.DimensionMismatchError` instead of broadcasting.
Arithmetic returns fresh values; only the augmented assignments (``+=`` and
``-=``) write into the left operand.
"""

from __future__ import annotations

import numbers
from typing import Iterable, Iterator, Tuple

import numpy as np

from .errors import DimensionMismatchError

DTYPE = np.float64


def _is_scalar(value: object) -> bool:
    return isinstance(value, numbers.Real)


def _format(value: float) -> str:
    return format(float(value), "g")


def _rng_or_default(rng: np.random.Generator | None) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


class Vector:
    """Fixed-length sequence of floating point values."""

    __slots__ = ("elements",)
    # Make NumPy scalars and arrays defer to our reflected operators.
    __array_ufunc__ = None
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, elements: Iterable[float] | np.ndarray) -> None:
        if not isinstance(elements, np.ndarray):
            elements = list(elements)
        array = np.array(elements, dtype=DTYPE)
        if array.ndim != 1:
            raise DimensionMismatchError(
                f"Vector requires one-dimensional data, got shape {array.shape}"
            )
        self.elements = array

    @classmethod
    def _wrap(cls, array: np.ndarray) -> "Vector":
        vector = cls.__new__(cls)
        vector.elements = array
        return vector

    # ------------------------------------------------------------------
    # Constructors

    @classmethod
    def zeros(cls, length: int) -> "Vector":
        return cls._wrap(np.zeros(int(length), dtype=DTYPE))

    @classmethod
    def random(
        cls,
        length: int,
        mean: float = 0.0,
        stddev: float = 1.0,
        *,
        rng: np.random.Generator | None = None,
    ) -> "Vector":
        """Draw ``length`` independent samples from ``N(mean, stddev**2)``."""

        draws = _rng_or_default(rng).normal(mean, stddev, size=int(length))
        return cls._wrap(draws.astype(DTYPE, copy=False))

    # ------------------------------------------------------------------
    # Container protocol

    @property
    def length(self) -> int:
        return int(self.elements.shape[0])

    def __len__(self) -> int:
        return self.length

    def __iter__(self) -> Iterator[float]:
        return (float(value) for value in self.elements)

    def __getitem__(self, index: int) -> float:
        return float(self.elements[index])

    def __setitem__(self, index: int, value: float) -> None:
        self.elements[index] = value

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        if dtype is None:
            return self.elements.copy() if copy else self.elements
        return self.elements.astype(dtype)

    def copy(self) -> "Vector":
        return Vector._wrap(self.elements.copy())

    def tolist(self) -> list[float]:
        return [float(value) for value in self.elements]

    # ------------------------------------------------------------------
    # Arithmetic

    def _check(self, other: "Vector", op: str) -> None:
        if self.length != other.length:
            raise DimensionMismatchError(
                f"Cannot apply {op!r} to vectors of length {self.length} and {other.length}"
            )

    def __add__(self, other: "Vector") -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        self._check(other, "+")
        return Vector._wrap(self.elements + other.elements)

    def __sub__(self, other: "Vector") -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        self._check(other, "-")
        return Vector._wrap(self.elements - other.elements)

    def __rsub__(self, other: float) -> "Vector":
        if not _is_scalar(other):
            return NotImplemented
        return Vector._wrap(float(other) - self.elements)

    def __mul__(self, other: "Vector | float") -> "Vector":
        if isinstance(other, Vector):
            self._check(other, "*")
            return Vector._wrap(self.elements * other.elements)
        if _is_scalar(other):
            return Vector._wrap(self.elements * float(other))
        return NotImplemented

    def __rmul__(self, other: float) -> "Vector":
        if not _is_scalar(other):
            return NotImplemented
        return Vector._wrap(float(other) * self.elements)

    def __truediv__(self, other: float) -> "Vector":
        if not _is_scalar(other):
            return NotImplemented
        return Vector._wrap(self.elements / float(other))

    def __neg__(self) -> "Vector":
        return Vector._wrap(-self.elements)

    def __iadd__(self, other: "Vector") -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        self._check(other, "+=")
        self.elements += other.elements
        return self

    def __isub__(self, other: "Vector") -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        self._check(other, "-=")
        self.elements -= other.elements
        return self

    def outer(self, other: "Vector") -> "Matrix":
        """Return the ``len(self) x len(other)`` outer product."""

        return Matrix._wrap(np.outer(self.elements, other.elements))

    # ------------------------------------------------------------------
    # Comparison and formatting

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.length == other.length and bool(
            np.array_equal(self.elements, other.elements)
        )

    def allclose(self, other: "Vector", *, rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        self._check(other, "allclose")
        return bool(np.allclose(self.elements, other.elements, rtol=rtol, atol=atol))

    def __str__(self) -> str:
        return "[" + ", ".join(_format(value) for value in self.elements) + "]"

    def __repr__(self) -> str:
        return f"Vector({self})"


class Matrix:
    """Fixed ``height x width`` grid stored as one row-major buffer."""

    __slots__ = ("buffer",)
    __array_ufunc__ = None
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, rows: Iterable[Iterable[float]] | np.ndarray) -> None:
        if isinstance(rows, np.ndarray):
            array = np.array(rows, dtype=DTYPE)
        else:
            try:
                array = np.array([np.asarray(row, dtype=DTYPE) for row in rows], dtype=DTYPE)
            except ValueError as exc:
                raise DimensionMismatchError("Matrix rows must all have the same width") from exc
        if array.size == 0 and array.ndim == 1:
            array = array.reshape(0, 0)
        if array.ndim != 2:
            raise DimensionMismatchError(
                f"Matrix requires two-dimensional data, got shape {array.shape}"
            )
        self.buffer = np.ascontiguousarray(array)

    @classmethod
    def _wrap(cls, array: np.ndarray) -> "Matrix":
        matrix = cls.__new__(cls)
        matrix.buffer = np.ascontiguousarray(array, dtype=DTYPE)
        return matrix

    # ------------------------------------------------------------------
    # Constructors

    @classmethod
    def zeros(cls, height: int, width: int) -> "Matrix":
        return cls._wrap(np.zeros((int(height), int(width)), dtype=DTYPE))

    @classmethod
    def random(
        cls,
        height: int,
        width: int,
        mean: float = 0.0,
        stddev: float = 1.0,
        *,
        rng: np.random.Generator | None = None,
    ) -> "Matrix":
        """Fill a ``height x width`` matrix with independent normal draws."""

        draws = _rng_or_default(rng).normal(mean, stddev, size=(int(height), int(width)))
        return cls._wrap(draws)

    # ------------------------------------------------------------------
    # Shape and indexing

    @property
    def height(self) -> int:
        return int(self.buffer.shape[0])

    @property
    def width(self) -> int:
        return int(self.buffer.shape[1])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def __len__(self) -> int:
        return self.height

    def row(self, index: int) -> Vector:
        """Return row ``index`` as a vector sharing this matrix's storage."""

        return Vector._wrap(self.buffer[index])

    def rows(self) -> Iterator[Vector]:
        for index in range(self.height):
            yield self.row(index)

    __iter__ = rows

    def __getitem__(self, index):
        if isinstance(index, tuple):
            i, j = index
            return float(self.buffer[i, j])
        return self.row(index)

    def __setitem__(self, index, value) -> None:
        if isinstance(index, tuple):
            i, j = index
            self.buffer[i, j] = value
            return
        if not isinstance(value, Vector) or value.length != self.width:
            raise DimensionMismatchError(f"Row assignment requires a Vector of length {self.width}")
        self.buffer[index] = value.elements

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        if dtype is None:
            return self.buffer.copy() if copy else self.buffer
        return self.buffer.astype(dtype)

    def copy(self) -> "Matrix":
        return Matrix._wrap(self.buffer.copy())

    def flatten(self) -> Vector:
        """Return the entries in row-major order."""

        return Vector._wrap(self.buffer.reshape(-1).copy())

    def tolist(self) -> list[list[float]]:
        return [[float(value) for value in row] for row in self.buffer]

    def transpose(self) -> "Matrix":
        return Matrix._wrap(self.buffer.T)

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    # ------------------------------------------------------------------
    # Arithmetic

    def _check(self, other: "Matrix", op: str) -> None:
        if self.shape != other.shape:
            raise DimensionMismatchError(
                f"Cannot apply {op!r} to matrices of shape {self.shape} and {other.shape}"
            )

    def _matvec(self, vector: Vector) -> Vector:
        if vector.length != self.width:
            raise DimensionMismatchError(
                f"Cannot multiply a {self.height}x{self.width} matrix "
                f"by a vector of length {vector.length}"
            )
        return Vector._wrap(self.buffer @ vector.elements)

    def __add__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check(other, "+")
        return Matrix._wrap(self.buffer + other.buffer)

    def __sub__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check(other, "-")
        return Matrix._wrap(self.buffer - other.buffer)

    def __mul__(self, other):
        if isinstance(other, Vector):
            return self._matvec(other)
        if isinstance(other, Matrix):
            self._check(other, "*")
            return Matrix._wrap(self.buffer * other.buffer)
        if _is_scalar(other):
            return Matrix._wrap(self.buffer * float(other))
        return NotImplemented

    def __rmul__(self, other: float) -> "Matrix":
        if not _is_scalar(other):
            return NotImplemented
        return Matrix._wrap(float(other) * self.buffer)

    def __matmul__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        return self._matvec(other)

    def __truediv__(self, other: float) -> "Matrix":
        if not _is_scalar(other):
            return NotImplemented
        return Matrix._wrap(self.buffer / float(other))

    def __neg__(self) -> "Matrix":
        return Matrix._wrap(-self.buffer)

    def __iadd__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check(other, "+=")
        self.buffer += other.buffer
        return self

    def __isub__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check(other, "-=")
        self.buffer -= other.buffer
        return self

    # ------------------------------------------------------------------
    # Comparison and formatting

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self.buffer, other.buffer))

    def allclose(self, other: "Matrix", *, rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        self._check(other, "allclose")
        return bool(np.allclose(self.buffer, other.buffer, rtol=rtol, atol=atol))

    def __str__(self) -> str:
        if self.height == 0:
            return "[]"
        lines = ["[" + ", ".join(_format(value) for value in row) + "]" for row in self.buffer]
        return "[" + ",\n ".join(lines) + "]"

    def __repr__(self) -> str:
        return f"Matrix({self.height}x{self.width})"


__all__ = ["DTYPE", "Matrix", "Vector"]

"""Conversions between class indices and network vectors."""

from __future__ import annotations

import numpy as np

from .errors import MalformedOneHotError
from .linalg import Vector


def index_to_one_hot(index: int, n_classes: int) -> Vector:
    """Return a length ``n_classes`` vector with a single ``1`` at ``index``."""

    if n_classes < 1:
        raise ValueError(f"n_classes must be positive, got {n_classes}")
    if not 0 <= index < n_classes:
        raise IndexError(f"Class index {index} out of range for {n_classes} classes")
    one_hot = Vector.zeros(n_classes)
    one_hot[index] = 1.0
    return one_hot


def one_hot_to_index(vector: Vector) -> int:
    """Return the position of the ``1`` in a one-hot ``vector``.

    Raises :class:`MalformedOneHotError` unless exactly one element equals
    one and every other element equals zero.
    """

    elements = vector.elements
    hot = np.flatnonzero(elements == 1.0)
    if hot.size != 1 or np.count_nonzero(elements) != 1:
        raise MalformedOneHotError(f"Expected a one-hot vector, got {vector}")
    return int(hot[0])


def get_max_index(vector: Vector) -> int:
    """Index of the largest element; ties resolve to the lowest index."""

    if vector.length == 0:
        raise ValueError("Cannot take the argmax of an empty vector")
    return int(np.argmax(vector.elements))


__all__ = ["get_max_index", "index_to_one_hot", "one_hot_to_index"]

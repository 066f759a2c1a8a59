"""Cost functions used by backpropagation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from .errors import DimensionMismatchError
from .linalg import Vector
from .types import Array

CostFn = Callable[[Array, Array], float]
CostDerivativeFn = Callable[[Array, Array], Array]


@dataclass(frozen=True)
class Cost:
    """Per-example cost ``C(output, target)`` and its derivative in ``output``."""

    name: str
    fn: CostFn
    derivative_fn: CostDerivativeFn

    def __call__(self, output: Vector, target: Vector) -> float:
        _check_lengths(output, target)
        return float(self.fn(output.elements, target.elements))

    def derivative(self, output: Vector, target: Vector) -> Vector:
        _check_lengths(output, target)
        return Vector(self.derivative_fn(output.elements, target.elements))


def _check_lengths(output: Vector, target: Vector) -> None:
    if output.length != target.length:
        raise DimensionMismatchError(
            f"Output has length {output.length} but target has length {target.length}"
        )


class CostRegistry:
    """Central registry for cost functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, Cost] = {}

    def register(self, name: str, fn: CostFn, derivative: CostDerivativeFn) -> Cost:
        cost = Cost(name, fn, derivative)
        self._registry[name] = cost
        return cost

    def get(self, name: str) -> Cost:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown cost {name!r}. Available costs: {available}")
        return self._registry[name]

    def names(self) -> Iterable[str]:
        return sorted(self._registry)


REGISTRY = CostRegistry()


def _quadratic(output: Array, target: Array) -> float:
    diff = output - target
    return 0.5 * float(np.dot(diff, diff))


def _quadratic_derivative(output: Array, target: Array) -> Array:
    return output - target


QUADRATIC = REGISTRY.register("quadratic", _quadratic, _quadratic_derivative)
# Alias matching the name used in most training configs
REGISTRY.register("mse", _quadratic, _quadratic_derivative)

__all__ = ["Cost", "CostRegistry", "QUADRATIC", "REGISTRY"]

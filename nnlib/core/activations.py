"""Nonlinearity strategies for nnlib networks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from .linalg import Vector
from .types import Array

ArrayFn = Callable[[Array], Array]


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid of ``x``."""

    # exp overflows float64 beyond ~709; the sigmoid is saturated long before.
    z = np.clip(x, -500.0, 500.0)
    return 1.0 / (1.0 + np.exp(-z))


def sigmoid_prime(x: Array) -> Array:
    s = sigmoid(x)
    return s * (1.0 - s)


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def relu_prime(x: Array) -> Array:
    # Strict comparison: the derivative at exactly zero is zero.
    return (x > 0).astype(np.float64)


@dataclass(frozen=True)
class Nonlinearity:
    """Elementwise activation function paired with its derivative."""

    name: str
    fn: ArrayFn
    derivative: ArrayFn

    def activate(self, weighted_inputs: Vector) -> Vector:
        return Vector(self.fn(weighted_inputs.elements))

    def activate_derivative(self, weighted_inputs: Vector) -> Vector:
        return Vector(self.derivative(weighted_inputs.elements))


SIGMOID = Nonlinearity("sigmoid", sigmoid, sigmoid_prime)
RELU = Nonlinearity("relu", relu, relu_prime)

_REGISTRY: Dict[str, Nonlinearity] = {
    SIGMOID.name: SIGMOID,
    RELU.name: RELU,
}


def get_nonlinearity(name: str) -> Nonlinearity:
    key = name.lower()
    if key not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown nonlinearity {name!r}. Available nonlinearities: {available}")
    return _REGISTRY[key]


def available_nonlinearities() -> Iterable[str]:
    return sorted(_REGISTRY)


__all__ = [
    "Nonlinearity",
    "RELU",
    "SIGMOID",
    "available_nonlinearities",
    "get_nonlinearity",
    "relu",
    "relu_prime",
    "sigmoid",
    "sigmoid_prime",
]

"""Core typing contracts for nnlib."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Sequence

import numpy as np

from .errors import DimensionMismatchError
from .linalg import Matrix, Vector

Array = np.ndarray


@dataclass(frozen=True)
class Example:
    """A single labelled example: an input vector and its one-hot target."""

    inputs: Vector
    target: Vector

    def __iter__(self) -> Iterator[Vector]:
        yield self.inputs
        yield self.target


AnnotatedData = List[Example]


@dataclass
class ForwardTrace:
    """Pre-activations and activations recorded during a forward pass.

    ``activations[0]`` is the network input and ``activations[i + 1]`` is the
    output of layer transition ``i``; ``zs[i]`` is the matching weighted input.
    """

    activations: List[Vector]
    zs: List[Vector]

    @property
    def output(self) -> Vector:
        return self.activations[-1]


@dataclass
class Gradients:
    """Per-layer cost gradients, shape-matched to a network's parameters."""

    nabla_b: List[Vector]
    nabla_w: List[Matrix]

    @classmethod
    def zeros_like(cls, biases: Sequence[Vector], weights: Sequence[Matrix]) -> "Gradients":
        return cls(
            nabla_b=[Vector.zeros(b.length) for b in biases],
            nabla_w=[Matrix.zeros(w.height, w.width) for w in weights],
        )

    def __len__(self) -> int:
        return len(self.nabla_b)

    def __iadd__(self, other: "Gradients") -> "Gradients":
        if len(other) != len(self):
            raise DimensionMismatchError(
                f"Cannot accumulate gradients for {len(other)} layers into {len(self)}"
            )
        for acc_b, acc_w, delta_b, delta_w in zip(
            self.nabla_b, self.nabla_w, other.nabla_b, other.nabla_w
        ):
            acc_b += delta_b
            acc_w += delta_w
        return self

    def scaled(self, factor: float) -> "Gradients":
        return Gradients(
            nabla_b=[factor * b for b in self.nabla_b],
            nabla_w=[factor * w for w in self.nabla_w],
        )


@dataclass(frozen=True)
class ModelDescription:
    """Description of the feed-forward network architecture."""

    layer_sizes: List[int]
    nonlinearity: str
    cost: str

    @property
    def parameter_count(self) -> int:
        sizes = self.layer_sizes
        return sum(sizes[i + 1] * (sizes[i] + 1) for i in range(len(sizes) - 1))


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`nnlib.training.pipelines.run_pipeline`."""

    epochs: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    network: object = field(default=None, repr=False, compare=False)
    dataset: object = field(default=None, repr=False, compare=False)


__all__ = [
    "AnnotatedData",
    "Array",
    "Example",
    "ForwardTrace",
    "Gradients",
    "ModelDescription",
    "RunResult",
]

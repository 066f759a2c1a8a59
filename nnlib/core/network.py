"""Fully connected feed-forward network trained by backpropagation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

import numpy as np

from .activations import SIGMOID, Nonlinearity, get_nonlinearity
from .costs import QUADRATIC, Cost
from .costs import REGISTRY as COST_REGISTRY
from .encoding import get_max_index, one_hot_to_index
from .errors import DimensionMismatchError, InvalidTopologyError
from .linalg import Matrix, Vector
from .types import AnnotatedData, Array, Example, ForwardTrace, Gradients, ModelDescription

logger = logging.getLogger(__name__)


@dataclass(repr=False, eq=False)
class Network:
    """Dense network with one weight matrix and bias vector per layer transition.

    ``weights[i]`` has shape ``layer_sizes[i + 1] x layer_sizes[i]`` and
    ``biases[i]`` has length ``layer_sizes[i + 1]``.  All parameters are drawn
    from a standard normal distribution using a generator seeded by ``seed``.
    A single nonlinearity is used by every layer.
    """

    layer_sizes: Sequence[int]
    nonlinearity: Nonlinearity | str = SIGMOID
    cost: Cost | str = QUADRATIC
    seed: int | None = None
    weights: List[Matrix] = field(init=False)
    biases: List[Vector] = field(init=False)

    def __post_init__(self) -> None:
        sizes = tuple(int(size) for size in self.layer_sizes)
        if len(sizes) < 2:
            raise InvalidTopologyError(
                f"A network needs at least an input and an output layer, got {list(sizes)}"
            )
        if any(size < 1 for size in sizes):
            raise InvalidTopologyError(f"Layer sizes must be positive, got {list(sizes)}")
        self.layer_sizes = sizes
        if isinstance(self.nonlinearity, str):
            self.nonlinearity = get_nonlinearity(self.nonlinearity)
        if isinstance(self.cost, str):
            self.cost = COST_REGISTRY.get(self.cost)
        self.reset(self.seed)

    def __repr__(self) -> str:
        return (
            f"Network(layer_sizes={list(self.layer_sizes)}, "
            f"nonlinearity={self.nonlinearity.name!r}, cost={self.cost.name!r})"
        )

    # ------------------------------------------------------------------
    # Structure

    @property
    def num_layers(self) -> int:
        return len(self.layer_sizes)

    @property
    def input_size(self) -> int:
        return self.layer_sizes[0]

    @property
    def output_size(self) -> int:
        return self.layer_sizes[-1]

    def describe(self) -> ModelDescription:
        return ModelDescription(
            layer_sizes=list(self.layer_sizes),
            nonlinearity=self.nonlinearity.name,
            cost=self.cost.name,
        )

    def reset(self, seed: int | None) -> None:
        """Redraw every weight and bias from ``N(0, 1)``."""

        rng = np.random.default_rng(seed)
        sizes = self.layer_sizes
        logger.info("Randomly initialising network with layer sizes %s", list(sizes))
        self.biases = [Vector.random(n_out, 0.0, 1.0, rng=rng) for n_out in sizes[1:]]
        self.weights = [
            Matrix.random(n_out, n_in, 0.0, 1.0, rng=rng)
            for n_in, n_out in zip(sizes[:-1], sizes[1:])
        ]

    def state_dict(self) -> Mapping[str, Array]:
        state = {f"W{idx}": np.array(W) for idx, W in enumerate(self.weights)}
        state.update({f"b{idx}": np.array(b) for idx, b in enumerate(self.biases)})
        return state

    def parameter_count(self) -> int:
        return self.describe().parameter_count

    # ------------------------------------------------------------------
    # Inference

    def _check_inputs(self, inputs: Vector) -> None:
        if inputs.length != self.input_size:
            raise DimensionMismatchError(
                f"Network expects inputs of length {self.input_size}, got {inputs.length}"
            )

    def validate_example(self, example: Example) -> None:
        """Check ``example`` against the input and output layer sizes."""

        self._check_inputs(example.inputs)
        if example.target.length != self.output_size:
            raise DimensionMismatchError(
                f"Network expects targets of length {self.output_size}, "
                f"got {example.target.length}"
            )

    def feed_forward(self, inputs: Vector) -> Vector:
        """Return the output layer activation for ``inputs``."""

        self._check_inputs(inputs)
        activation = inputs
        for W, b in zip(self.weights, self.biases):
            activation = self.nonlinearity.activate(W * activation + b)
        return activation

    def forward(self, inputs: Vector) -> ForwardTrace:
        """Feed ``inputs`` forward, keeping every weighted input and activation."""

        self._check_inputs(inputs)
        activations: List[Vector] = [inputs]
        zs: List[Vector] = []
        for W, b in zip(self.weights, self.biases):
            z = W * activations[-1] + b
            zs.append(z)
            activations.append(self.nonlinearity.activate(z))
        return ForwardTrace(activations=activations, zs=zs)

    def predict(self, inputs: Vector) -> int:
        return get_max_index(self.feed_forward(inputs))

    # ------------------------------------------------------------------
    # Learning

    def cost_derivative(self, output: Vector, target: Vector) -> Vector:
        """Partial derivative of the per-example cost with respect to ``output``."""

        return self.cost.derivative(output, target)

    def backprop(self, example: Example) -> Gradients:
        """Return the cost gradient for a single example.

        The output error is ``cost_derivative(a_L, y) * f'(z_L)``; earlier
        errors are pulled back through the transposed weights of the layer
        above and multiplied by the local derivative.
        """

        self.validate_example(example)
        trace = self.forward(example.inputs)
        activations, zs = trace.activations, trace.zs
        derivative = self.nonlinearity.activate_derivative

        last = len(self.weights) - 1
        nabla_b: List[Vector] = [None] * (last + 1)  # type: ignore[list-item]
        nabla_w: List[Matrix] = [None] * (last + 1)  # type: ignore[list-item]

        delta = self.cost_derivative(trace.output, example.target) * derivative(zs[last])
        nabla_b[last] = delta
        nabla_w[last] = delta.outer(activations[last])
        for idx in reversed(range(last)):
            delta = (self.weights[idx + 1].transpose() * delta) * derivative(zs[idx])
            nabla_b[idx] = delta
            nabla_w[idx] = delta.outer(activations[idx])
        return Gradients(nabla_b=nabla_b, nabla_w=nabla_w)

    def update_mini_batch(self, batch: Sequence[Example], eta: float) -> None:
        """Apply one gradient-descent step using the gradient averaged over ``batch``."""

        if not batch:
            raise ValueError("Cannot update on an empty mini-batch")
        for example in batch:
            self.validate_example(example)

        nabla = Gradients.zeros_like(self.biases, self.weights)
        for example in batch:
            nabla += self.backprop(example)

        step = eta / len(batch)
        for b, W, nabla_b, nabla_w in zip(self.biases, self.weights, nabla.nabla_b, nabla.nabla_w):
            b -= step * nabla_b
            W -= step * nabla_w

    def evaluate(self, data: AnnotatedData) -> int:
        """Count the examples whose highest output matches the one-hot target."""

        n_correct = 0
        for example in data:
            self.validate_example(example)
            expected = one_hot_to_index(example.target)
            if self.predict(example.inputs) == expected:
                n_correct += 1
        return n_correct


__all__ = ["Network"]

import numpy as np
import pytest

from nnlib.core.activations import RELU, SIGMOID, get_nonlinearity
from nnlib.core.costs import QUADRATIC, REGISTRY
from nnlib.core.errors import DimensionMismatchError
from nnlib.core.linalg import Vector


def test_sigmoid_values_and_derivative():
    out = SIGMOID.activate(Vector([0.0, 100.0, -100.0]))
    assert out[0] == pytest.approx(0.5)
    assert out[1] == pytest.approx(1.0)
    assert out[2] == pytest.approx(0.0, abs=1e-12)
    assert SIGMOID.activate_derivative(Vector([0.0]))[0] == pytest.approx(0.25)


def test_sigmoid_does_not_overflow_on_large_inputs():
    with np.errstate(over="raise"):
        out = SIGMOID.activate(Vector([-1e6, 1e6]))
    assert out.tolist() == pytest.approx([0.0, 1.0])


def test_relu_and_derivative_at_zero():
    z = Vector([-2.0, 0.0, 3.0])
    assert RELU.activate(z) == Vector([0.0, 0.0, 3.0])
    assert RELU.activate_derivative(z) == Vector([0.0, 0.0, 1.0])


def test_nonlinearity_lookup():
    assert get_nonlinearity("ReLU") is RELU
    assert get_nonlinearity("sigmoid") is SIGMOID
    with pytest.raises(KeyError, match="Available nonlinearities"):
        get_nonlinearity("tanh")


def test_quadratic_cost_and_derivative():
    output = Vector([0.5, 0.25])
    target = Vector([1.0, 0.0])
    assert QUADRATIC(output, target) == pytest.approx(0.5 * (0.25 + 0.0625))
    assert QUADRATIC.derivative(output, target) == Vector([-0.5, 0.25])


def test_cost_rejects_mismatched_lengths():
    with pytest.raises(DimensionMismatchError):
        QUADRATIC.derivative(Vector([1.0]), Vector([1.0, 0.0]))


def test_cost_registry_alias():
    assert "mse" in REGISTRY.names()
    assert REGISTRY.get("quadratic") is QUADRATIC
    with pytest.raises(KeyError):
        REGISTRY.get("cross-entropy")

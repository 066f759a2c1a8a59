import numpy as np
import pytest

from nnlib.core.activations import RELU, SIGMOID
from nnlib.core.encoding import index_to_one_hot
from nnlib.core.errors import DimensionMismatchError, InvalidTopologyError, MalformedOneHotError
from nnlib.core.linalg import Vector
from nnlib.core.network import Network
from nnlib.core.types import Example, Gradients


def _snapshot(network):
    return {key: value.copy() for key, value in network.state_dict().items()}


def _assert_same_state(before, after):
    assert before.keys() == after.keys()
    for key in before:
        np.testing.assert_array_equal(before[key], after[key])


@pytest.mark.parametrize("sizes", [[], [3], [2, 0, 1], [0, 2]])
def test_invalid_topology(sizes):
    with pytest.raises(InvalidTopologyError):
        Network(sizes)


def test_parameter_shapes_and_count():
    network = Network([3, 4, 2], seed=0)
    assert [w.shape for w in network.weights] == [(4, 3), (2, 4)]
    assert [b.length for b in network.biases] == [4, 2]
    assert network.parameter_count() == 4 * 4 + 2 * 5
    assert network.describe().nonlinearity == "sigmoid"


def test_same_seed_gives_same_parameters():
    _assert_same_state(_snapshot(Network([2, 3, 2], seed=5)), _snapshot(Network([2, 3, 2], seed=5)))


def test_string_names_resolve():
    network = Network([1, 2], nonlinearity="relu", cost="mse", seed=0)
    assert network.nonlinearity is RELU
    assert network.cost.name == "mse"


def test_feed_forward_is_pure():
    network = Network([2, 3, 2], seed=1)
    x = Vector([0.3, -0.7])
    before = _snapshot(network)
    first = network.feed_forward(x)
    second = network.feed_forward(x)
    assert first == second
    assert x == Vector([0.3, -0.7])
    _assert_same_state(before, _snapshot(network))


def test_feed_forward_matches_forward_trace():
    network = Network([2, 3, 2], seed=2)
    x = Vector([1.0, 2.0])
    trace = network.forward(x)
    assert len(trace.zs) == 2
    assert len(trace.activations) == 3
    assert trace.output.allclose(network.feed_forward(x))


def test_feed_forward_rejects_wrong_input_length():
    network = Network([2, 2], seed=0)
    with pytest.raises(DimensionMismatchError):
        network.feed_forward(Vector([1.0, 2.0, 3.0]))


def test_single_layer_sigmoid_output_is_bounded():
    network = Network([1, 2], nonlinearity=SIGMOID, seed=0)
    out = network.feed_forward(Vector([10.0]))
    assert all(0.0 < value < 1.0 for value in out)


def _numeric_cost(network, example):
    return network.cost(network.feed_forward(example.inputs), example.target)


@pytest.mark.parametrize("seed", [0, 3])
def test_backprop_matches_finite_differences(seed):
    network = Network([2, 3, 2], seed=seed)
    example = Example(Vector([0.4, -0.6]), index_to_one_hot(1, 2))
    grads = network.backprop(example)
    eps = 1e-6

    for layer, W in enumerate(network.weights):
        for i in range(W.height):
            for j in range(W.width):
                original = W[i, j]
                W[i, j] = original + eps
                plus = _numeric_cost(network, example)
                W[i, j] = original - eps
                minus = _numeric_cost(network, example)
                W[i, j] = original
                numeric = (plus - minus) / (2 * eps)
                assert grads.nabla_w[layer][i, j] == pytest.approx(numeric, abs=1e-4)

    for layer, b in enumerate(network.biases):
        for i in range(b.length):
            original = b[i]
            b[i] = original + eps
            plus = _numeric_cost(network, example)
            b[i] = original - eps
            minus = _numeric_cost(network, example)
            b[i] = original
            numeric = (plus - minus) / (2 * eps)
            assert grads.nabla_b[layer][i] == pytest.approx(numeric, abs=1e-4)


def test_backprop_gradient_shapes():
    network = Network([3, 4, 2], seed=0)
    grads = network.backprop(Example(Vector([1.0, 0.0, -1.0]), index_to_one_hot(0, 2)))
    assert [g.shape for g in grads.nabla_w] == [w.shape for w in network.weights]
    assert [g.length for g in grads.nabla_b] == [b.length for b in network.biases]


def test_batch_of_one_update_equals_single_gradient_step():
    network = Network([2, 3, 2], seed=4)
    example = Example(Vector([0.2, 0.9]), index_to_one_hot(0, 2))
    eta = 0.5
    grads = network.backprop(example)
    expected_w = [W - eta * g for W, g in zip(network.weights, grads.nabla_w)]
    expected_b = [b - eta * g for b, g in zip(network.biases, grads.nabla_b)]

    network.update_mini_batch([example], eta)

    for W, expected in zip(network.weights, expected_w):
        assert W.allclose(expected)
    for b, expected in zip(network.biases, expected_b):
        assert b.allclose(expected)


def test_update_averages_over_batch():
    network = Network([1, 2], seed=0)
    a = Example(Vector([1.0]), index_to_one_hot(0, 2))
    b = Example(Vector([-1.0]), index_to_one_hot(1, 2))
    mean = network.backprop(a)
    mean += network.backprop(b)
    mean = mean.scaled(0.5)
    expected_w = network.weights[0] - 2.0 * mean.nabla_w[0]

    network.update_mini_batch([a, b], 2.0)

    assert network.weights[0].allclose(expected_w)


def test_malformed_example_leaves_parameters_untouched():
    network = Network([2, 2], seed=0)
    good = Example(Vector([1.0, 0.0]), index_to_one_hot(0, 2))
    bad = Example(Vector([1.0, 0.0]), index_to_one_hot(0, 3))
    before = _snapshot(network)
    with pytest.raises(DimensionMismatchError):
        network.update_mini_batch([good, bad], 1.0)
    _assert_same_state(before, _snapshot(network))


def test_empty_batch_is_rejected():
    with pytest.raises(ValueError):
        Network([1, 1], seed=0).update_mini_batch([], 1.0)


def test_evaluate_counts_correct_predictions():
    network = Network([1, 2], seed=0)
    data = [
        Example(Vector([value]), index_to_one_hot(network.predict(Vector([value])), 2))
        for value in (-1.0, 0.5, 2.0)
    ]
    assert network.evaluate(data) == 3
    assert network.evaluate([]) == 0


def test_gradient_accumulation_requires_matching_layers():
    small = Network([1, 2], seed=0)
    deep = Network([1, 2, 2], seed=0)
    acc = Gradients.zeros_like(small.biases, small.weights)
    with pytest.raises(DimensionMismatchError):
        acc += Gradients.zeros_like(deep.biases, deep.weights)


def test_evaluate_rejects_target_that_is_not_one_hot():
    network = Network([1, 2], seed=0)
    with pytest.raises(MalformedOneHotError):
        network.evaluate([Example(Vector([1.0]), Vector([0.0, 0.0]))])


def test_evaluate_rejects_target_longer_than_output():
    network = Network([1, 2], seed=0)
    with pytest.raises(DimensionMismatchError):
        network.evaluate([Example(Vector([1.0]), index_to_one_hot(2, 3))])

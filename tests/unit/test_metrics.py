import pytest

from nnlib.core.encoding import index_to_one_hot
from nnlib.core.errors import DimensionMismatchError
from nnlib.core.linalg import Vector
from nnlib.core.network import Network
from nnlib.core.types import Example
from nnlib.training.metrics import accuracy, evaluation_metrics, mean_cost


def _data():
    return [
        Example(Vector([-1.0]), index_to_one_hot(0, 2)),
        Example(Vector([0.5]), index_to_one_hot(1, 2)),
        Example(Vector([2.0]), index_to_one_hot(1, 2)),
    ]


def test_evaluation_metrics_agree_with_evaluate_and_mean_cost():
    network = Network([1, 2], seed=3)
    data = _data()
    metrics = evaluation_metrics(network, data)
    assert metrics["correct"] == network.evaluate(data)
    assert metrics["total"] == 3
    assert metrics["accuracy"] == pytest.approx(network.evaluate(data) / 3)
    assert metrics["cost"] == pytest.approx(mean_cost(network, data))


def test_evaluation_metrics_feed_each_example_forward_once(monkeypatch):
    network = Network([1, 2], seed=3)
    calls = []
    feed_forward = network.feed_forward

    def _counting(inputs):
        calls.append(inputs)
        return feed_forward(inputs)

    monkeypatch.setattr(network, "feed_forward", _counting)
    evaluation_metrics(network, _data())
    assert len(calls) == 3


def test_evaluation_metrics_on_empty_data():
    metrics = evaluation_metrics(Network([1, 2], seed=0), [])
    assert metrics == {"correct": 0.0, "total": 0.0, "accuracy": 0.0, "cost": 0.0}
    assert accuracy(0, 0) == 0.0


def test_evaluation_metrics_validate_targets():
    with pytest.raises(DimensionMismatchError):
        evaluation_metrics(Network([1, 2], seed=0), [Example(Vector([1.0]), index_to_one_hot(0, 3))])

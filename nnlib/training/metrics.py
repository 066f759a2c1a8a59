"""Metric helpers for the SGD trainer."""

from __future__ import annotations

from typing import Dict, Mapping

import numpy as np

from ..core.encoding import get_max_index, one_hot_to_index
from ..core.network import Network
from ..core.types import AnnotatedData


def accuracy(correct: int, total: int) -> float:
    return float(correct) / total if total else 0.0


def mean_cost(network: Network, data: AnnotatedData) -> float:
    """Average per-example cost of ``network`` over ``data``."""

    if not data:
        return 0.0
    costs = [network.cost(network.feed_forward(ex.inputs), ex.target) for ex in data]
    return float(np.mean(costs))


def evaluation_metrics(network: Network, data: AnnotatedData) -> Mapping[str, float]:
    """Return ``correct``, ``total``, ``accuracy`` and mean ``cost`` on ``data``.

    Each example is fed forward once; the same output scores both the
    prediction and the cost.
    """

    correct = 0
    costs = []
    for example in data:
        network.validate_example(example)
        expected = one_hot_to_index(example.target)
        output = network.feed_forward(example.inputs)
        if get_max_index(output) == expected:
            correct += 1
        costs.append(network.cost(output, example.target))
    total = len(data)
    results: Dict[str, float] = {
        "correct": float(correct),
        "total": float(total),
        "accuracy": accuracy(correct, total),
        "cost": float(np.mean(costs)) if costs else 0.0,
    }
    return results


__all__ = ["accuracy", "evaluation_metrics", "mean_cost"]

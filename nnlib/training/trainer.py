"""Epoch-level mini-batch stochastic gradient descent."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..core.errors import NonDivisibleBatchError
from ..core.network import Network
from ..core.types import AnnotatedData, Example
from .metrics import evaluation_metrics

logger = logging.getLogger(__name__)


def epoch_seed(seed: int | None, epoch: int) -> np.random.SeedSequence:
    """Return the seed material used to shuffle ``epoch``.

    With a fixed ``seed`` the sequence is derived from ``(seed, epoch)`` so
    every epoch gets a different but reproducible permutation.  Without one a
    time-based value is mixed with the epoch counter.
    """

    if seed is None:
        return np.random.SeedSequence([time.time_ns(), epoch])
    return np.random.SeedSequence([int(seed), epoch])


def _check_batching(n_examples: int, mini_batch_size: int) -> None:
    if mini_batch_size < 1:
        raise ValueError(f"mini_batch_size must be positive, got {mini_batch_size}")
    if n_examples % mini_batch_size != 0:
        raise NonDivisibleBatchError(
            f"{n_examples} training examples do not divide into "
            f"mini-batches of {mini_batch_size}"
        )


def partition(data: Sequence[Example], mini_batch_size: int) -> Iterator[Sequence[Example]]:
    """Yield contiguous slices of exactly ``mini_batch_size`` examples."""

    _check_batching(len(data), mini_batch_size)
    for start in range(0, len(data), mini_batch_size):
        yield data[start : start + mini_batch_size]


@dataclass
class TrainResult:
    """History of the metrics reported by :meth:`Trainer.sgd`."""

    epochs: int
    history: List[Tuple[int, Mapping[str, float]]] = field(default_factory=list)

    @property
    def final(self) -> Mapping[str, float]:
        return self.history[-1][1] if self.history else {}


class Trainer:
    """Train a :class:`Network` with mini-batch SGD and report each epoch."""

    def __init__(
        self,
        network: Network,
        callbacks: Sequence[object] | None = None,
        seed: int | None = None,
    ) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])
        self.seed = seed

    def sgd(
        self,
        training_data: AnnotatedData,
        epochs: int,
        mini_batch_size: int,
        eta: float,
        test_data: Optional[AnnotatedData] = None,
    ) -> TrainResult:
        """Run ``epochs`` passes of mini-batch SGD over ``training_data``.

        When ``test_data`` is given the network is evaluated before training
        and after every epoch; otherwise only epoch completion is reported.
        ``training_data`` itself is left in its original order.
        """

        if epochs < 0:
            raise ValueError(f"epochs must be non-negative, got {epochs}")
        result = TrainResult(epochs=epochs)
        if epochs > 0:
            _check_batching(len(training_data), mini_batch_size)
            for example in training_data:
                self.network.validate_example(example)

        if test_data is not None:
            metrics = evaluation_metrics(self.network, test_data)
            logger.info("Initial evaluation: %d / %d", metrics["correct"], metrics["total"])
            self._emit_epoch(0, metrics, result)

        working = list(training_data)
        for epoch in range(1, epochs + 1):
            self._shuffle(working, epoch)
            n_batches = 0
            for mini_batch in partition(working, mini_batch_size):
                self.network.update_mini_batch(mini_batch, eta)
                n_batches += 1

            if test_data is not None:
                metrics = evaluation_metrics(self.network, test_data)
                logger.info("Epoch %d: %d / %d", epoch, metrics["correct"], metrics["total"])
            else:
                metrics = {"mini_batches": float(n_batches), "examples": float(len(working))}
                logger.info("Epoch %d complete", epoch)
            self._emit_epoch(epoch, metrics, result)
        return result

    # ------------------------------------------------------------------
    # Internal helpers

    def _shuffle(self, data: List[Example], epoch: int) -> None:
        rng = np.random.default_rng(epoch_seed(self.seed, epoch))
        order = rng.permutation(len(data))
        data[:] = [data[idx] for idx in order]

    def _emit_epoch(
        self, epoch: int, metrics: Mapping[str, float], result: TrainResult
    ) -> None:
        result.history.append((epoch, dict(metrics)))
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


def sgd(
    network: Network,
    training_data: AnnotatedData,
    epochs: int,
    mini_batch_size: int,
    eta: float,
    test_data: Optional[AnnotatedData] = None,
    *,
    seed: int | None = None,
    callbacks: Sequence[object] = (),
) -> TrainResult:
    """Functional entry point mirroring :meth:`Trainer.sgd`."""

    trainer = Trainer(network, callbacks=callbacks, seed=seed)
    return trainer.sgd(training_data, epochs, mini_batch_size, eta, test_data)


def evaluate(network: Network, data: AnnotatedData) -> int:
    """Return how many examples in ``data`` ``network`` classifies correctly."""

    return network.evaluate(data)


__all__ = ["TrainResult", "Trainer", "epoch_seed", "evaluate", "partition", "sgd"]

"""Pure in-memory synthetic datasets."""

from __future__ import annotations

import numpy as np

from ..core.encoding import index_to_one_hot
from ..core.linalg import Vector
from ..core.types import AnnotatedData, Example
from .registry import DataSpec, DatasetSpec, register_dataset


def make_sign_examples(n_examples: int, rng: np.random.Generator) -> AnnotatedData:
    """Label standard-normal scalars as positive (class 0) or not (class 1)."""

    values = rng.standard_normal(n_examples)
    return [
        Example(inputs=Vector([value]), target=index_to_one_hot(0 if value > 0 else 1, 2))
        for value in values
    ]


def _factory(
    n_train: int = 80,
    n_test: int = 20,
    seed: int = 0,
    **_: object,
) -> DatasetSpec:
    rng = np.random.default_rng(seed)
    training = make_sign_examples(n_train, rng)
    test = make_sign_examples(n_test, rng)

    provenance = {
        "type": "synthetic",
        "n_train": n_train,
        "n_test": n_test,
        "seed": seed,
    }
    data_spec = DataSpec(d_in=1, d_out=2, num_classes=2, extra={"labels": ["positive", "negative"]})
    return DatasetSpec(
        name="sign",
        training=training,
        test=test,
        data_spec=data_spec,
        provenance=provenance,
    )


register_dataset("sign", _factory)


@register_dataset("unit")
def _unit_factory(n_train: int = 0, n_test: int = 1, **_: object) -> DatasetSpec:
    """Single-feature, single-class data: every input is ``[1.0]``."""

    def _make(n: int) -> AnnotatedData:
        return [Example(inputs=Vector([1.0]), target=index_to_one_hot(0, 1)) for _ in range(n)]

    return DatasetSpec(
        name="unit",
        training=_make(n_train),
        test=_make(n_test),
        data_spec=DataSpec(d_in=1, d_out=1, num_classes=1),
        provenance={"type": "synthetic", "n_train": n_train, "n_test": n_test},
    )


__all__ = ["make_sign_examples"]

"""MNIST dataset read from IDX files, with a deterministic offline fixture."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import numpy as np

from ..core.linalg import Matrix
from .idx import annotate, read_idx_images, read_idx_labels
from .registry import DataSpec, DatasetSpec, register_dataset
from .utils import resolve_data_dir, truncate

NUM_CLASSES = 10
IMAGE_SHAPE = (28, 28)

# Both the official hyphenated names and the dotted variants are accepted.
_FILES = {
    "train_images": ("train-images-idx3-ubyte", "train-images.idx3-ubyte"),
    "train_labels": ("train-labels-idx1-ubyte", "train-labels.idx1-ubyte"),
    "test_images": ("t10k-images-idx3-ubyte", "t10k-images.idx3-ubyte"),
    "test_labels": ("t10k-labels-idx1-ubyte", "t10k-labels.idx1-ubyte"),
}


def locate(data_dir: Path, key: str) -> Path:
    """Find the file for ``key`` in ``data_dir``, compressed or not."""

    for stem in _FILES[key]:
        for suffix in ("", ".gz"):
            candidate = data_dir / f"{stem}{suffix}"
            if candidate.exists():
                return candidate
    names = ", ".join(_FILES[key])
    raise FileNotFoundError(f"Could not find any of [{names}] (optionally .gz) in {data_dir}")


def _offline_dataset(num_samples: int, seed: int) -> Tuple[List[Matrix], np.ndarray]:
    """Return a deterministic MNIST-shaped dataset.

    Each class lights a distinct pair of rows on top of low-intensity noise,
    so the fixture is learnable without being trivially constant.
    """

    rng = np.random.default_rng(seed)
    labels = rng.integers(0, NUM_CLASSES, size=num_samples, dtype=np.int64)
    images = rng.uniform(0.0, 0.2, size=(num_samples, *IMAGE_SHAPE))
    for image, label in zip(images, labels):
        top = 4 + 2 * int(label)
        image[top : top + 2, 4:24] = 1.0
    return [Matrix(image) for image in images], labels


@register_dataset("mnist")
def build_mnist(
    *,
    data_dir: str | Path | None = None,
    offline: bool = True,
    max_train: int | None = None,
    max_test: int | None = None,
    offline_train: int = 200,
    offline_test: int = 50,
    seed: int = 0,
) -> DatasetSpec:
    """Create a :class:`DatasetSpec` for MNIST.

    With ``offline=True`` a synthetic fixture of ``offline_train`` and
    ``offline_test`` examples is generated from ``seed``; otherwise the four
    standard IDX files are read from ``data_dir``.
    """

    if offline:
        train_images, train_labels = _offline_dataset(offline_train, seed)
        test_images, test_labels = _offline_dataset(offline_test, seed + 1)
        provenance: dict[str, object] = {"mode": "offline", "source": "synthetic", "seed": seed}
    else:
        root = resolve_data_dir(data_dir, "mnist")
        paths = {key: locate(root, key) for key in _FILES}
        train_images = read_idx_images(paths["train_images"])
        train_labels = read_idx_labels(paths["train_labels"])
        test_images = read_idx_images(paths["test_images"])
        test_labels = read_idx_labels(paths["test_labels"])
        provenance = {"mode": "files", "files": {key: str(path) for key, path in paths.items()}}

    training = truncate(annotate(train_images, train_labels, NUM_CLASSES), max_train)
    test = truncate(annotate(test_images, test_labels, NUM_CLASSES), max_test)

    height, width = train_images[0].shape if train_images else IMAGE_SHAPE
    data_spec = DataSpec(
        d_in=height * width,
        d_out=NUM_CLASSES,
        num_classes=NUM_CLASSES,
        extra={"image_shape": [height, width]},
    )
    provenance = dict(provenance)
    provenance.update({"max_train": max_train, "max_test": max_test})
    return DatasetSpec(
        name="mnist",
        training=training,
        test=test,
        data_spec=data_spec,
        provenance=provenance,
    )


__all__ = ["build_mnist", "locate"]

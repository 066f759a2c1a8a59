"""Dataset registry and loader helpers."""

# Ensure built-in datasets register themselves when the package is imported.
from . import mnist as _mnist  # noqa: F401
from . import synthetic as _synthetic  # noqa: F401
from .idx import annotate, read_idx, read_idx_images, read_idx_labels
from .registry import (
    DatasetSpec,
    DataSpec,
    available_datasets,
    get_dataset,
    register_dataset,
)

__all__ = [
    "DataSpec",
    "DatasetSpec",
    "annotate",
    "available_datasets",
    "get_dataset",
    "read_idx",
    "read_idx_images",
    "read_idx_labels",
    "register_dataset",
]

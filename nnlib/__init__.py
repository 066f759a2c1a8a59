"""nnlib public API."""

from .core.activations import RELU, SIGMOID, Nonlinearity, get_nonlinearity
from .core.costs import QUADRATIC, Cost
from .core.encoding import get_max_index, index_to_one_hot, one_hot_to_index
from .core.errors import (
    DimensionMismatchError,
    IdxFormatError,
    InvalidTopologyError,
    MalformedOneHotError,
    NNLibError,
    NonDivisibleBatchError,
)
from .core.linalg import Matrix, Vector
from .core.network import Network
from .core.types import AnnotatedData, Example, Gradients
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer, evaluate, sgd

__all__ = [
    "AnnotatedData",
    "Cost",
    "DimensionMismatchError",
    "Example",
    "Gradients",
    "IdxFormatError",
    "InvalidTopologyError",
    "MalformedOneHotError",
    "Matrix",
    "NNLibError",
    "Network",
    "NonDivisibleBatchError",
    "Nonlinearity",
    "QUADRATIC",
    "RELU",
    "SIGMOID",
    "Trainer",
    "Vector",
    "evaluate",
    "get_max_index",
    "get_nonlinearity",
    "index_to_one_hot",
    "load_preset",
    "one_hot_to_index",
    "presets",
    "run_pipeline",
    "sgd",
]

"""Exception taxonomy for nnlib."""

from __future__ import annotations


class NNLibError(Exception):
    """Base class for all nnlib errors."""


class DimensionMismatchError(NNLibError, ValueError):
    """Raised when operands or examples have incompatible shapes."""


class InvalidTopologyError(NNLibError, ValueError):
    """Raised when a network is constructed with an unusable layer layout."""


class NonDivisibleBatchError(NNLibError, ValueError):
    """Raised when the training set does not split into whole mini-batches."""


class MalformedOneHotError(NNLibError, ValueError):
    """Raised when a target vector is not a one-hot encoding."""


class IdxFormatError(NNLibError, ValueError):
    """Raised when an IDX file does not match its declared header."""


__all__ = [
    "NNLibError",
    "DimensionMismatchError",
    "InvalidTopologyError",
    "NonDivisibleBatchError",
    "MalformedOneHotError",
    "IdxFormatError",
]

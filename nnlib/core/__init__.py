"""Core numerical primitives for nnlib."""

from . import activations, costs, encoding, errors, linalg, network, types

__all__ = ["activations", "costs", "encoding", "errors", "linalg", "network", "types"]

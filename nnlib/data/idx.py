"""Reader for the big-endian IDX layout used by the MNIST distribution.

An IDX file starts with a 4-byte magic number (two zero bytes, a type code
and the number of dimensions), followed by one unsigned 32-bit size per
dimension and then the raw payload in row-major order.
"""

from __future__ import annotations

import gzip
import logging
import struct
from pathlib import Path
from typing import List, Sequence

import numpy as np

from ..core.encoding import index_to_one_hot
from ..core.errors import IdxFormatError
from ..core.linalg import Matrix
from ..core.types import AnnotatedData, Example

logger = logging.getLogger(__name__)

_TYPE_CODES = {
    0x08: np.dtype(np.uint8),
    0x09: np.dtype(np.int8),
    0x0B: np.dtype(">i2"),
    0x0C: np.dtype(">i4"),
    0x0D: np.dtype(">f4"),
    0x0E: np.dtype(">f8"),
}


def _read_bytes(path: Path) -> bytes:
    logger.info("Reading %s", path)
    if path.suffix == ".gz":
        with gzip.open(path, "rb") as handle:
            return handle.read()
    return path.read_bytes()


def parse_idx(payload: bytes) -> np.ndarray:
    """Decode an in-memory IDX file into an array of its declared shape."""

    if len(payload) < 4:
        raise IdxFormatError("IDX data is shorter than its 4-byte magic number")
    zero_a, zero_b, type_code, ndim = payload[:4]
    if zero_a != 0 or zero_b != 0:
        raise IdxFormatError(f"Bad IDX magic number 0x{payload[:4].hex()}")
    if type_code not in _TYPE_CODES:
        raise IdxFormatError(f"Unknown IDX type code 0x{type_code:02x}")

    header_end = 4 + 4 * ndim
    if len(payload) < header_end:
        raise IdxFormatError(f"IDX header declares {ndim} dimensions but is truncated")
    shape = struct.unpack(f">{ndim}I", payload[4:header_end])

    dtype = _TYPE_CODES[type_code]
    expected = int(np.prod(shape, dtype=np.int64)) * dtype.itemsize
    actual = len(payload) - header_end
    if actual != expected:
        raise IdxFormatError(
            f"IDX header declares shape {shape} ({expected} bytes) "
            f"but the payload holds {actual} bytes"
        )
    return np.frombuffer(payload, dtype=dtype, offset=header_end).reshape(shape)


def read_idx(path: str | Path) -> np.ndarray:
    """Read an IDX file, decompressing ``.gz`` files transparently."""

    return parse_idx(_read_bytes(Path(path)))


def read_idx_images(path: str | Path) -> List[Matrix]:
    """Read a 3-D IDX image file; unsigned byte pixels are scaled to ``[0, 1]``."""

    images = read_idx(path)
    if images.ndim != 3:
        raise IdxFormatError(f"Expected a 3-dimensional image file, got {images.ndim} dimensions")
    scaled = images.astype(np.float64)
    if images.dtype == np.uint8:
        scaled /= 255.0
    return [Matrix(image) for image in scaled]


def read_idx_labels(path: str | Path) -> np.ndarray:
    """Read a 1-D IDX label file."""

    labels = read_idx(path)
    if labels.ndim != 1:
        raise IdxFormatError(f"Expected a 1-dimensional label file, got {labels.ndim} dimensions")
    return labels.astype(np.int64)


def annotate(
    images: Sequence[Matrix], labels: Sequence[int], n_classes: int = 10
) -> AnnotatedData:
    """Pair flattened images with one-hot encoded labels."""

    if len(images) != len(labels):
        raise ValueError(f"Got {len(images)} images but {len(labels)} labels")
    return [
        Example(inputs=image.flatten(), target=index_to_one_hot(int(label), n_classes))
        for image, label in zip(images, labels)
    ]


__all__ = ["annotate", "parse_idx", "read_idx", "read_idx_images", "read_idx_labels"]

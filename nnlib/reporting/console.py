"""Terminal rendering of grey-scale images using half-block glyphs."""

from __future__ import annotations

from typing import List

from ..core.errors import DimensionMismatchError
from ..core.linalg import Matrix, Vector

# Indexed by (top lit) * 2 + (bottom lit).
_GLYPHS = (" ", "▄", "▀", "█")


def vector_to_image(vector: Vector, height: int, width: int) -> Matrix:
    """Reshape a flattened row-major ``vector`` into a ``height`` x ``width`` image."""

    if len(vector) != height * width:
        raise DimensionMismatchError(
            f"Cannot reshape vector of length {len(vector)} into {height}x{width}"
        )
    return Matrix(vector.elements.reshape(height, width))


def render_image(image: Matrix, threshold: float = 0.5) -> str:
    """Return ``image`` as text, two pixel rows per line of output."""

    if image.height % 2:
        raise DimensionMismatchError(f"Image height must be even, got {image.height}")
    lit = image.buffer >= threshold
    lines: List[str] = []
    for top, bottom in zip(lit[0::2], lit[1::2]):
        lines.append("".join(_GLYPHS[int(t) * 2 + int(b)] for t, b in zip(top, bottom)))
    return "\n".join(lines)


__all__ = ["render_image", "vector_to_image"]

"""Utility helpers for dataset loaders."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence, TypeVar

DEFAULT_CACHE_SUBDIR = Path.home() / ".cache" / "nnlib"

T = TypeVar("T")


def resolve_data_dir(data_dir: str | Path | None = None, *parts: str) -> Path:
    """Resolve the directory holding dataset files.

    Precedence: explicit ``data_dir``, then ``NNLIB_CACHE_DIR``, then
    ``~/.cache/nnlib``.  ``parts`` are appended only to the fallbacks.
    """

    if data_dir is not None:
        return Path(data_dir)
    env_dir = os.environ.get("NNLIB_CACHE_DIR")
    base = Path(env_dir) if env_dir else DEFAULT_CACHE_SUBDIR
    return base.joinpath(*parts)


def truncate(items: Sequence[T], limit: int | None) -> list[T]:
    """Return at most ``limit`` leading items (all of them when ``limit`` is None)."""

    if limit is None:
        return list(items)
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")
    return list(items[:limit])


__all__ = ["DEFAULT_CACHE_SUBDIR", "resolve_data_dir", "truncate"]

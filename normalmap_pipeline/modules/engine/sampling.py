"""Edge handling for neighbourhood sampling."""
from __future__ import annotations

from typing import Tuple

import numpy as np


def resolve_axis(indices, size: int, wrap: bool) -> np.ndarray:
    """Map integer *indices* onto ``[0, size)`` by toroidal wrap or edge clamp."""

    indices = np.asarray(indices, dtype=np.intp)
    if wrap:
        return ((indices % size) + size) % size
    return np.clip(indices, 0, size - 1)


def resolve(x: int, y: int, width: int, height: int, wrap: bool) -> Tuple[int, int]:
    """Return the in-bounds coordinate sampled for ``(x, y)``."""

    if wrap:
        return ((x % width) + width) % width, ((y % height) + height) % height
    return min(max(x, 0), width - 1), min(max(y, 0), height - 1)


__all__ = ["resolve", "resolve_axis"]

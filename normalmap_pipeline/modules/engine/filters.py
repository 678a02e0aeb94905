"""Gradient estimation over a height field using the kernel tables."""
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .conversion import ConversionConfig
from .parameters import KERNELS, kernel_norm
from .sampling import resolve, resolve_axis


def _taps(config: ConversionConfig):
    """Yield ``(dx_offset, dy_offset, wx, wy)`` for every non-zero kernel tap."""

    kx, ky = KERNELS[config.filter_kind]
    radius = kx.shape[0] // 2
    for row in range(kx.shape[0]):
        for col in range(kx.shape[1]):
            wx = float(kx[row, col])
            wy = float(ky[row, col])
            if wx == 0.0 and wy == 0.0:
                continue
            yield col - radius, row - radius, wx, wy


def gradient(x: int, y: int, heights: np.ndarray, config: ConversionConfig) -> Tuple[float, float]:
    """Gradient ``(dx, dy)`` at one pixel of a ``(height, width)`` height field."""

    rows, cols = heights.shape
    dx = 0.0
    dy = 0.0
    for off_x, off_y, wx, wy in _taps(config):
        sx, sy = resolve(x + off_x, y + off_y, cols, rows, config.wrap_edges)
        sample = float(heights[sy, sx])
        dx += wx * sample
        dy += wy * sample
    norm = kernel_norm(config.filter_kind)
    return dx / norm, dy / norm


def gradient_field(
    heights: np.ndarray,
    config: ConversionConfig,
    rows: Optional[Tuple[int, int]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Gradients for the row band ``[start, stop)`` (the whole field by default).

    Neighbours are read from the full field, so bands computed separately
    match a single full-field pass exactly.
    """

    height, width = heights.shape
    start, stop = (0, height) if rows is None else rows
    row_index = np.arange(start, stop)
    col_index = np.arange(width)

    dx = np.zeros((stop - start, width), dtype=np.float64)
    dy = np.zeros_like(dx)
    band_cache = {}
    for off_x, off_y, wx, wy in _taps(config):
        band = band_cache.get(off_y)
        if band is None:
            band = heights[resolve_axis(row_index + off_y, height, config.wrap_edges)]
            band_cache[off_y] = band
        sample = band[:, resolve_axis(col_index + off_x, width, config.wrap_edges)]
        if wx:
            dx += wx * sample
        if wy:
            dy += wy * sample

    norm = kernel_norm(config.filter_kind)
    return dx / norm, dy / norm


__all__ = ["gradient", "gradient_field"]

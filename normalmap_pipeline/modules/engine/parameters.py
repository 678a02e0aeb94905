"""Selectors, constants and kernel tables for the normal map engine."""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple

import numpy as np


class FilterKind(str, Enum):
    """Gradient estimator applied to the height field."""

    NONE = "none"
    SOBEL_3X3 = "sobel3x3"
    SOBEL_5X5 = "sobel5x5"
    PREWITT_3X3 = "prewitt3x3"
    PREWITT_5X5 = "prewitt5x5"
    BOX_3X3 = "3x3"
    BOX_5X5 = "5x5"
    BOX_7X7 = "7x7"
    BOX_9X9 = "9x9"


class HeightMode(str, Enum):
    """How a source pixel is turned into a height value."""

    KEYED_RGB = "keyed_rgb"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    BIASED_RGB = "biased_rgb"
    MIN_RGB = "min_rgb"
    MAX_RGB = "max_rgb"
    COLORSPACE = "colorspace"
    NORMALIZE_ONLY = "normalize_only"
    DUDV_PASSTHROUGH = "dudv"
    HEIGHTMAP_PASSTHROUGH = "heightmap"


class Encoding(str, Enum):
    """Byte layout used to store normal components."""

    UNSIGNED_8 = "unsigned8"
    SIGNED_8 = "signed8"


class AlphaMode(str, Enum):
    """What the output alpha channel carries."""

    OPAQUE = "opaque"
    HEIGHT = "height"
    INVERSE_HEIGHT = "inverse_height"
    ZERO = "zero"
    PRESERVE = "preserve"


PASSTHROUGH_MODES = frozenset({HeightMode.DUDV_PASSTHROUGH, HeightMode.HEIGHTMAP_PASSTHROUGH})

# Perceptual weights for the biased RGB height mode.
BIASED_RGB_WEIGHTS = (0.30, 0.59, 0.11)

UNSIGNED_8_SCALE = 127.5
SIGNED_8_SCALE = 127.0

DEFAULT_SCALE = 2.0
DEFAULT_ALPHA = 255


def _separable(smoothing: Tuple[int, ...], derivative: Tuple[int, ...]) -> np.ndarray:
    return np.outer(np.asarray(smoothing, dtype=np.float64), np.asarray(derivative, dtype=np.float64))


def _linear_offsets(size: int) -> np.ndarray:
    """Rows of signed column offsets, e.g. ``[-1, 0, 1]`` repeated for 3x3."""

    radius = size // 2
    row = np.arange(-radius, radius + 1, dtype=np.float64)
    return np.tile(row, (size, 1))


def _freeze(kernel: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    kx = np.array(kernel, dtype=np.float64)
    ky = np.ascontiguousarray(kx.T)
    kx.setflags(write=False)
    ky.setflags(write=False)
    return kx, ky


# (kx, ky) pairs; ky is the transpose of kx so +y follows increasing row index.
KERNELS: Mapping[FilterKind, Tuple[np.ndarray, np.ndarray]] = MappingProxyType(
    {
        FilterKind.NONE: _freeze(np.array([[0, 0, 0], [-1, 0, 1], [0, 0, 0]])),
        FilterKind.SOBEL_3X3: _freeze(_separable((1, 2, 1), (-1, 0, 1))),
        FilterKind.SOBEL_5X5: _freeze(_separable((1, 4, 6, 4, 1), (-1, -2, 0, 2, 1))),
        FilterKind.PREWITT_3X3: _freeze(_separable((1, 1, 1), (-1, 0, 1))),
        FilterKind.PREWITT_5X5: _freeze(_separable((1, 1, 1, 1, 1), (-1, -2, 0, 2, 1))),
        FilterKind.BOX_3X3: _freeze(_linear_offsets(3)),
        FilterKind.BOX_5X5: _freeze(_linear_offsets(5)),
        FilterKind.BOX_7X7: _freeze(_linear_offsets(7)),
        FilterKind.BOX_9X9: _freeze(_linear_offsets(9)),
    }
)


def kernel_radius(kind: FilterKind) -> int:
    return KERNELS[kind][0].shape[0] // 2


def kernel_norm(kind: FilterKind) -> float:
    """Total weight magnitude used to make gradients independent of kernel size."""

    return float(np.abs(KERNELS[kind][0]).sum())


__all__ = [
    "AlphaMode",
    "BIASED_RGB_WEIGHTS",
    "DEFAULT_ALPHA",
    "DEFAULT_SCALE",
    "Encoding",
    "FilterKind",
    "HeightMode",
    "KERNELS",
    "PASSTHROUGH_MODES",
    "SIGNED_8_SCALE",
    "UNSIGNED_8_SCALE",
    "kernel_norm",
    "kernel_radius",
]

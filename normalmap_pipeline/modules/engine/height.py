"""Derive scalar heights from RGBA pixels."""
from __future__ import annotations

from typing import Callable, Dict, Sequence

import numpy as np

from ...core.utils_image import srgb_channel_to_linear
from .errors import ConfigError
from .parameters import BIASED_RGB_WEIGHTS, HeightMode, PASSTHROUGH_MODES

HeightFunction = Callable[[np.ndarray], np.ndarray]


def _channel(index: int) -> HeightFunction:
    def extract(rgb: np.ndarray) -> np.ndarray:
        return rgb[..., index]

    return extract


def _keyed(rgb: np.ndarray) -> np.ndarray:
    return rgb.mean(axis=-1)


def _biased(rgb: np.ndarray) -> np.ndarray:
    return rgb @ np.asarray(BIASED_RGB_WEIGHTS, dtype=np.float64)


def _colorspace(rgb: np.ndarray) -> np.ndarray:
    return srgb_channel_to_linear(rgb).mean(axis=-1)


_EXTRACTORS: Dict[HeightMode, HeightFunction] = {
    HeightMode.KEYED_RGB: _keyed,
    HeightMode.RED: _channel(0),
    HeightMode.GREEN: _channel(1),
    HeightMode.BLUE: _channel(2),
    HeightMode.BIASED_RGB: _biased,
    HeightMode.MIN_RGB: lambda rgb: rgb.min(axis=-1),
    HeightMode.MAX_RGB: lambda rgb: rgb.max(axis=-1),
    HeightMode.COLORSPACE: _colorspace,
    # Linear sources: only the 0-255 range is mapped to 0-1.
    HeightMode.NORMALIZE_ONLY: _channel(0),
}


def height_field(rgba: np.ndarray, mode: HeightMode) -> np.ndarray:
    """Return heights in [0, 1] for an ``(..., 4)`` uint8 array."""

    if mode in PASSTHROUGH_MODES:
        raise ConfigError(f"{mode.value!r} bypasses height extraction")
    try:
        extractor = _EXTRACTORS[mode]
    except KeyError as exc:
        raise ConfigError(f"Unrecognized height mode: {mode!r}") from exc
    rgb = np.asarray(rgba, dtype=np.float64)[..., :3] / 255.0
    return np.clip(extractor(rgb), 0.0, 1.0)


def extract_height(pixel: Sequence[int], mode: HeightMode) -> float:
    """Height of a single ``(R, G, B, A)`` pixel."""

    array = np.asarray(pixel, dtype=np.uint8).reshape(1, 4)
    return float(height_field(array, mode)[0])


def height_bytes(heights: np.ndarray) -> np.ndarray:
    """Quantise heights in [0, 1] back to 0-255."""

    return np.clip(np.rint(heights * 255.0), 0, 255).astype(np.uint8)


__all__ = ["extract_height", "height_bytes", "height_field"]

"""Turn gradients (or stored derivatives) into unit normals."""
from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from .conversion import ConversionConfig
from .parameters import UNSIGNED_8_SCALE

Normal = Tuple[float, float, float]

_EPSILON = 1e-12


def normalize_vectors(vectors: np.ndarray) -> np.ndarray:
    """Normalise ``(..., 3)`` vectors; zero-length vectors become ``(0, 0, 1)``."""

    vectors = np.asarray(vectors, dtype=np.float64)
    length = np.sqrt(np.sum(vectors * vectors, axis=-1, keepdims=True))
    degenerate = length[..., 0] <= _EPSILON
    safe = np.where(length > _EPSILON, length, 1.0)
    result = vectors / safe
    if np.any(degenerate):
        result[degenerate] = (0.0, 0.0, 1.0)
    return result


def build_normals(dx: np.ndarray, dy: np.ndarray, scale: float) -> np.ndarray:
    """Normals for gradient fields; surfaces tilt away from the uphill direction."""

    dx = np.asarray(dx, dtype=np.float64)
    vectors = np.stack([-dx * scale, -np.asarray(dy, dtype=np.float64) * scale, np.ones_like(dx)], axis=-1)
    return normalize_vectors(vectors)


def build_normal(gradient: Sequence[float], scale: float) -> Normal:
    dx, dy = gradient
    nx, ny, nz = build_normals(np.asarray([dx]), np.asarray([dy]), scale)[0]
    return float(nx), float(ny), float(nz)


def decode_dudv(rgba: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Read ``(du, dv)`` in [-1, 1] from the red and green channels."""

    rgba = np.asarray(rgba, dtype=np.float64)
    return rgba[..., 0] / UNSIGNED_8_SCALE - 1.0, rgba[..., 1] / UNSIGNED_8_SCALE - 1.0


def dudv_normals(rgba: np.ndarray, scale: float) -> np.ndarray:
    """Normals from a DuDv source.

    The stored derivatives already point along the tilt, so they are scaled
    but not negated: a red value above mid-grey leans the normal towards +x.
    """

    du, dv = decode_dudv(rgba)
    vectors = np.stack([du * scale, dv * scale, np.ones_like(du)], axis=-1)
    return normalize_vectors(vectors)


def build_dudv_normal(pixel: Sequence[int], scale: float) -> Normal:
    nx, ny, nz = dudv_normals(np.asarray(pixel, dtype=np.uint8).reshape(1, 4), scale)[0]
    return float(nx), float(ny), float(nz)


def limit_steepness(normals: np.ndarray, min_z: float) -> np.ndarray:
    """Re-project normals with ``nz < min_z`` onto ``nz == min_z``."""

    if min_z <= 0.0:
        return normals
    steep = normals[..., 2] < min_z
    if not np.any(steep):
        return normals
    result = normals.copy()
    xy = result[steep][:, :2]
    xy_length = np.sqrt(np.sum(xy * xy, axis=-1, keepdims=True))
    xy_length = np.where(xy_length > _EPSILON, xy_length, 1.0)
    radius = np.sqrt(1.0 - min_z * min_z)
    result[steep] = np.concatenate([xy / xy_length * radius, np.full((xy.shape[0], 1), min_z)], axis=-1)
    return result


def orient(normals: np.ndarray, config: ConversionConfig) -> np.ndarray:
    """Apply axis inversion and the minimum-z limit from *config*."""

    normals = limit_steepness(normals, float(config.min_z))
    if config.invert_x or config.invert_y:
        normals = normals.copy()
        if config.invert_x:
            normals[..., 0] *= -1.0
        if config.invert_y:
            normals[..., 1] *= -1.0
    return normals


__all__ = [
    "build_dudv_normal",
    "build_normal",
    "build_normals",
    "decode_dudv",
    "dudv_normals",
    "limit_steepness",
    "normalize_vectors",
    "orient",
]

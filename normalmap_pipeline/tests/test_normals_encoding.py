"""Tests for normal construction and pixel encoding."""
from __future__ import annotations

import math

import pytest

pytest.importorskip("numpy")

import numpy as np

from normalmap_pipeline.modules.engine.conversion import ConversionConfig
from normalmap_pipeline.modules.engine.encoding import (
    decode,
    decode_components,
    encode,
    encode_components,
    pack_pixels,
)
from normalmap_pipeline.modules.engine.normals import (
    build_dudv_normal,
    build_normal,
    build_normals,
    limit_steepness,
    normalize_vectors,
    orient,
)
from normalmap_pipeline.modules.engine.parameters import Encoding


def _random_unit_normals(count: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    vectors = rng.normal(size=(count, 3))
    vectors[:, 2] = np.abs(vectors[:, 2])
    return vectors / np.linalg.norm(vectors, axis=1, keepdims=True)


def test_zero_gradient_is_straight_up() -> None:
    assert build_normal((0.0, 0.0), 2.0) == (0.0, 0.0, 1.0)


def test_zero_vector_normalises_to_straight_up() -> None:
    result = normalize_vectors(np.array([[0.0, 0.0, 0.0], [3.0, 0.0, 4.0]]))
    np.testing.assert_array_equal(result[0], [0.0, 0.0, 1.0])
    np.testing.assert_allclose(result[1], [0.6, 0.0, 0.8])


def test_normals_have_unit_length() -> None:
    rng = np.random.default_rng(5)
    dx = rng.normal(scale=3.0, size=(40, 30))
    dy = rng.normal(scale=3.0, size=(40, 30))
    for scale in (0.01, 1.0, 2.0, 250.0):
        normals = build_normals(dx, dy, scale)
        np.testing.assert_allclose(np.linalg.norm(normals, axis=-1), 1.0, atol=1e-5)
        assert np.all(normals[..., 2] > 0.0)


def test_normal_points_away_from_uphill() -> None:
    nx, ny, nz = build_normal((0.5, 0.0), 2.0)
    assert nx == pytest.approx(-1 / math.sqrt(2))
    assert ny == 0.0
    assert nz == pytest.approx(1 / math.sqrt(2))
    _, ny, _ = build_normal((0.0, -0.25), 1.0)
    assert ny > 0.0


def test_larger_scale_is_steeper() -> None:
    gentle = build_normal((0.1, 0.0), 1.0)
    steep = build_normal((0.1, 0.0), 8.0)
    assert steep[2] < gentle[2]


def test_dudv_normal_tilts_along_positive_x() -> None:
    nx, ny, nz = build_dudv_normal((200, 128, 0, 255), 2.0)
    assert nx > 0.5
    assert abs(ny) < 0.01
    assert nz > 0.0
    assert math.sqrt(nx * nx + ny * ny + nz * nz) == pytest.approx(1.0)


def test_limit_steepness() -> None:
    normals = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
    limited = limit_steepness(normals, 0.5)
    np.testing.assert_allclose(limited[0], [math.sqrt(0.75), 0.0, 0.5])
    np.testing.assert_array_equal(limited[1], [0.0, 0.0, 1.0])
    assert limit_steepness(normals, 0.0) is normals


def test_orient_inverts_axes_without_touching_input() -> None:
    normals = np.array([[0.6, -0.0, 0.8], [0.0, 0.6, 0.8]])
    flipped = orient(normals, ConversionConfig(invert_x=True, invert_y=True))
    np.testing.assert_allclose(flipped, [[-0.6, 0.0, 0.8], [0.0, -0.6, 0.8]])
    assert normals[0, 0] == 0.6


def test_flat_normal_encoding() -> None:
    assert encode((0.0, 0.0, 1.0)) == (128, 128, 255, 255)
    assert encode((-1.0, -1.0, -1.0)) == (0, 0, 0, 255)
    assert encode((1.0, 1.0, 1.0), alpha=7) == (255, 255, 255, 7)


def test_encoding_clamps_out_of_range_components() -> None:
    np.testing.assert_array_equal(encode_components(np.array([-3.0, 3.0])), [0, 255])


@pytest.mark.parametrize(
    "encoding, step",
    [(Encoding.UNSIGNED_8, 1 / 255), (Encoding.SIGNED_8, 0.5 / 127)],
)
def test_decode_recovers_within_one_step(encoding: Encoding, step: float) -> None:
    normals = _random_unit_normals(500)
    recovered = decode_components(encode_components(normals, encoding), encoding)
    assert np.max(np.abs(recovered - normals)) <= step + 1e-9


def test_signed_encoding_layout() -> None:
    assert encode((0.0, 0.0, 1.0), Encoding.SIGNED_8) == (0, 0, 127, 255)
    assert encode((-1.0, 0.0, 0.0), Encoding.SIGNED_8)[0] == 129
    assert decode((129, 0, 127, 255), Encoding.SIGNED_8) == (-1.0, 0.0, 1.0)


def test_decode_single_pixel() -> None:
    x, y, z = decode((128, 128, 255, 255))
    assert x == pytest.approx(1 / 255)
    assert y == pytest.approx(1 / 255)
    assert z == 1.0


def test_pack_pixels_swaps_red_and_blue() -> None:
    normals = np.array([[[-1.0, 0.0, 1.0]]])
    alpha = np.array([[200]], dtype=np.uint8)
    np.testing.assert_array_equal(pack_pixels(normals, alpha), [[[0, 128, 255, 200]]])
    np.testing.assert_array_equal(pack_pixels(normals, alpha, swap_rgb=True), [[[255, 128, 0, 200]]])

"""Tests for the gradient filter bank."""
from __future__ import annotations

import pytest

pytest.importorskip("numpy")

import numpy as np

from normalmap_pipeline.modules.engine.conversion import ConversionConfig
from normalmap_pipeline.modules.engine.filters import gradient, gradient_field
from normalmap_pipeline.modules.engine.parameters import KERNELS, FilterKind, kernel_norm, kernel_radius


def _ramp_response(kind: FilterKind) -> float:
    """Response of a kernel to a unit horizontal ramp."""

    kx, _ = KERNELS[kind]
    radius = kx.shape[0] // 2
    offsets = np.arange(-radius, radius + 1)
    return float((kx * offsets[np.newaxis, :]).sum()) / kernel_norm(kind)


def test_kernel_tables() -> None:
    sobel_x, sobel_y = KERNELS[FilterKind.SOBEL_3X3]
    np.testing.assert_array_equal(sobel_x, [[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]])
    np.testing.assert_array_equal(sobel_y, [[-1, -2, -1], [0, 0, 0], [1, 2, 1]])
    np.testing.assert_array_equal(KERNELS[FilterKind.PREWITT_3X3][0], [[-1, 0, 1]] * 3)
    np.testing.assert_array_equal(KERNELS[FilterKind.SOBEL_5X5][0][2], [-6, -12, 0, 12, 6])
    np.testing.assert_array_equal(KERNELS[FilterKind.BOX_7X7][0][0], [-3, -2, -1, 0, 1, 2, 3])
    assert kernel_norm(FilterKind.NONE) == 2.0
    assert kernel_norm(FilterKind.SOBEL_3X3) == 8.0
    assert kernel_radius(FilterKind.BOX_9X9) == 4


def test_kernel_tables_are_read_only() -> None:
    kx, _ = KERNELS[FilterKind.SOBEL_3X3]
    with pytest.raises(ValueError):
        kx[0, 0] = 5


@pytest.mark.parametrize("kind", list(FilterKind))
@pytest.mark.parametrize("wrap", [True, False])
def test_flat_field_has_zero_gradient(kind: FilterKind, wrap: bool) -> None:
    heights = np.full((7, 9), 0.42)
    dx, dy = gradient_field(heights, ConversionConfig(filter_kind=kind, wrap_edges=wrap))
    np.testing.assert_allclose(dx, 0.0, atol=1e-12)
    np.testing.assert_allclose(dy, 0.0, atol=1e-12)


@pytest.mark.parametrize("kind", list(FilterKind))
def test_horizontal_ramp(kind: FilterKind) -> None:
    slope = 0.02
    heights = np.tile(np.arange(20) * slope, (12, 1))
    dx, dy = gradient(10, 6, heights, ConversionConfig(filter_kind=kind))
    assert dx == pytest.approx(slope * _ramp_response(kind))
    assert dy == pytest.approx(0.0, abs=1e-12)


@pytest.mark.parametrize("kind", [FilterKind.NONE, FilterKind.SOBEL_3X3, FilterKind.PREWITT_3X3, FilterKind.BOX_3X3])
def test_three_tap_kernels_recover_slope(kind: FilterKind) -> None:
    heights = np.tile(np.arange(10)[:, np.newaxis] * 0.05, (1, 8))
    dx, dy = gradient(4, 5, heights, ConversionConfig(filter_kind=kind))
    assert dx == pytest.approx(0.0, abs=1e-12)
    assert dy == pytest.approx(0.05)


@pytest.mark.parametrize("kind", list(FilterKind))
@pytest.mark.parametrize("wrap", [True, False])
def test_field_matches_single_pixel(kind: FilterKind, wrap: bool) -> None:
    rng = np.random.default_rng(3)
    heights = rng.random((6, 7))
    config = ConversionConfig(filter_kind=kind, wrap_edges=wrap)
    dx, dy = gradient_field(heights, config)
    for y in range(6):
        for x in range(7):
            gx, gy = gradient(x, y, heights, config)
            assert dx[y, x] == pytest.approx(gx)
            assert dy[y, x] == pytest.approx(gy)


def test_row_bands_match_full_field() -> None:
    rng = np.random.default_rng(11)
    heights = rng.random((13, 10))
    config = ConversionConfig(filter_kind=FilterKind.BOX_9X9, wrap_edges=True)
    full_dx, full_dy = gradient_field(heights, config)
    dx_parts, dy_parts = zip(*(gradient_field(heights, config, band) for band in [(0, 4), (4, 5), (5, 13)]))
    np.testing.assert_allclose(np.concatenate(dx_parts), full_dx)
    np.testing.assert_allclose(np.concatenate(dy_parts), full_dy)


def test_large_kernel_on_tiny_image_does_not_fail() -> None:
    heights = np.array([[0.0, 1.0]])
    for wrap in (True, False):
        dx, dy = gradient_field(heights, ConversionConfig(filter_kind=FilterKind.BOX_9X9, wrap_edges=wrap))
        assert dx.shape == dy.shape == (1, 2)
        assert np.all(np.isfinite(dx)) and np.all(np.isfinite(dy))


def test_wrap_sees_the_opposite_edge() -> None:
    heights = np.zeros((3, 6))
    heights[:, 5] = 1.0
    clamped, _ = gradient(0, 1, heights, ConversionConfig(wrap_edges=False))
    wrapped, _ = gradient(0, 1, heights, ConversionConfig(wrap_edges=True))
    assert clamped == 0.0
    assert wrapped == pytest.approx(-0.5)

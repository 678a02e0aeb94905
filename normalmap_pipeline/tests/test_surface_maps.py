"""Unit tests for the Pillow-level map generators."""
from __future__ import annotations

import pytest

pytest.importorskip("PIL")
import numpy as np
from PIL import Image

from normalmap_pipeline.modules.engine import ConfigError, ConversionConfig, FilterKind
from normalmap_pipeline.modules.geometry_maps.height_map import generate as generate_height
from normalmap_pipeline.modules.surface_maps.normal_map import generate as generate_normal


def _sample() -> Image.Image:
    image = Image.new("RGBA", (8, 8), (40, 40, 40, 255))
    for x in range(4, 8):
        for y in range(8):
            image.putpixel((x, y), (200, 160, 120, 90))
    return image


def test_normal_map_dimensions() -> None:
    image = _sample()
    normal = generate_normal(image)
    assert normal.size == image.size
    assert normal.mode == "RGBA"


def test_normal_map_options_are_forwarded() -> None:
    image = _sample()
    flat = np.asarray(generate_normal(image, strength=0.5, filter="sobel3x3"))
    steep = np.asarray(generate_normal(image, strength=8.0, filter="sobel3x3"))
    assert steep[0, 3, 2] < flat[0, 3, 2]
    preserved = np.asarray(generate_normal(image, alpha="preserve"))
    np.testing.assert_array_equal(preserved[..., 3], np.asarray(image)[..., 3])


def test_normal_map_accepts_ready_config() -> None:
    image = _sample()
    config = ConversionConfig(filter_kind=FilterKind.PREWITT_3X3)
    via_config = np.asarray(generate_normal(image, 3.0, config=config))
    via_names = np.asarray(generate_normal(image, 3.0, filter="prewitt3x3"))
    np.testing.assert_array_equal(via_config, via_names)
    with pytest.raises(TypeError):
        generate_normal(image, config=config, wrap=True)


def test_normal_map_rejects_bad_strength() -> None:
    with pytest.raises(ConfigError):
        generate_normal(_sample(), strength=0.0)


def test_height_map_republishes_source_channel() -> None:
    image = _sample()
    height = np.asarray(generate_height(image, source="green"))
    expected = np.asarray(image)[..., 1]
    for channel in range(4):
        np.testing.assert_array_equal(height[..., channel], expected)


def test_height_map_unknown_source() -> None:
    with pytest.raises(ConfigError):
        generate_height(_sample(), source="luma")

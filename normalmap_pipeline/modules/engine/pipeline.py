"""Orchestration of the heightmap to normal map conversion."""
from __future__ import annotations

import logging
import time
from typing import Optional

import numpy as np
from PIL import Image

from ...core.utils_image import buffer_to_image, image_to_buffer
from ...core.utils_parallel import Band, resolve_workers, run_parallel, split_rows
from .buffers import as_rgba_array, check_dimensions, output_view
from .conversion import ConversionConfig, validate_config
from .encoding import pack_pixels
from .filters import gradient_field
from .height import height_bytes, height_field
from .normals import build_normals, dudv_normals, orient
from .parameters import DEFAULT_ALPHA, AlphaMode, HeightMode

LOGGER = logging.getLogger("normalmap_pipeline.engine.pipeline")

_HEIGHT_ALPHA = frozenset({AlphaMode.HEIGHT, AlphaMode.INVERSE_HEIGHT})


def _alpha_plane(config: ConversionConfig, source: np.ndarray, heights: Optional[np.ndarray]) -> np.ndarray:
    mode = config.alpha_mode
    if mode is AlphaMode.OPAQUE:
        return np.full(source.shape[:2], DEFAULT_ALPHA, dtype=np.uint8)
    if mode is AlphaMode.ZERO:
        return np.zeros(source.shape[:2], dtype=np.uint8)
    if mode is AlphaMode.PRESERVE:
        return source[..., 3]
    quantised = height_bytes(heights)
    if mode is AlphaMode.INVERSE_HEIGHT:
        return 255 - quantised
    return quantised


def _convert_band(
    source: np.ndarray,
    heights: Optional[np.ndarray],
    config: ConversionConfig,
    band: Band,
) -> np.ndarray:
    """Encoded pixels for rows ``[start, stop)``; reads only the input."""

    start, stop = band
    band_source = source[start:stop]
    band_heights = heights[start:stop] if heights is not None else None

    if config.height_mode is HeightMode.HEIGHTMAP_PASSTHROUGH:
        level = height_bytes(band_heights)
        return np.stack([level, level, level, level], axis=-1)

    if config.height_mode is HeightMode.DUDV_PASSTHROUGH:
        normals = dudv_normals(band_source, float(config.scale))
    else:
        dx, dy = gradient_field(heights, config, band)
        normals = build_normals(dx, dy, float(config.scale))

    normals = orient(normals, config)
    alpha = _alpha_plane(config, band_source, band_heights)
    return pack_pixels(normals, alpha, config.encoding, config.swap_rgb)


def convert(
    buffer,
    width: int,
    height: int,
    config: ConversionConfig,
    *,
    out=None,
    threads: Optional[int] = 1,
):
    """Convert an RGBA8 heightmap buffer into an RGBA8 normal map buffer.

    *buffer* is row-major from the top-left pixel and must hold exactly
    ``width * height * 4`` bytes; it is never modified. The result is
    returned as ``bytes`` unless *out* is given, in which case the pixels are
    written into it and *out* is returned. Configuration and size errors are
    raised before anything is written.

    *threads* controls how many row bands are converted concurrently
    (``None`` or ``0`` uses one worker per CPU).
    """

    validate_config(config)
    check_dimensions(width, height)
    source = as_rgba_array(buffer, width, height)
    target = output_view(out, width, height) if out is not None else None

    started = time.perf_counter()
    heights = None
    if config.height_mode is not HeightMode.DUDV_PASSTHROUGH or config.alpha_mode in _HEIGHT_ALPHA:
        heights = height_field(source, config.effective_height_mode)

    workers = resolve_workers(threads)
    bands = split_rows(height, workers)
    result = target if target is not None else np.empty((height, width, 4), dtype=np.uint8)

    def work(band: Band) -> None:
        result[band[0]:band[1]] = _convert_band(source, heights, config, band)

    run_parallel(work, bands, max_workers=workers)
    LOGGER.debug(
        "Converted %dx%d heightmap (filter=%s, height=%s, wrap=%s, scale=%s) in %.3fs using %d band(s)",
        width,
        height,
        config.filter_kind.value,
        config.height_mode.value,
        config.wrap_edges,
        config.scale,
        time.perf_counter() - started,
        len(bands),
    )
    if out is not None:
        return out
    return result.tobytes()


class NormalMapConverter:
    """Reusable converter bound to one validated configuration."""

    def __init__(self, config: Optional[ConversionConfig] = None, threads: Optional[int] = 1) -> None:
        self.config = validate_config(config if config is not None else ConversionConfig())
        self.threads = threads

    def convert(self, buffer, width: int, height: int, *, out=None):
        return convert(buffer, width, height, self.config, out=out, threads=self.threads)

    def convert_image(self, image: Image.Image) -> Image.Image:
        """Convert a Pillow image and return the normal map as an RGBA image."""

        buffer, width, height = image_to_buffer(image)
        LOGGER.info("Converting %dx%d image (mode %s)", width, height, image.mode)
        return buffer_to_image(self.convert(buffer, width, height), width, height)


__all__ = ["NormalMapConverter", "convert"]

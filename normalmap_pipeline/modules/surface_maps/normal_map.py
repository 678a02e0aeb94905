"""Generate tangent-space normal maps from Pillow heightmap images."""
from __future__ import annotations

from dataclasses import replace

from PIL import Image

from ..engine import NormalMapConverter
from ...core.config import build_config


def generate(image: Image.Image, strength: float = 2.0, *, threads: int = 1, **options) -> Image.Image:
    """Create a tangent-space normal map from *image*.

    *strength* is the gradient scale. Remaining keyword *options* use the
    same names as :func:`normalmap_pipeline.core.config.build_config`
    (``filter="sobel3x3"``, ``height="red"``, ``wrap=True``, ...), or a
    ready :class:`ConversionConfig` may be passed as ``config``.
    """

    config = options.pop("config", None)
    if config is None:
        config = build_config(dict(options, scale=strength))
    elif options:
        raise TypeError(f"Unexpected options alongside config: {sorted(options)}")
    else:
        config = replace(config, scale=strength)
    return NormalMapConverter(config, threads=threads).convert_image(image)


if __name__ == "__main__":  # pragma: no cover - manual smoke test
    sample = Image.new("RGBA", (16, 16), (120, 100, 90, 255))
    for x in range(8, 16):
        for y in range(16):
            sample.putpixel((x, y), (220, 220, 220, 255))
    generate(sample, filter="sobel3x3").show()

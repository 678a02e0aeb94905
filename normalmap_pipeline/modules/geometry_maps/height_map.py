"""Re-export a cleaned-up heightmap through the conversion pipeline."""
from __future__ import annotations

from PIL import Image

from ..engine import ConversionConfig, HeightMode, NormalMapConverter
from ...core.config import parse_selector


def generate(image: Image.Image, source: str = "red") -> Image.Image:
    """Republish the height picked by *source* into every channel, alpha included."""

    config = ConversionConfig(
        height_mode=HeightMode.HEIGHTMAP_PASSTHROUGH,
        height_source=parse_selector(HeightMode, source, "height source"),
    )
    return NormalMapConverter(config).convert_image(image)


if __name__ == "__main__":  # pragma: no cover
    sample = Image.new("RGBA", (16, 16), (40, 80, 120, 255))
    generate(sample).show()

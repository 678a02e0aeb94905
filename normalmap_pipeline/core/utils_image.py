"""Image utility helpers for colour transfer functions and Pillow interop."""
from __future__ import annotations

import numpy as np
from PIL import Image


def srgb_channel_to_linear(channel: np.ndarray) -> np.ndarray:
    """Apply the sRGB decoding curve (IEC 61966-2-1) to values in [0, 1]."""

    channel = np.asarray(channel, dtype=np.float64)
    threshold = 0.04045
    return np.where(
        channel <= threshold,
        channel / 12.92,
        ((channel + 0.055) / 1.055) ** 2.4,
    )


def image_to_buffer(image: Image.Image) -> tuple[bytes, int, int]:
    """Flatten a Pillow image into an RGBA8 ``(buffer, width, height)`` triple."""

    rgba = image.convert("RGBA")
    width, height = rgba.size
    return rgba.tobytes(), width, height


def buffer_to_image(buffer, width: int, height: int) -> Image.Image:
    """Wrap a row-major RGBA8 buffer as a Pillow image."""

    return Image.frombytes("RGBA", (width, height), bytes(buffer))

"""Views over caller-owned RGBA8 pixel buffers."""
from __future__ import annotations

import numpy as np

from .errors import DimensionMismatch, NormalMapError


def check_dimensions(width: int, height: int) -> None:
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
            raise DimensionMismatch(f"Image {name} must be a positive integer, got {value!r}")


def as_rgba_array(buffer, width: int, height: int) -> np.ndarray:
    """Return a read-only ``(height, width, 4)`` uint8 view of *buffer*.

    *buffer* may be any bytes-like object or a uint8 numpy array, laid out
    row-major from the top-left pixel.
    """

    expected = width * height * 4
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            raise DimensionMismatch(f"Pixel arrays must be uint8, got {buffer.dtype}")
        flat = buffer.reshape(-1)
    else:
        flat = np.frombuffer(memoryview(buffer).cast("B"), dtype=np.uint8)
    if flat.size != expected:
        raise DimensionMismatch(
            f"Input buffer holds {flat.size} bytes, expected {expected} for {width}x{height} RGBA"
        )
    view = flat.reshape(height, width, 4).view()
    view.setflags(write=False)
    return view


def output_view(out, width: int, height: int) -> np.ndarray:
    """Writable ``(height, width, 4)`` view over the caller's output buffer."""

    expected = width * height * 4
    if isinstance(out, np.ndarray):
        if out.dtype != np.uint8:
            raise DimensionMismatch(f"Output arrays must be uint8, got {out.dtype}")
        if not out.flags.writeable or not out.flags.c_contiguous:
            raise NormalMapError("Output array must be writable and C-contiguous")
        flat = out.reshape(-1)
    else:
        view = memoryview(out)
        if view.readonly:
            raise NormalMapError("Output buffer is read-only")
        flat = np.frombuffer(view.cast("B"), dtype=np.uint8)
    if flat.size < expected:
        raise DimensionMismatch(
            f"Output buffer holds {flat.size} bytes, {expected} needed for {width}x{height} RGBA"
        )
    return flat[:expected].reshape(height, width, 4)


__all__ = ["as_rgba_array", "check_dimensions", "output_view"]

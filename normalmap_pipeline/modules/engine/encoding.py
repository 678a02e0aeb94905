"""Pack normals into RGBA8 pixels and decode them back."""
from __future__ import annotations

from typing import Callable, Dict, Sequence, Tuple

import numpy as np

from .errors import ConfigError
from .parameters import DEFAULT_ALPHA, SIGNED_8_SCALE, UNSIGNED_8_SCALE, Encoding


def _encode_unsigned_8(components: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(components * UNSIGNED_8_SCALE + UNSIGNED_8_SCALE), 0, 255).astype(np.uint8)


def _decode_unsigned_8(encoded: np.ndarray) -> np.ndarray:
    return np.asarray(encoded, dtype=np.float64) / UNSIGNED_8_SCALE - 1.0


def _encode_signed_8(components: np.ndarray) -> np.ndarray:
    signed = np.clip(np.rint(components * SIGNED_8_SCALE), -SIGNED_8_SCALE, SIGNED_8_SCALE)
    return signed.astype(np.int8).view(np.uint8)


def _decode_signed_8(encoded: np.ndarray) -> np.ndarray:
    signed = np.asarray(encoded, dtype=np.uint8).view(np.int8)
    return signed.astype(np.float64) / SIGNED_8_SCALE


_CODECS: Dict[Encoding, Tuple[Callable[[np.ndarray], np.ndarray], Callable[[np.ndarray], np.ndarray]]] = {
    Encoding.UNSIGNED_8: (_encode_unsigned_8, _decode_unsigned_8),
    Encoding.SIGNED_8: (_encode_signed_8, _decode_signed_8),
}


def _codec(encoding: Encoding):
    try:
        return _CODECS[encoding]
    except KeyError as exc:
        raise ConfigError(f"Unsupported encoding: {encoding!r}") from exc


def encode_components(components: np.ndarray, encoding: Encoding = Encoding.UNSIGNED_8) -> np.ndarray:
    """Encode values in [-1, 1] as bytes."""

    encode, _ = _codec(encoding)
    return encode(np.asarray(components, dtype=np.float64))


def decode_components(encoded: np.ndarray, encoding: Encoding = Encoding.UNSIGNED_8) -> np.ndarray:
    """Inverse of :func:`encode_components`, within one quantisation step."""

    _, decode = _codec(encoding)
    return decode(np.ascontiguousarray(encoded, dtype=np.uint8))


def pack_pixels(
    normals: np.ndarray,
    alpha: np.ndarray,
    encoding: Encoding = Encoding.UNSIGNED_8,
    swap_rgb: bool = False,
) -> np.ndarray:
    """Build ``(..., 4)`` uint8 pixels from ``(..., 3)`` normals and an alpha plane."""

    rgb = encode_components(normals, encoding)
    if swap_rgb:
        rgb = rgb[..., ::-1]
    alpha = np.asarray(alpha, dtype=np.uint8)
    return np.concatenate([rgb, alpha[..., np.newaxis]], axis=-1)


def encode(
    normal: Sequence[float],
    encoding: Encoding = Encoding.UNSIGNED_8,
    alpha: int = DEFAULT_ALPHA,
) -> Tuple[int, int, int, int]:
    """Encode a single normal as an ``(R, G, B, A)`` tuple."""

    r, g, b, a = pack_pixels(np.asarray([normal], dtype=np.float64), np.asarray([alpha]), encoding)[0]
    return int(r), int(g), int(b), int(a)


def decode(pixel: Sequence[int], encoding: Encoding = Encoding.UNSIGNED_8) -> Tuple[float, float, float]:
    """Recover the normal stored in the first three channels of *pixel*."""

    x, y, z = decode_components(np.asarray(pixel[:3], dtype=np.uint8), encoding)
    return float(x), float(y), float(z)


__all__ = [
    "decode",
    "decode_components",
    "encode",
    "encode_components",
    "pack_pixels",
]

"""Heightmap to tangent-space normal map conversion engine."""
from __future__ import annotations

from .conversion import ConversionConfig, validate_config
from .errors import ConfigError, DimensionMismatch, NormalMapError
from .parameters import AlphaMode, Encoding, FilterKind, HeightMode
from .pipeline import NormalMapConverter, convert

__all__ = [
    "AlphaMode",
    "ConfigError",
    "ConversionConfig",
    "DimensionMismatch",
    "Encoding",
    "FilterKind",
    "HeightMode",
    "NormalMapConverter",
    "NormalMapError",
    "convert",
    "validate_config",
]

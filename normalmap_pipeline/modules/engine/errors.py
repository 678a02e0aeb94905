"""Exception types raised by the normal map conversion engine."""
from __future__ import annotations


class NormalMapError(Exception):
    """Base class for every error raised by the conversion engine."""


class ConfigError(NormalMapError, ValueError):
    """The conversion configuration is invalid (bad scale, unknown selector)."""


class DimensionMismatch(NormalMapError, ValueError):
    """A pixel buffer does not hold ``width * height * 4`` bytes."""


__all__ = ["NormalMapError", "ConfigError", "DimensionMismatch"]

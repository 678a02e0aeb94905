"""Immutable conversion settings and their validation."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Type

from .errors import ConfigError
from .parameters import (
    DEFAULT_SCALE,
    AlphaMode,
    Encoding,
    FilterKind,
    HeightMode,
    PASSTHROUGH_MODES,
)


@dataclass(frozen=True)
class ConversionConfig:
    """Settings read once per conversion.

    ``filter_kind`` and ``height_mode`` are independent: picking a height
    source never changes the gradient filter.
    """

    filter_kind: FilterKind = FilterKind.NONE
    height_mode: HeightMode = HeightMode.KEYED_RGB
    wrap_edges: bool = False
    scale: float = DEFAULT_SCALE
    encoding: Encoding = Encoding.UNSIGNED_8
    alpha_mode: AlphaMode = AlphaMode.OPAQUE
    invert_x: bool = False
    invert_y: bool = False
    swap_rgb: bool = False
    min_z: float = 0.0
    # Height used by the passthrough modes and by height-carrying alpha modes.
    height_source: HeightMode = HeightMode.RED

    @property
    def is_passthrough(self) -> bool:
        return self.height_mode in PASSTHROUGH_MODES

    @property
    def effective_height_mode(self) -> HeightMode:
        return self.height_source if self.is_passthrough else self.height_mode

    def as_dict(self) -> Dict[str, object]:
        """Return the configuration as a plain dictionary of primitive values."""

        return {
            "filter": self.filter_kind.value,
            "height": self.height_mode.value,
            "wrap": self.wrap_edges,
            "scale": self.scale,
            "encoding": self.encoding.value,
            "alpha": self.alpha_mode.value,
            "invert_x": self.invert_x,
            "invert_y": self.invert_y,
            "swap_rgb": self.swap_rgb,
            "min_z": self.min_z,
            "height_source": self.height_source.value,
        }


_ENUM_FIELDS: Dict[str, Type[Enum]] = {
    "filter_kind": FilterKind,
    "height_mode": HeightMode,
    "encoding": Encoding,
    "alpha_mode": AlphaMode,
    "height_source": HeightMode,
}
_FLAG_FIELDS = ("wrap_edges", "invert_x", "invert_y", "swap_rgb")


def validate_config(config: ConversionConfig) -> ConversionConfig:
    """Reject invalid settings instead of substituting defaults."""

    if not isinstance(config, ConversionConfig):
        raise ConfigError(f"Expected ConversionConfig, got {type(config).__name__}")
    for name, enum_type in _ENUM_FIELDS.items():
        value = getattr(config, name)
        if not isinstance(value, enum_type):
            raise ConfigError(f"Unrecognized {name} selector: {value!r}")
    if config.height_source in PASSTHROUGH_MODES:
        raise ConfigError(f"height_source must name an extractor mode, got {config.height_source.value!r}")
    for name in _FLAG_FIELDS:
        value = getattr(config, name)
        if not isinstance(value, bool):
            raise ConfigError(f"{name} must be a bool, got {value!r}")
    if isinstance(config.scale, bool):
        raise ConfigError(f"Scale must be a real number, got {config.scale!r}")
    try:
        scale = float(config.scale)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Scale must be a real number, got {config.scale!r}") from exc
    if not math.isfinite(scale) or scale <= 0.0:
        raise ConfigError(f"Scale must be a positive finite number, got {config.scale!r}")
    try:
        min_z = float(config.min_z)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"min_z must be a real number, got {config.min_z!r}") from exc
    if not 0.0 <= min_z < 1.0:
        raise ConfigError(f"min_z must lie in [0, 1), got {config.min_z!r}")
    return config


__all__ = ["ConversionConfig", "validate_config"]

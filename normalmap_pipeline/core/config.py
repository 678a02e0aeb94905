"""Configuration module for the heightmap to normal map converter."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Optional, Type, TypeVar

from ..modules.engine.conversion import ConversionConfig, validate_config
from ..modules.engine.errors import ConfigError
from ..modules.engine.parameters import DEFAULT_SCALE, AlphaMode, Encoding, FilterKind, HeightMode


DEFAULT_FILTER = FilterKind.NONE
DEFAULT_HEIGHT_MODE = HeightMode.KEYED_RGB
DEFAULT_WRAP = False
DEFAULT_THREADS = 1
OUTPUT_FORMATS = {"png": "PNG", "bmp": "BMP", "tga": "TGA"}

E = TypeVar("E", bound=Enum)

_ENUM_OPTIONS: Dict[str, tuple[str, Type[Enum]]] = {
    "filter": ("filter_kind", FilterKind),
    "height": ("height_mode", HeightMode),
    "encoding": ("encoding", Encoding),
    "alpha": ("alpha_mode", AlphaMode),
    "height_source": ("height_source", HeightMode),
}
_BOOL_OPTIONS = {"wrap": "wrap_edges", "invert_x": "invert_x", "invert_y": "invert_y", "swap_rgb": "swap_rgb"}
_FLOAT_OPTIONS = {"scale": "scale", "min_z": "min_z"}
TRUE_WORDS = frozenset({"1", "y", "yes", "t", "true", "on"})
FALSE_WORDS = frozenset({"0", "n", "no", "f", "false", "off"})


def _canonical(name: str) -> str:
    return "".join(ch for ch in name.strip().lower() if ch not in "-_ ")


def parse_selector(enum_type: Type[E], value: object, label: str) -> E:
    """Resolve *value* (member, value or name, case and separator insensitive)."""

    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        wanted = _canonical(value)
        for member in enum_type:
            if wanted in (_canonical(member.value), _canonical(member.name)):
                return member
    choices = ", ".join(member.value for member in enum_type)
    raise ConfigError(f"Unknown {label} {value!r}; expected one of: {choices}")


def parse_flag(value: object, label: str) -> bool:
    """Accept real booleans, 0/1 and the yes/no words; reject anything else."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_WORDS:
            return True
        if normalized in FALSE_WORDS:
            return False
    raise ConfigError(f"Invalid boolean for {label}: {value!r}")


def _parse_float(value: object, label: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"Invalid {label}: {value!r}")
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label}: {value!r}") from exc


def build_config(overrides: Optional[Mapping[str, object]] = None) -> ConversionConfig:
    """Create a validated :class:`ConversionConfig` from option names.

    Unknown option names and unknown selector values raise
    :class:`ConfigError`; nothing falls back to a default silently.
    """

    fields: Dict[str, object] = {}
    for key, value in (overrides or {}).items():
        if key in _ENUM_OPTIONS:
            target, enum_type = _ENUM_OPTIONS[key]
            fields[target] = parse_selector(enum_type, value, key.replace("_", " "))
        elif key in _BOOL_OPTIONS:
            fields[_BOOL_OPTIONS[key]] = parse_flag(value, key)
        elif key in _FLOAT_OPTIONS:
            fields[_FLOAT_OPTIONS[key]] = _parse_float(value, key)
        else:
            raise ConfigError(f"Unknown conversion option: {key!r}")
    return validate_config(ConversionConfig(**fields))


@dataclass
class RuntimeConfig:
    """Runtime configuration for a single command line conversion."""

    input_path: Path
    output_path: Path
    conversion: ConversionConfig = field(default_factory=ConversionConfig)
    threads: int = DEFAULT_THREADS
    log_file: Optional[Path] = None

    def as_dict(self) -> Dict[str, object]:
        """Return the configuration as a plain dictionary."""

        return {
            "INPUT_PATH": self.input_path,
            "OUTPUT_PATH": self.output_path,
            "THREADS": self.threads,
            "LOG_FILE": self.log_file,
            "CONVERSION": self.conversion.as_dict(),
        }

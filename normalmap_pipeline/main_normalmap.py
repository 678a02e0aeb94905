"""Command line interface for the heightmap to normal map converter."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core import config
from .core.utils_io import ImageLoadError, format_for_path, load_rgba, save_rgba
from .modules.engine import AlphaMode, ConfigError, Encoding, FilterKind, HeightMode, convert

LOGGER = logging.getLogger("normalmap_pipeline.main_normalmap")

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_LOAD = 2
EXIT_WRITE = 3


class BoolAction(argparse.Action):
    """Robust boolean flag parser supporting affirmative and negative forms."""

    def __call__(self, parser, namespace, values, option_string=None):  # type: ignore[override]
        if values is None:
            setattr(namespace, self.dest, True)
            return
        normalized = str(values).strip().lower()
        if normalized in config.TRUE_WORDS:
            setattr(namespace, self.dest, True)
        elif normalized in config.FALSE_WORDS:
            setattr(namespace, self.dest, False)
        else:
            raise argparse.ArgumentTypeError(f"Invalid boolean for {option_string}: {values!r}")


def _configure_logging(log_path: Optional[Path], verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
    handlers: List[logging.Handler] = []
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8", delay=True)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)
    logging.basicConfig(level=level, handlers=handlers)


def _choices(enum_type) -> List[str]:
    return [member.value for member in enum_type]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert a heightmap image into a tangent-space normal map")
    parser.add_argument("heightmap", type=Path, help="Input heightmap image")
    parser.add_argument("normalmap", type=Path, help="Output normal map (.png, .bmp or .tga)")
    parser.add_argument("--filter", default=config.DEFAULT_FILTER.value, choices=_choices(FilterKind), help="Gradient filter")
    parser.add_argument(
        "--height",
        default=config.DEFAULT_HEIGHT_MODE.value,
        choices=_choices(HeightMode),
        help="How heights are derived from the input pixels",
    )
    parser.add_argument(
        "--height-source",
        default=HeightMode.RED.value,
        help="Height used by the passthrough modes and height alpha (default: red)",
    )
    parser.add_argument("--scale", type=float, default=config.DEFAULT_SCALE, help="Gradient scale, must be > 0")
    parser.add_argument(
        "--wrap",
        nargs="?",
        default=config.DEFAULT_WRAP,
        action=BoolAction,
        help="Wrap neighbour sampling around the edges (default: false)",
    )
    parser.add_argument("--no-wrap", dest="wrap", action="store_false", help="Clamp sampling at the edges")
    parser.add_argument("--encoding", default=Encoding.UNSIGNED_8.value, choices=_choices(Encoding))
    parser.add_argument("--alpha", default=AlphaMode.OPAQUE.value, choices=_choices(AlphaMode), help="Output alpha content")
    parser.add_argument("--invert-x", action="store_true", help="Flip the red (X) component")
    parser.add_argument("--invert-y", action="store_true", help="Flip the green (Y) component")
    parser.add_argument("--swap-rgb", action="store_true", help="Swap red and blue in the output")
    parser.add_argument("--min-z", type=float, default=0.0, help="Lower bound for the Z component, in [0, 1)")
    parser.add_argument("--threads", type=int, default=config.DEFAULT_THREADS, help="Worker threads (0 = one per CPU)")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def build_runtime_config(args: argparse.Namespace) -> config.RuntimeConfig:
    overrides = {
        "filter": args.filter,
        "height": args.height,
        "height_source": args.height_source,
        "scale": args.scale,
        "wrap": args.wrap,
        "encoding": args.encoding,
        "alpha": args.alpha,
        "invert_x": args.invert_x,
        "invert_y": args.invert_y,
        "swap_rgb": args.swap_rgb,
        "min_z": args.min_z,
    }
    return config.RuntimeConfig(
        input_path=args.heightmap,
        output_path=args.normalmap,
        conversion=config.build_config(overrides),
        threads=args.threads,
        log_file=args.log_file,
    )


def run(runtime: config.RuntimeConfig) -> int:
    """Load, convert and save; return the process exit code."""

    try:
        format_for_path(runtime.output_path)
    except ConfigError as exc:
        LOGGER.error("%s", exc)
        return EXIT_CONFIG
    try:
        buffer, width, height = load_rgba(runtime.input_path)
    except ImageLoadError as exc:
        LOGGER.error("%s", exc)
        return EXIT_LOAD

    LOGGER.info("Converting %s (%dx%d) with %s", runtime.input_path, width, height, runtime.conversion.as_dict())
    output = convert(buffer, width, height, runtime.conversion, threads=runtime.threads)
    try:
        save_rgba(output, width, height, runtime.output_path)
    except OSError as exc:
        LOGGER.error("Unable to write %s: %s", runtime.output_path, exc)
        return EXIT_WRITE
    LOGGER.info("Normal map written to %s", runtime.output_path)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_file, args.verbose)
    try:
        runtime = build_runtime_config(args)
    except ConfigError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG
    return run(runtime)


if __name__ == "__main__":
    sys.exit(main())

"""I/O helpers: load heightmaps and persist normal maps atomically."""
from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

from PIL import Image

from .config import OUTPUT_FORMATS
from .utils_image import buffer_to_image, image_to_buffer
from ..modules.engine.errors import ConfigError

LOGGER = logging.getLogger("normalmap_pipeline.io")

_LOCK_REGISTRY: dict[Path, threading.Lock] = {}
_LOCK_REGISTRY_GUARD = threading.Lock()


class ImageLoadError(OSError):
    """The input image could not be read or decoded."""


def ensure_dir(path: Path) -> Path:
    """Ensure that *path* exists and return it."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def _acquire_file_lock(target: Path) -> threading.Lock:
    """Return the lock guarding *target* for cross-thread writes, acquired."""

    with _LOCK_REGISTRY_GUARD:
        lock = _LOCK_REGISTRY.get(target)
        if lock is None:
            lock = threading.Lock()
            _LOCK_REGISTRY[target] = lock
    lock.acquire()
    return lock


@contextmanager
def file_lock(path: Path) -> Iterator[None]:
    """Serialise writers of *path* within this process."""

    lock = _acquire_file_lock(path.resolve())
    try:
        yield
    finally:
        lock.release()


def format_for_path(path: Path | str) -> str:
    """Pillow format name for the extension of *path* (png, bmp or tga)."""

    extension = Path(path).suffix.lower().lstrip(".")
    try:
        return OUTPUT_FORMATS[extension]
    except KeyError as exc:
        raise ConfigError(f"Unknown file format for save: {extension or '<none>'}") from exc


def load_rgba(path: Path | str) -> Tuple[bytes, int, int]:
    """Decode *path* into an RGBA8 ``(buffer, width, height)`` triple (top-left origin)."""

    source = Path(path)
    try:
        with Image.open(source) as image:
            buffer, width, height = image_to_buffer(image)
    except OSError as exc:
        raise ImageLoadError(f"File {source} was not loaded: {exc}") from exc
    LOGGER.debug("Loaded %s (%dx%d)", source, width, height)
    return buffer, width, height


def save_rgba(buffer, width: int, height: int, path: Path | str, *, format: Optional[str] = None) -> Path:
    """Write an RGBA8 buffer to *path* through a temporary file.

    The container format follows the file extension unless *format* is given.
    BMP does not keep alpha (readers, Pillow included, load it back as RGB),
    so a warning is logged when a BMP write drops non-opaque alpha.
    """

    destination = Path(path)
    image_format = format or format_for_path(destination)
    ensure_dir(destination.parent)
    image = buffer_to_image(buffer, width, height)
    if image_format.upper() == "BMP" and image.getchannel("A").getextrema()[0] < 255:
        LOGGER.warning("BMP output %s does not preserve alpha; it will read back as opaque", destination)
    temp_path = destination.with_name(f".{destination.name}.tmp")
    with file_lock(destination):
        try:
            image.save(temp_path, format=image_format)
            os.replace(temp_path, destination)
        finally:
            if temp_path.exists():
                temp_path.unlink()
    LOGGER.debug("Wrote %s as %s", destination, image_format)
    return destination

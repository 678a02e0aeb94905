"""Parallel execution helpers for row-band conversion."""
from __future__ import annotations

import concurrent.futures
import logging
import os
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar


LOGGER = logging.getLogger("normalmap_pipeline.parallel")

T = TypeVar("T")
R = TypeVar("R")

Band = Tuple[int, int]


def create_thread_pool(max_workers: Optional[int] = None) -> concurrent.futures.ThreadPoolExecutor:
    """Create a thread pool executor with sane defaults."""

    return concurrent.futures.ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="normalmap")


def resolve_workers(threads: Optional[int]) -> int:
    """Number of workers to use; ``None`` or ``0`` means one per CPU."""

    if threads is None or threads <= 0:
        return os.cpu_count() or 1
    return threads


def split_rows(height: int, parts: int) -> List[Band]:
    """Split ``range(height)`` into at most *parts* contiguous, disjoint bands."""

    parts = max(1, min(parts, height))
    base, extra = divmod(height, parts)
    bands: List[Band] = []
    start = 0
    for index in range(parts):
        stop = start + base + (1 if index < extra else 0)
        bands.append((start, stop))
        start = stop
    return bands


def run_parallel(function: Callable[[T], R], items: Sequence[T], *, max_workers: Optional[int] = None) -> list[R]:
    """Run *function* for each element in *items* and return results in order.

    The first worker failure is logged and re-raised.
    """

    if not items:
        return []
    if max_workers == 1 or len(items) == 1:
        return [function(item) for item in items]
    with create_thread_pool(max_workers=max_workers) as executor:
        futures = [executor.submit(function, item) for item in items]
        results: list[R] = []
        for future in futures:
            try:
                results.append(future.result())
            except Exception:
                LOGGER.exception("Parallel worker failure")
                for pending in futures:
                    pending.cancel()
                raise
        return results

"""
Timing wrapper for pipeline benchmarks.

Brackets calls with wall-clock (``time.perf_counter``) and process CPU
(``time.process_time``) readings.  It only observes: results pass through
untouched and nothing here is visible to the pipeline.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Timing:
    repeats: int
    wall_seconds: float
    cpu_seconds: float

    @property
    def wall_ms(self) -> float:
        return self.wall_seconds * 1000.0

    @property
    def cpu_ms(self) -> float:
        return self.cpu_seconds * 1000.0

    @property
    def per_call_us(self) -> float:
        """Mean wall time of one call in microseconds."""
        if self.repeats <= 0:
            return 0.0
        return self.wall_seconds * 1e6 / self.repeats


@dataclass
class Stopwatch:
    wall_seconds: float = 0.0
    cpu_seconds: float = 0.0


@contextmanager
def timed() -> Iterator[Stopwatch]:
    """Yield a :class:`Stopwatch` that is filled in when the block exits."""
    watch = Stopwatch()
    wall0 = time.perf_counter()
    cpu0 = time.process_time()
    try:
        yield watch
    finally:
        watch.wall_seconds = time.perf_counter() - wall0
        watch.cpu_seconds = time.process_time() - cpu0


def benchmark(
    func: Callable[[], T],
    repeats: int,
    warmup: int = 1,
) -> Tuple[List[T], Timing]:
    """
    Call *func* ``warmup`` times untimed, then ``repeats`` times timed.

    Returns the list of timed results and the :class:`Timing`.
    """
    if repeats < 1:
        raise ValueError(f"repeats must be >= 1, got {repeats}")
    if warmup < 0:
        raise ValueError(f"warmup must be >= 0, got {warmup}")

    for _ in range(warmup):
        func()

    results: List[T] = []
    with timed() as watch:
        for _ in range(repeats):
            results.append(func())

    timing = Timing(repeats=repeats, wall_seconds=watch.wall_seconds, cpu_seconds=watch.cpu_seconds)
    logger.debug("benchmark: %d calls in %.3f ms", repeats, timing.wall_ms)
    return results, timing

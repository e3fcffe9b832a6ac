"""
Input checks that sit in front of the numeric hot paths.

The filters, the peak detector and the metrics assume well-formed input.
Everything here raises :class:`ValueError` for true programming errors
(empty kernels, negative windows/capacities, 2-D signals); "no detectable
signal" is never an error and is handled downstream as a 0.0 result.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def as_signal(signal: Sequence[float] | np.ndarray) -> np.ndarray:
    """Return *signal* as a 1-D ``float64`` array (no copy if already one)."""
    try:
        x = np.asarray(signal, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"signal must be real-valued: {exc}") from exc
    if x.ndim != 1:
        raise ValueError(f"signal must be 1-D, got shape {x.shape}")
    return x


def as_kernel(coeffs: Sequence[float] | np.ndarray) -> np.ndarray:
    try:
        h = np.asarray(coeffs, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"FIR coefficients must be real-valued: {exc}") from exc
    if h.ndim != 1:
        raise ValueError(f"FIR coefficients must be 1-D, got shape {h.shape}")
    if h.size == 0:
        raise ValueError("FIR kernel needs at least one coefficient")
    return h


def check_window(window: int) -> int:
    if isinstance(window, bool) or not isinstance(window, (int, np.integer)):
        raise ValueError(f"window must be an integer, got {window!r}")
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    return int(window)


def check_capacity(capacity: int) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, (int, np.integer)):
        raise ValueError(f"capacity must be an integer, got {capacity!r}")
    if capacity < 0:
        raise ValueError(f"capacity must be >= 0, got {capacity}")
    return int(capacity)


def check_guard_samples(samples: int) -> int:
    if isinstance(samples, bool) or not isinstance(samples, (int, np.integer)):
        raise ValueError(f"guard must be an integer sample count, got {samples!r}")
    if samples < 0:
        raise ValueError(f"guard must be >= 0 samples, got {samples}")
    return int(samples)


def check_fraction(fraction: float) -> float:
    fraction = float(fraction)
    if not np.isfinite(fraction) or fraction < 0.0:
        raise ValueError(f"guard fraction must be a finite value >= 0, got {fraction}")
    return fraction

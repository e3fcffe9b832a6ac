"""
Threshold peak detector with a refractory guard.

Algorithm
---------
1. Scan indices ``1 .. len-2``.  Index *i* is a peak iff
   ``x[i] > threshold`` and ``x[i] > x[i-1]`` and ``x[i] > x[i+1]``.
   The inequalities are strict, so a flat top (plateau) is never a peak and
   the first and last samples can never qualify.
2. After accepting a peak at *i*, skip ``guard`` samples and resume the scan
   at ``i + guard + 1``.  This suppresses double detections on the shoulders
   of a single pulse.
3. Stop once ``capacity`` peaks have been recorded.

The guard is either a fixed sample count (:class:`FixedSamples`) or a
fraction of the sampling rate (:class:`RateProportional`, e.g. 0.4 s worth
of samples, which caps the detectable rate at 150 BPM).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from pulse_metrics.validation import check_fraction, check_guard_samples

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Guard policies
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FixedSamples:
    """Skip a constant number of samples after each peak."""

    samples: int = 5

    def __post_init__(self) -> None:
        check_guard_samples(self.samples)

    def resolve(self, sampling_rate: Optional[float] = None) -> int:
        return self.samples

    def describe(self) -> str:
        return f"{self.samples} samples"


@dataclass(frozen=True)
class RateProportional:
    """Skip ``int(fraction * sampling_rate)`` samples after each peak."""

    fraction: float = 0.4

    def __post_init__(self) -> None:
        object.__setattr__(self, "fraction", check_fraction(self.fraction))

    def resolve(self, sampling_rate: Optional[float] = None) -> int:
        if sampling_rate is None:
            raise ValueError("a rate-proportional guard needs the sampling rate")
        if sampling_rate <= 0:
            return 0
        return int(self.fraction * sampling_rate)

    def describe(self) -> str:
        return f"{self.fraction:g} x fs"


GuardPolicy = Union[FixedSamples, RateProportional]


def resolve_guard(
    guard: Union[GuardPolicy, int],
    sampling_rate: Optional[float] = None,
) -> int:
    """Return the guard distance in samples for *guard* at *sampling_rate*."""
    if isinstance(guard, (FixedSamples, RateProportional)):
        return guard.resolve(sampling_rate)
    return check_guard_samples(guard)


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

def find_peaks(
    signal: np.ndarray,
    threshold: float,
    capacity: int,
    guard: Union[GuardPolicy, int] = FixedSamples(5),
    sampling_rate: Optional[float] = None,
) -> np.ndarray:
    """
    Return the indices of local maxima above *threshold*.

    Parameters
    ----------
    signal:
        1-D sample array (typically the output of a smoothing filter).
    threshold:
        Only samples strictly above this value can be peaks.
    capacity:
        Maximum number of peaks to report.  Scanning stops once reached.
    guard:
        Refractory policy, or a plain sample count.
    sampling_rate:
        Needed only when *guard* is :class:`RateProportional`.

    Returns
    -------
    peaks:
        Strictly increasing ``intp`` array, each index in ``[1, len-2]``.
        Empty when the signal has fewer than 3 samples.
    """
    x = np.asarray(signal, dtype=np.float64)
    if capacity <= 0 or x.size < 3:
        return np.empty(0, dtype=np.intp)

    skip = resolve_guard(guard, sampling_rate)

    centre = x[1:-1]
    is_peak = (centre > threshold) & (centre > x[:-2]) & (centre > x[2:])
    candidates = np.flatnonzero(is_peak) + 1

    # Sequential scan over the candidates: the first candidate at or past the
    # resume index is exactly what a sample-by-sample scan would hit next.
    peaks: list[int] = []
    resume_at = 1
    for idx in candidates:
        if idx < resume_at:
            continue
        peaks.append(int(idx))
        if len(peaks) >= capacity:
            break
        resume_at = idx + skip + 1

    logger.debug(
        "find_peaks: %d candidates, %d accepted (guard=%d, capacity=%d)",
        candidates.size, len(peaks), skip, capacity,
    )
    return np.asarray(peaks, dtype=np.intp)

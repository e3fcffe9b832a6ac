"""
Physiological estimates derived from peak locations.

Every function here is total: insufficient data (too few peaks, empty
channels, non-positive sampling rate or duration) yields 0.0 rather than
an exception, because "no detectable pulse" is an expected outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class MetricsResult:
    heart_rate: float            # beats per minute
    pulse_transit_time: float    # seconds, 0.0 if undetermined
    blood_pressure: float        # linear map of the PTT

    def __str__(self) -> str:
        return (
            f"HR={self.heart_rate:.1f} bpm  "
            f"PTT={self.pulse_transit_time * 1000.0:.1f} ms  "
            f"BP={self.blood_pressure:.2f}"
        )


def heart_rate(peaks: Sequence[int] | np.ndarray, sampling_rate: float) -> float:
    """
    Heart rate from the mean inter-peak interval.

    ``60 * sampling_rate / mean(diff(peaks))``; 0.0 with fewer than two
    peaks or a non-positive sampling rate.
    """
    p = np.asarray(peaks, dtype=np.float64)
    if p.size < 2 or sampling_rate <= 0:
        return 0.0
    mean_interval = float(np.mean(np.diff(p)))
    if mean_interval <= 0:
        return 0.0
    return 60.0 * sampling_rate / mean_interval


def heart_rate_from_duration(peaks_count: int, total_duration_seconds: float) -> float:
    """Heart rate from a peak count over a known time span."""
    if total_duration_seconds <= 0:
        return 0.0
    return (peaks_count / total_duration_seconds) * 60.0


def pulse_transit_time(
    peaks_a: Sequence[int] | np.ndarray,
    peaks_b: Sequence[int] | np.ndarray,
    sampling_rate: float,
) -> float:
    """
    Delay between the first pulse of channel A and the first pulse of B.

    Only the first detected peak of each channel is used; later cycles are
    ignored.  The result is signed (B earlier than A gives a negative PTT).
    """
    if len(peaks_a) == 0 or len(peaks_b) == 0 or sampling_rate <= 0:
        return 0.0
    return (int(peaks_b[0]) - int(peaks_a[0])) / sampling_rate


def pulse_transit_time_matched(
    peaks_a: Sequence[int] | np.ndarray,
    peaks_b: Sequence[int] | np.ndarray,
    sampling_rate: float,
) -> float:
    """
    Mean delay over matched pulse pairs.

    Each A peak is paired with the first B peak at or after it that comes
    before the next A peak.  A peaks without such a partner (missed B pulse)
    are skipped, as are extra B peaks.  Returns 0.0 when nothing pairs up.
    """
    a = np.asarray(peaks_a, dtype=np.int64)
    b = np.asarray(peaks_b, dtype=np.int64)
    if a.size == 0 or b.size == 0 or sampling_rate <= 0:
        return 0.0

    # first B index at or after each A peak
    pos = np.searchsorted(b, a, side="left")
    next_a = np.append(a[1:], np.iinfo(np.int64).max)
    in_range = pos < b.size
    partner = b[np.minimum(pos, b.size - 1)]
    matched = in_range & (partner < next_a)
    if not matched.any():
        return 0.0
    delays = partner[matched] - a[matched]
    return float(np.mean(delays)) / sampling_rate


def blood_pressure(ptt_seconds: float, slope_a: float, intercept_b: float) -> float:
    """Calibrated linear map ``slope_a * ptt + intercept_b``."""
    return slope_a * ptt_seconds + intercept_b

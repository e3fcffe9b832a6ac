"""
One parametrised pass: filter → peak detector → metrics.

The same :class:`PulsePipeline` covers the single-channel heart-rate case and
the two-channel pulse-transit-time case.  It keeps nothing between calls;
the only attribute is the immutable :class:`~pulse_metrics.config.PipelineConfig`,
so one instance can be shared freely or one built per channel/device.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from pulse_metrics.config import HeartRateMethod, PipelineConfig, PTTEstimator
from pulse_metrics.metrics import (
    MetricsResult,
    blood_pressure,
    heart_rate,
    heart_rate_from_duration,
    pulse_transit_time,
    pulse_transit_time_matched,
)
from pulse_metrics.peak_detector import find_peaks
from pulse_metrics.validation import as_signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelResult:
    filtered: np.ndarray
    peaks: np.ndarray


@dataclass(frozen=True)
class PipelineResult:
    proximal: ChannelResult
    distal: Optional[ChannelResult]
    metrics: MetricsResult


class PulsePipeline:
    """
    Filter, detect peaks and derive metrics for one or two channels.

    Parameters
    ----------
    config:
        Filter kind, threshold, capacity, guard and estimator selection.
    """

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process(
        self,
        proximal: Sequence[float] | np.ndarray,
        sampling_rate: float,
        distal: Sequence[float] | np.ndarray | None = None,
    ) -> PipelineResult:
        """
        Run the full pass.

        Parameters
        ----------
        proximal:
            Waveform of the first measurement site (e.g. wrist).  Heart rate
            is always computed from this channel.
        sampling_rate:
            Samples per second shared by both channels.  A non-positive
            rate yields 0.0 heart rate and PTT.
        distal:
            Optional waveform of the second site (e.g. finger).  Without it
            the PTT is 0.0 and the blood pressure equals the intercept.
        """
        first = self._channel(as_signal(proximal), sampling_rate)
        second = None
        if distal is not None:
            second = self._channel(as_signal(distal), sampling_rate)

        n_samples = first.filtered.size
        if self.config.heart_rate_method is HeartRateMethod.COUNT:
            duration = n_samples / sampling_rate if sampling_rate > 0 else 0.0
            beats = self._beat_count(first.filtered, sampling_rate)
            hr = heart_rate_from_duration(beats, duration)
        else:
            hr = heart_rate(first.peaks, sampling_rate)

        ptt = 0.0
        if second is not None:
            if self.config.ptt_estimator is PTTEstimator.MATCHED_MEAN:
                ptt = pulse_transit_time_matched(first.peaks, second.peaks, sampling_rate)
            else:
                ptt = pulse_transit_time(first.peaks, second.peaks, sampling_rate)

        bp = blood_pressure(ptt, self.config.bp_slope, self.config.bp_intercept)
        metrics = MetricsResult(heart_rate=hr, pulse_transit_time=ptt, blood_pressure=bp)
        logger.debug("pipeline (%s): %s", self.config.filter.describe(), metrics)
        return PipelineResult(proximal=first, distal=second, metrics=metrics)

    def run(
        self,
        proximal: Sequence[float] | np.ndarray,
        sampling_rate: float,
        distal: Sequence[float] | np.ndarray | None = None,
    ) -> MetricsResult:
        """Same as :meth:`process` but return only the metrics."""
        return self.process(proximal, sampling_rate, distal).metrics

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _channel(self, signal: np.ndarray, sampling_rate: float) -> ChannelResult:
        cfg = self.config
        filtered = cfg.filter.apply(signal)
        peaks = find_peaks(
            filtered,
            cfg.threshold,
            cfg.capacity,
            guard=cfg.guard,
            sampling_rate=sampling_rate,
        )
        return ChannelResult(filtered=filtered, peaks=peaks)

    def _beat_count(self, filtered: np.ndarray, sampling_rate: float) -> int:
        """Guarded peaks over the whole record, not limited by ``capacity``."""
        cfg = self.config
        return find_peaks(
            filtered,
            cfg.threshold,
            filtered.size,
            guard=cfg.guard,
            sampling_rate=sampling_rate,
        ).size

"""
Pipeline configuration and the built-in benchmark presets.

A :class:`PipelineConfig` is one immutable value carrying every tunable of
a pipeline pass: filter kind, peak threshold, peak capacity, guard policy,
heart-rate estimator, PTT estimator and the blood-pressure calibration.

:data:`PRESETS` reproduces the three reference benchmarks (blood pressure
from two channels, FIR low-pass, moving average) together with the
synthetic waveform each one was run against.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

from pulse_metrics.filters import FIR, FilterKind, Smoothing
from pulse_metrics.peak_detector import FixedSamples, GuardPolicy, RateProportional
from pulse_metrics.validation import check_capacity


class HeartRateMethod(Enum):
    INTERVAL = "interval"    # 60 * fs / mean inter-peak interval
    COUNT    = "count"       # peaks per second of signal * 60


class PTTEstimator(Enum):
    FIRST_PEAK   = "first-peak"     # first pulse of each channel only
    MATCHED_MEAN = "matched-mean"   # mean over matched pulse pairs


@dataclass(frozen=True)
class PipelineConfig:
    """
    Parameters
    ----------
    filter:
        :class:`~pulse_metrics.filters.Smoothing` or
        :class:`~pulse_metrics.filters.FIR`.
    threshold:
        Peak detection threshold (absolute, in signal units).
    capacity:
        Maximum number of peaks recorded per channel.
    guard:
        Refractory policy applied after each accepted peak.
    heart_rate_method:
        Interval-based (default) or count-over-duration estimator.
    ptt_estimator:
        First-peak (default) or matched-mean pulse transit time.
    bp_slope, bp_intercept:
        Device calibration of ``BP = slope * PTT + intercept``.
    """

    filter: FilterKind
    threshold: float
    capacity: int = 64
    guard: GuardPolicy = field(default_factory=FixedSamples)
    heart_rate_method: HeartRateMethod = HeartRateMethod.INTERVAL
    ptt_estimator: PTTEstimator = PTTEstimator.FIRST_PEAK
    bp_slope: float = -50.0
    bp_intercept: float = 130.0

    def __post_init__(self) -> None:
        if not isinstance(self.filter, (Smoothing, FIR)):
            raise ValueError(f"filter must be Smoothing or FIR, got {self.filter!r}")
        if not isinstance(self.guard, (FixedSamples, RateProportional)):
            raise ValueError(f"guard must be FixedSamples or RateProportional, got {self.guard!r}")
        check_capacity(self.capacity)
        object.__setattr__(self, "threshold", float(self.threshold))
        object.__setattr__(self, "heart_rate_method", HeartRateMethod(self.heart_rate_method))
        object.__setattr__(self, "ptt_estimator", PTTEstimator(self.ptt_estimator))


# ---------------------------------------------------------------------------
# Benchmark presets
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BenchmarkPreset:
    """A pipeline config plus the synthetic waveform it is benchmarked on."""

    name: str
    description: str
    config: PipelineConfig
    sampling_rate: float
    n_samples: int
    repeats: int
    heart_hz: float = 1.2
    baseline: float = 0.5
    amplitude: float = 0.5
    ripple_hz: float = 10.0
    ripple_amplitude: float = 0.0
    distal_delay_s: Optional[float] = None   # two-channel PTT when set


PRESETS: Dict[str, BenchmarkPreset] = {
    "blood-pressure": BenchmarkPreset(
        name="blood-pressure",
        description="Two-channel PTT and blood-pressure estimate",
        config=PipelineConfig(
            filter=Smoothing(window=5),
            threshold=0.8,
            capacity=64,
            guard=FixedSamples(5),
            heart_rate_method=HeartRateMethod.INTERVAL,
            bp_slope=-50.0,
            bp_intercept=130.0,
        ),
        sampling_rate=100.0,
        n_samples=500,
        repeats=1000,
        ripple_amplitude=0.05,
        distal_delay_s=0.05,
    ),
    "low-pass": BenchmarkPreset(
        name="low-pass",
        description="FIR low-pass followed by peak-count heart rate",
        config=PipelineConfig(
            filter=FIR((0.1, 0.2, 0.4, 0.2, 0.1)),
            threshold=0.2,
            guard=RateProportional(0.4),
            heart_rate_method=HeartRateMethod.COUNT,
        ),
        sampling_rate=100.0,
        n_samples=100,
        repeats=100,
        amplitude=0.4,
        ripple_amplitude=0.05,
    ),
    "moving-average": BenchmarkPreset(
        name="moving-average",
        description="Moving average followed by peak-count heart rate",
        config=PipelineConfig(
            filter=Smoothing(window=20),
            threshold=0.6,
            guard=RateProportional(0.4),
            heart_rate_method=HeartRateMethod.COUNT,
        ),
        sampling_rate=50.0,
        n_samples=100,
        repeats=1,
        heart_hz=1.0,
    ),
}


def get_preset(name: Union[str, BenchmarkPreset]) -> BenchmarkPreset:
    """Look up a preset by name.  Raises ``KeyError`` for unknown names."""
    if isinstance(name, BenchmarkPreset):
        return name
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(
            f"unknown preset {name!r}; choose from {', '.join(sorted(PRESETS))}"
        ) from None

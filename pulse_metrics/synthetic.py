"""
Synthetic PPG-like waveforms for benchmarks and tests.

The pulse is a sinusoid at the heart frequency with an optional
high-frequency ripple standing in for sensor noise.  :func:`delayed`
produces the second measurement site for pulse-transit-time runs.
"""

from __future__ import annotations

import numpy as np


def synthetic_ppg(
    n_samples: int,
    sampling_rate: float,
    heart_hz: float = 1.2,
    baseline: float = 0.5,
    amplitude: float = 0.5,
    ripple_hz: float = 10.0,
    ripple_amplitude: float = 0.0,
    phase: float = 0.0,
) -> np.ndarray:
    """
    ``baseline + amplitude*sin(2π·heart_hz·t + phase) + ripple_amplitude*sin(2π·ripple_hz·t)``

    with ``t = i / sampling_rate`` for ``i`` in ``0 .. n_samples-1``.  A
    phase of ``-π/2`` starts the record at the foot of a pulse.
    """
    if n_samples < 0:
        raise ValueError(f"n_samples must be >= 0, got {n_samples}")
    if sampling_rate <= 0:
        raise ValueError(f"sampling_rate must be > 0, got {sampling_rate}")
    t = np.arange(n_samples) / sampling_rate
    signal = baseline + amplitude * np.sin(2 * np.pi * heart_hz * t + phase)
    if ripple_amplitude:
        signal = signal + ripple_amplitude * np.sin(2 * np.pi * ripple_hz * t)
    return signal


def delayed(signal: np.ndarray, delay_samples: int) -> np.ndarray:
    """Shift *signal* right by *delay_samples*, filling the gap with zeros."""
    if delay_samples < 0:
        raise ValueError(f"delay_samples must be >= 0, got {delay_samples}")
    x = np.asarray(signal, dtype=np.float64)
    out = np.zeros_like(x)
    if delay_samples < x.size:
        out[delay_samples:] = x[: x.size - delay_samples]
    return out

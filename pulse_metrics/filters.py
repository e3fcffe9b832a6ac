"""
Causal smoothing filters for PPG waveforms.

Two interchangeable kernels share one contract: a 1-D ``float64`` array in,
a new array of identical length out, where output sample *n* depends only
on input samples at indices <= *n*.

* :func:`smooth` – moving average whose window shrinks near the start of
  the sequence instead of padding with zeros, so early samples are not
  biased toward zero.
* :func:`fir` – finite-impulse-response convolution with caller-supplied
  coefficients.  ``coeffs[0]`` weights the current sample, ``coeffs[k]``
  the sample *k* steps in the past.  No normalisation is applied.

The :class:`Smoothing` and :class:`FIR` records carry the parameters of each
kernel so a pipeline can hold "which filter" as a single value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
from scipy.signal import lfilter

from pulse_metrics.validation import as_kernel, as_signal, check_window


def smooth(signal: np.ndarray, window: int) -> np.ndarray:
    """
    Causal moving average with a shrinking start-up window.

    ``out[n] = mean(x[n - k] for k in 0 .. min(n, window - 1))``

    Parameters
    ----------
    signal:
        1-D sample array.
    window:
        Window length *M* (>= 1).  Not checked here; see :class:`Smoothing`.
    """
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return np.empty(0, dtype=np.float64)

    # Running sums over the last `window` samples (partial near the start);
    # taps past the signal length never contribute
    sums = lfilter(np.ones(min(window, x.size), dtype=np.float64), [1.0], x)
    counts = np.minimum(np.arange(1, x.size + 1), window).astype(np.float64)
    return sums / counts


def fir(signal: np.ndarray, coeffs: np.ndarray) -> np.ndarray:
    """
    Causal FIR convolution, implicitly zero-padded before index 0.

    ``out[n] = sum(coeffs[k] * x[n - k] for k in 0 .. min(n, M - 1))``
    """
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return np.empty(0, dtype=np.float64)
    return lfilter(np.asarray(coeffs, dtype=np.float64), [1.0], x)


# ---------------------------------------------------------------------------
# Filter kinds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Smoothing:
    """Moving-average filter of ``window`` samples."""

    window: int

    def __post_init__(self) -> None:
        check_window(self.window)

    def apply(self, signal: np.ndarray) -> np.ndarray:
        return smooth(as_signal(signal), self.window)

    def describe(self) -> str:
        return f"moving average (M={self.window})"


@dataclass(frozen=True)
class FIR:
    """FIR filter with fixed coefficients (stored as a tuple of floats)."""

    coeffs: Tuple[float, ...]

    def __post_init__(self) -> None:
        kernel = as_kernel(self.coeffs)
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "coeffs", tuple(float(c) for c in kernel))

    @property
    def taps(self) -> int:
        return len(self.coeffs)

    def apply(self, signal: np.ndarray) -> np.ndarray:
        return fir(as_signal(signal), np.asarray(self.coeffs, dtype=np.float64))

    def describe(self) -> str:
        return f"FIR low-pass (M={self.taps})"


FilterKind = Union[Smoothing, FIR]

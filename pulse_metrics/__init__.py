"""
Pulse Metrics — heart rate, pulse transit time and a blood-pressure proxy
from PPG-like waveforms.

A fixed-rate waveform is smoothed (moving average or FIR), peaks above a
threshold are picked with a refractory guard, and the peak positions are
turned into beats per minute, a two-site pulse transit time and a linear
blood-pressure estimate.
"""

__version__ = "0.1.0"
__author__ = "pulse_metrics"

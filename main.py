#!/usr/bin/env python3
"""
Pulse Metrics – benchmark entry point.

Usage
-----
    python main.py [OPTIONS]

Options
-------
    --preset NAME        blood-pressure | low-pass | moving-average
                         (default: blood-pressure)
    --input PATH         Text file with one (proximal) or two (proximal,
                         distal) columns of samples instead of the
                         preset's synthetic waveform
    --fs FLOAT           Sampling rate in Hz
    --samples INT        Length of the synthetic waveform (not with --input)
    --repeats INT        Timed pipeline runs
    --threshold FLOAT    Peak threshold
    --window INT         Use a moving-average filter of this length
    --coeffs LIST        Use an FIR filter, e.g. "0.1,0.2,0.4,0.2,0.1"
    --guard-samples INT  Fixed refractory guard in samples
    --guard-fraction F   Refractory guard as a fraction of fs
    --capacity INT       Peak capacity per channel
    --bp-slope FLOAT     Blood-pressure calibration slope
    --bp-intercept FLOAT Blood-pressure calibration intercept
    --verbose            Debug logging
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from pulse_metrics.config import PRESETS, BenchmarkPreset, PipelineConfig, get_preset
from pulse_metrics.filters import FIR, Smoothing
from pulse_metrics.instrumentation import benchmark
from pulse_metrics.peak_detector import FixedSamples, RateProportional
from pulse_metrics.pipeline import PulsePipeline
from pulse_metrics.synthetic import delayed, synthetic_ppg

logger = logging.getLogger("pulse_metrics")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Heart rate / PTT / blood-pressure pipeline benchmark",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--preset", default="blood-pressure", choices=sorted(PRESETS),
                        help="Parameter set and synthetic waveform to start from")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", type=Path, default=None,
                        help="Text file with 1 or 2 columns of samples")
    source.add_argument("--samples", type=int, default=None,
                        help="Synthetic waveform length (default: preset)")
    parser.add_argument("--fs", type=float, default=None,
                        help="Sampling rate in Hz (default: preset)")
    parser.add_argument("--repeats", type=int, default=None,
                        help="Timed pipeline runs (default: preset)")
    parser.add_argument("--threshold", type=float, default=None,
                        help="Peak threshold (default: preset)")
    filt = parser.add_mutually_exclusive_group()
    filt.add_argument("--window", type=int, default=None,
                      help="Moving-average window length")
    filt.add_argument("--coeffs", default=None,
                      help="Comma-separated FIR coefficients")
    guard = parser.add_mutually_exclusive_group()
    guard.add_argument("--guard-samples", type=int, default=None,
                       help="Fixed refractory guard in samples")
    guard.add_argument("--guard-fraction", type=float, default=None,
                       help="Refractory guard as a fraction of fs")
    parser.add_argument("--capacity", type=int, default=None,
                        help="Maximum peaks per channel (default: preset)")
    parser.add_argument("--bp-slope", type=float, default=None,
                        help="Blood-pressure slope (default: preset)")
    parser.add_argument("--bp-intercept", type=float, default=None,
                        help="Blood-pressure intercept (default: preset)")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace, preset: BenchmarkPreset) -> PipelineConfig:
    """Apply command-line overrides on top of the preset's config."""
    overrides: dict = {}
    if args.window is not None:
        overrides["filter"] = Smoothing(window=args.window)
    elif args.coeffs is not None:
        try:
            coeffs = tuple(float(c) for c in args.coeffs.split(",") if c.strip())
        except ValueError as exc:
            raise ValueError(f"invalid --coeffs {args.coeffs!r}: {exc}") from exc
        overrides["filter"] = FIR(coeffs)
    if args.guard_samples is not None:
        overrides["guard"] = FixedSamples(args.guard_samples)
    elif args.guard_fraction is not None:
        overrides["guard"] = RateProportional(args.guard_fraction)
    if args.threshold is not None:
        overrides["threshold"] = args.threshold
    if args.capacity is not None:
        overrides["capacity"] = args.capacity
    if args.bp_slope is not None:
        overrides["bp_slope"] = args.bp_slope
    if args.bp_intercept is not None:
        overrides["bp_intercept"] = args.bp_intercept
    return dataclasses.replace(preset.config, **overrides)


def load_waveforms(
    args: argparse.Namespace,
    preset: BenchmarkPreset,
    sampling_rate: float,
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """Return ``(proximal, distal)`` from ``--input`` or the preset recipe."""
    if args.input is not None:
        data = np.loadtxt(args.input, delimiter=None if _whitespace_delimited(args.input) else ",",
                          dtype=np.float64, ndmin=2)
        if data.shape[1] not in (1, 2):
            raise ValueError(f"{args.input}: expected 1 or 2 columns, got {data.shape[1]}")
        distal = data[:, 1].copy() if data.shape[1] == 2 else None
        return data[:, 0].copy(), distal

    n_samples = args.samples if args.samples is not None else preset.n_samples
    proximal = synthetic_ppg(
        n_samples,
        sampling_rate,
        heart_hz=preset.heart_hz,
        baseline=preset.baseline,
        amplitude=preset.amplitude,
        ripple_hz=preset.ripple_hz,
        ripple_amplitude=preset.ripple_amplitude,
    )
    distal = None
    if preset.distal_delay_s is not None:
        distal = delayed(proximal, int(round(preset.distal_delay_s * sampling_rate)))
    return proximal, distal


def _whitespace_delimited(path: Path) -> bool:
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            if line.strip() and not line.lstrip().startswith("#"):
                return "," not in line
    return True


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> int:
    logging.getLogger().setLevel(logging.DEBUG if args.verbose else logging.INFO)

    try:
        preset = get_preset(args.preset)
        sampling_rate = args.fs if args.fs is not None else preset.sampling_rate
        repeats = args.repeats if args.repeats is not None else preset.repeats
        config = build_config(args, preset)
        proximal, distal = load_waveforms(args, preset, sampling_rate)
    except (KeyError, ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    pipeline = PulsePipeline(config)
    logger.info("Starting benchmark: preset=%s, filter=%s, guard=%s",
                preset.name, config.filter.describe(), config.guard.describe())

    try:
        results, timing = benchmark(
            lambda: pipeline.process(proximal, sampling_rate, distal),
            repeats=repeats,
        )
    except ValueError as exc:
        logger.error("%s", exc)
        return 1

    last = results[-1]
    mean_hr = float(np.mean([r.metrics.heart_rate for r in results]))
    mean_ptt = float(np.mean([r.metrics.pulse_transit_time for r in results]))
    mean_bp = float(np.mean([r.metrics.blood_pressure for r in results]))

    logger.info("Benchmark done!")
    logger.info("Samples=%d, FS=%.1f, Repeats=%d", proximal.size, sampling_rate, repeats)
    logger.info("Peaks: proximal=%d%s", last.proximal.peaks.size,
                f", distal={last.distal.peaks.size}" if last.distal is not None else "")
    logger.info("Mean HR=%.1f bpm", mean_hr)
    if last.distal is not None:
        logger.info("Mean PTT=%.1f ms, Mean BP=%.2f", mean_ptt * 1000.0, mean_bp)
    logger.info("Execution time = %.3f ms (CPU %.3f ms)", timing.wall_ms, timing.cpu_ms)
    logger.info("≈ %.3f us per pass", timing.per_call_us)
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s – %(message)s",
        datefmt="%H:%M:%S",
    )
    return run(parse_args(argv))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())

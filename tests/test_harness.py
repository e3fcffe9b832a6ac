"""
Unit tests for the benchmark harness: synthetic source, timing wrapper,
presets and the command-line entry point.
Run with:  pytest tests/test_harness.py
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import numpy as np
import pytest

import main
from pulse_metrics.config import (
    PRESETS,
    HeartRateMethod,
    PipelineConfig,
    PTTEstimator,
    get_preset,
)
from pulse_metrics.filters import FIR, Smoothing
from pulse_metrics.instrumentation import Timing, benchmark, timed
from pulse_metrics.peak_detector import FixedSamples, RateProportional
from pulse_metrics.synthetic import delayed, synthetic_ppg


# ---------------------------------------------------------------------------
# Synthetic waveforms
# ---------------------------------------------------------------------------

class TestSynthetic:

    def test_shape_and_range(self):
        x = synthetic_ppg(500, 100.0)
        assert x.shape == (500,)
        assert x.min() >= 0.0 - 1e-12
        assert x.max() <= 1.0 + 1e-12
        assert x[0] == pytest.approx(0.5)

    def test_ripple_added(self):
        clean = synthetic_ppg(200, 100.0)
        noisy = synthetic_ppg(200, 100.0, ripple_hz=25.0, ripple_amplitude=0.05)
        assert np.max(np.abs(noisy - clean)) == pytest.approx(0.05, rel=1e-3)

    def test_phase(self):
        x = synthetic_ppg(10, 100.0, phase=-np.pi / 2)
        assert x[0] == pytest.approx(0.0)

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            synthetic_ppg(-1, 100.0)
        with pytest.raises(ValueError):
            synthetic_ppg(10, 0.0)

    def test_delayed(self):
        out = delayed(np.array([1.0, 2.0, 3.0, 4.0]), 2)
        np.testing.assert_array_equal(out, [0.0, 0.0, 1.0, 2.0])

    def test_delayed_zero_and_overlong(self):
        x = np.array([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(delayed(x, 0), x)
        np.testing.assert_array_equal(delayed(x, 5), np.zeros(3))

    def test_delayed_negative(self):
        with pytest.raises(ValueError):
            delayed(np.ones(4), -1)


# ---------------------------------------------------------------------------
# Instrumentation
# ---------------------------------------------------------------------------

class TestInstrumentation:

    def test_benchmark_counts_calls(self):
        calls = []

        def work():
            calls.append(1)
            return len(calls)

        results, timing = benchmark(work, repeats=5, warmup=2)
        assert len(calls) == 7
        assert results == [3, 4, 5, 6, 7]
        assert timing.repeats == 5
        assert timing.wall_seconds >= 0.0
        assert timing.cpu_seconds >= 0.0

    def test_results_pass_through(self):
        results, _ = benchmark(lambda: 42.5, repeats=3, warmup=0)
        assert results == [42.5, 42.5, 42.5]

    def test_invalid_repeats(self):
        with pytest.raises(ValueError):
            benchmark(lambda: None, repeats=0)
        with pytest.raises(ValueError):
            benchmark(lambda: None, repeats=1, warmup=-1)

    def test_timed_fills_stopwatch(self):
        with timed() as watch:
            sum(range(1000))
        assert watch.wall_seconds >= 0.0
        assert watch.cpu_seconds >= 0.0

    def test_timing_derived_values(self):
        timing = Timing(repeats=4, wall_seconds=0.002, cpu_seconds=0.001)
        assert timing.wall_ms == pytest.approx(2.0)
        assert timing.cpu_ms == pytest.approx(1.0)
        assert timing.per_call_us == pytest.approx(500.0)


# ---------------------------------------------------------------------------
# Config and presets
# ---------------------------------------------------------------------------

class TestConfig:

    def test_defaults(self):
        cfg = PipelineConfig(filter=Smoothing(5), threshold=0.8)
        assert cfg.capacity == 64
        assert cfg.guard == FixedSamples(5)
        assert cfg.heart_rate_method is HeartRateMethod.INTERVAL
        assert cfg.ptt_estimator is PTTEstimator.FIRST_PEAK
        assert cfg.bp_slope == -50.0
        assert cfg.bp_intercept == 130.0

    def test_enum_values_accepted(self):
        cfg = PipelineConfig(filter=Smoothing(5), threshold=1,
                             heart_rate_method="count", ptt_estimator="matched-mean")
        assert cfg.heart_rate_method is HeartRateMethod.COUNT
        assert cfg.ptt_estimator is PTTEstimator.MATCHED_MEAN
        assert isinstance(cfg.threshold, float)

    def test_rejects_negative_capacity(self):
        with pytest.raises(ValueError):
            PipelineConfig(filter=Smoothing(5), threshold=0.8, capacity=-1)

    def test_rejects_unknown_filter_and_guard(self):
        with pytest.raises(ValueError):
            PipelineConfig(filter=5, threshold=0.8)
        with pytest.raises(ValueError):
            PipelineConfig(filter=Smoothing(5), threshold=0.8, guard=5)

    def test_rejects_unknown_method(self):
        with pytest.raises(ValueError):
            PipelineConfig(filter=Smoothing(5), threshold=0.8, heart_rate_method="median")

    def test_replace_revalidates(self):
        cfg = PipelineConfig(filter=Smoothing(5), threshold=0.8)
        with pytest.raises(ValueError):
            dataclasses.replace(cfg, capacity=-3)

    def test_presets(self):
        assert set(PRESETS) == {"blood-pressure", "low-pass", "moving-average"}
        bp = get_preset("blood-pressure")
        assert bp.config.filter == Smoothing(5)
        assert bp.config.guard == FixedSamples(5)
        assert bp.distal_delay_s == pytest.approx(0.05)
        lp = get_preset("low-pass")
        assert lp.config.filter == FIR((0.1, 0.2, 0.4, 0.2, 0.1))
        assert lp.config.guard == RateProportional(0.4)
        assert lp.config.heart_rate_method is HeartRateMethod.COUNT
        ma = get_preset("moving-average")
        assert ma.config.filter == Smoothing(20)
        assert ma.sampling_rate == 50.0

    def test_unknown_preset(self):
        with pytest.raises(KeyError):
            get_preset("ecg")

    def test_get_preset_passthrough(self):
        preset = PRESETS["low-pass"]
        assert get_preset(preset) is preset


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

class TestCli:

    def test_parse_defaults(self):
        args = main.parse_args([])
        assert args.preset == "blood-pressure"
        assert args.input is None
        assert args.window is None

    def test_filter_flags_exclusive(self):
        with pytest.raises(SystemExit):
            main.parse_args(["--window", "5", "--coeffs", "0.5,0.5"])

    def test_input_and_samples_exclusive(self):
        with pytest.raises(SystemExit):
            main.parse_args(["--input", "x.txt", "--samples", "10"])

    def test_build_config_overrides(self):
        args = main.parse_args(["--coeffs", "0.25, 0.5, 0.25", "--guard-fraction", "0.3",
                                "--threshold", "0.4", "--capacity", "8",
                                "--bp-slope", "-40", "--bp-intercept", "125"])
        cfg = main.build_config(args, get_preset("blood-pressure"))
        assert cfg.filter == FIR((0.25, 0.5, 0.25))
        assert cfg.guard == RateProportional(0.3)
        assert cfg.threshold == 0.4
        assert cfg.capacity == 8
        assert cfg.bp_slope == -40.0
        assert cfg.bp_intercept == 125.0

    def test_build_config_keeps_preset(self):
        preset = get_preset("moving-average")
        assert main.build_config(main.parse_args([]), preset) == preset.config

    def test_run_preset(self, caplog):
        with caplog.at_level(logging.INFO):
            code = main.run(main.parse_args(["--repeats", "3"]))
        assert code == 0
        assert "Mean HR=" in caplog.text
        assert "Mean PTT=50.0 ms" in caplog.text

    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_run_every_preset(self, name):
        assert main.run(main.parse_args(["--preset", name, "--repeats", "2"])) == 0

    def test_run_two_column_input(self, tmp_path: Path):
        x = synthetic_ppg(500, 100.0, phase=-np.pi / 2)
        path = tmp_path / "ppg.txt"
        np.savetxt(path, np.column_stack([x, delayed(x, 5)]))
        assert main.run(main.parse_args(["--input", str(path), "--repeats", "1"])) == 0

    def test_run_csv_input(self, tmp_path: Path):
        x = synthetic_ppg(300, 100.0)
        path = tmp_path / "ppg.csv"
        np.savetxt(path, x[:, None], delimiter=",")
        args = main.parse_args(["--input", str(path), "--preset", "low-pass", "--repeats", "1"])
        assert main.run(args) == 0

    def test_missing_input_file(self, tmp_path: Path, caplog):
        args = main.parse_args(["--input", str(tmp_path / "nope.txt")])
        with caplog.at_level(logging.ERROR):
            assert main.run(args) == 1

    def test_three_columns_rejected(self, tmp_path: Path):
        path = tmp_path / "bad.txt"
        np.savetxt(path, np.ones((10, 3)))
        assert main.run(main.parse_args(["--input", str(path)])) == 1

    @pytest.mark.parametrize("argv", [
        ["--window", "0"],
        ["--coeffs", ","],
        ["--coeffs", "a,b"],
        ["--capacity", "-1"],
        ["--guard-samples", "-2"],
        ["--repeats", "0"],
        ["--samples", "-5"],
    ])
    def test_bad_arguments_exit_1(self, argv):
        assert main.run(main.parse_args(argv)) == 1

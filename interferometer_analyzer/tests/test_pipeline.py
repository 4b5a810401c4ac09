"""End-to-end pipeline tests on synthetic scope exports."""

from __future__ import annotations

import numpy as np
import pytest

from interferometer_analyzer.analysis import pipeline, savgol
from interferometer_analyzer.analysis.decimate import decimate_for_display, decimation_step
from interferometer_analyzer.analysis.kinematics import velocity_at_points
from interferometer_analyzer.analysis.linalg import DegenerateMatrixError
from interferometer_analyzer.analysis.pipeline import (
    process,
    process_text,
    recompute_intersections,
    with_offsets,
)
from interferometer_analyzer.models.config import INTERF_BIAS, AnalysisConfig
from interferometer_analyzer.models.frames import Trace
from interferometer_analyzer.models.results import RootPoint


N = 4000
DT = 10e-9
PERIOD = 400  # samples
AMP = 0.5


def _sine_csv(n: int = N) -> str:
    """Scope export with CH1 = 0 and CH3 = AMP*sin - bias (so the calibrated channel is a pure sine)."""
    lines = ["Model,MSO54", "Record Length,%d" % n, "TIME,CH1,CH2,CH3,CH4"]
    for i in range(n):
        ch3 = AMP * np.sin(2 * np.pi * (i + 0.25) / PERIOD) - INTERF_BIAS
        lines.append(f"{i * DT:.12e},0.0,0.0,{ch3:.12e},0.0")
    return "\n".join(lines) + "\n"


def _cfg(**kw) -> AnalysisConfig:
    base = dict(start_line_index=1, end_line_index=N)
    base.update(kw)
    return AnalysisConfig(**base)


@pytest.fixture(scope="module")
def sine_result():
    return process_text(_sine_csv(), _cfg())


def test_series_shapes(sine_result) -> None:
    res = sine_result
    assert res.n_samples == N
    assert res.interf_smoothed.shape == (N,)
    assert res.interf_corrected.shape == (N,)
    assert res.derivative.shape == (N,)
    assert res.to_frame().shape == (N, 6)


def test_smoothing_and_baseline(sine_result) -> None:
    res = sine_result
    clean = AMP * np.sin(2 * np.pi * (np.arange(N) + 0.25) / PERIOD)
    assert np.allclose(res.interf_smoothed[20:-20], clean[20:-20], atol=1e-3)
    assert abs(np.mean(res.interf_corrected[:2000])) < 1e-12


def test_zero_crossings_are_half_periods(sine_result) -> None:
    times = np.array([p.time for p in sine_result.zero_crossings])
    assert 18 <= times.size <= 20
    assert np.all(np.diff(times) >= sine_result.config.root_min_separation_s)

    half = PERIOD // 2
    k = np.round(times / DT / half)
    expected = (k * half - 0.25) * DT
    assert np.allclose(times, expected, atol=DT)


def test_local_derivative_only_near_crossings(sine_result) -> None:
    res = sine_result
    t = res.trace.t
    centers = np.array([p.time for p in res.zero_crossings])
    dist = np.min(np.abs(t[:, None] - centers[None, :]), axis=1)

    far = dist > res.config.derivative_window_s + DT
    assert np.all(res.derivative[far] == 0.0)

    peak = AMP * 2 * np.pi / (PERIOD * DT)
    for c in centers:
        i = int(np.argmin(np.abs(t - c)))
        assert abs(res.derivative[i]) == pytest.approx(peak, rel=0.05)


def test_intersections_with_flat_strain(sine_result) -> None:
    res = sine_result
    assert len(res.intersections) == len(res.zero_crossings)
    for p, z in zip(res.intersections, res.zero_crossings):
        assert p.time == pytest.approx(z.time, abs=1e-12)
        assert abs(p.value) <= res.config.intersection_amplitude_threshold
    assert list(res.intersections_frame().columns) == ["time", "value"]


def test_focus_hint_present(sine_result) -> None:
    focus = sine_result.focus
    assert focus is not None
    assert focus.window > 0
    assert sine_result.trace.t[0] <= focus.time <= sine_result.trace.t[-1]


def test_offsets_recompute_intersections(sine_result) -> None:
    res = sine_result
    assert recompute_intersections(res) == res.intersections
    # Strain lifted to the sine's crest: any crossing is far from zero amplitude.
    assert recompute_intersections(res, strain_offset=0.3) == ()
    # A wide threshold brings them back.
    pts = recompute_intersections(res, strain_offset=0.3, threshold=1.0)
    assert len(pts) > 0
    assert all(p.value == pytest.approx(0.3, abs=1e-3) for p in pts)

    # Lowering the interferometer moves the crossings with the flat strain to where interf = 0.3.
    shifted = with_offsets(res, interf_offset=-0.3)
    assert len(shifted.intersections) > 0
    assert all(abs(p.value) < 1e-6 for p in shifted.intersections)
    t = res.trace.t
    for p in shifted.intersections:
        i = int(np.argmin(np.abs(t - p.time)))
        assert res.interf_corrected[i] == pytest.approx(0.3, abs=0.02)
    assert shifted.interf_corrected is res.interf_corrected
    assert shifted.zero_crossings == res.zero_crossings


def test_config_normalization_is_reported() -> None:
    res = process_text(_sine_csv(600), _cfg(end_line_index=600, smoothing_window_size=8, polynomial_order=9))
    assert res.config.smoothing_window_size == 9
    assert res.config.polynomial_order == 8
    assert any(w.startswith("config normalized") for w in res.warnings)


def test_empty_trace_degrades_to_empty_outputs() -> None:
    res = process(Trace.from_arrays([], [], []), AnalysisConfig())
    assert res.n_samples == 0
    assert res.interf_smoothed.size == 0
    assert res.interf_corrected.size == 0
    assert res.derivative.size == 0
    assert res.zero_crossings == ()
    assert res.intersections == ()
    assert res.focus is None


def test_text_without_header_yields_empty_result() -> None:
    res = process_text("garbage\n1,2,3\n", AnalysisConfig())
    assert res.n_samples == 0
    assert any("header" in w for w in res.warnings)


def test_degenerate_matrix_falls_back(monkeypatch) -> None:
    def _raise(window_size, polynomial_order):
        raise DegenerateMatrixError("forced")

    monkeypatch.setattr(savgol, "savgol_coefficients", _raise)
    monkeypatch.setattr(pipeline, "savgol_coefficients", _raise)

    tr = Trace.from_arrays(
        np.arange(500) * DT,
        np.zeros(500),
        np.sin(np.arange(500) / 20.0),
    )
    res = process(tr, _cfg())
    assert np.array_equal(res.interf_smoothed, tr.interf)
    assert np.all(res.derivative == 0.0)
    assert any("degenerate" in w for w in res.warnings)


def test_non_uniform_sampling_is_flagged() -> None:
    t = np.cumsum(np.where(np.arange(300) % 2 == 0, 1e-9, 3e-9))
    y = np.sin(np.arange(300) / 15.0)
    res = process(Trace.from_arrays(t, np.zeros(300), y), _cfg(baseline_sample_count=50))
    assert len(res.zero_crossings) > 0
    assert any("non-uniform sampling" in w for w in res.warnings)


def test_each_call_returns_independent_result() -> None:
    text = _sine_csv(800)
    a = process_text(text, _cfg(end_line_index=800))
    b = process_text(text, _cfg(end_line_index=800))
    assert a is not b
    assert a.trace is not b.trace
    assert np.array_equal(a.interf_corrected, b.interf_corrected)


# -----------------------------------------------------------------------
# Kinematics and decimation
# -----------------------------------------------------------------------


def test_velocity_at_points_trapezoid() -> None:
    t = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
    d = np.array([10.0, 20.0, 30.0, 40.0, 50.0])
    pts = [RootPoint(0.5, 0.0), RootPoint(2.0, 0.0), RootPoint(10.0, 0.0)]
    df = velocity_at_points(t, d, pts)
    assert list(df.columns) == ["time", "velocity", "displacement"]
    assert df["velocity"].tolist() == [20.0, 30.0, 50.0]
    assert df["displacement"].tolist() == pytest.approx([0.0, 37.5, 357.5])


def test_velocity_at_points_empty() -> None:
    df = velocity_at_points(np.arange(3.0), np.zeros(3), [])
    assert len(df) == 0


def test_decimate_for_display(sine_result) -> None:
    assert decimation_step(N, 1000) == 4
    assert decimation_step(10, 2000) == 1

    df = decimate_for_display(sine_result, max_points=1000)
    assert len(df) == 1000
    assert list(df.columns) == ["t", "strain", "interf_smoothed", "interf_corrected", "derivative"]
    assert df["t"].iloc[1] == sine_result.trace.t[4]


# -----------------------------------------------------------------------
# Step transient through the full pipeline
# -----------------------------------------------------------------------


def _step_csv(ramp_start: int, n: int = 10_000, ramp_len: int = 20, dt: float = 1e-9) -> str:
    """Export whose calibrated interferometer is flat 0, ramps to -1 over ``ramp_len`` rows, then stays at -1."""
    i = np.arange(n, dtype=float)
    y = np.clip(-(i - ramp_start) / ramp_len, -1.0, 0.0)
    lines = ["TIME,CH1,CH2,CH3,CH4"]
    lines += [f"{k * dt:.12e},0.0,0.0,{v - INTERF_BIAS:.12e},0.0" for k, v in enumerate(y)]
    return "\n".join(lines) + "\n"


def _onset_index(res) -> int:
    assert res.focus is not None
    return int(np.argmin(np.abs(res.trace.t - res.focus.time)))


@pytest.mark.parametrize("ramp_start,expected", [(4997, 5000), (5000, 5003), (4990, 4993)])
def test_step_focus_through_pipeline(ramp_start: int, expected: int) -> None:
    """Parse, smooth, baseline-correct and locate a 10,000-row step.

    The onset is the first sample whose smoothed value drops 15% of the step
    amplitude below the baseline. On a 20-sample ramp that is 3 samples after
    the ramp begins, so a ramp starting at 4997 is reported at 5000 and one
    starting at 5000 is reported at 5003.
    """
    cfg = AnalysisConfig(start_line_index=0, end_line_index=10_000)
    res = process_text(_step_csv(ramp_start), cfg)
    assert res.n_samples == 10_000

    onset = _onset_index(res)
    assert abs(onset - expected) <= 1
    # 2% of 10,000 samples on each side of the onset.
    t = res.trace.t
    assert res.focus.window == pytest.approx(t[onset + 200] - t[onset - 200])

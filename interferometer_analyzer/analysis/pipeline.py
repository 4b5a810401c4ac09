"""Full trace pipeline: smooth -> baseline -> zero crossings -> local derivative -> intersections -> focus.

Every stage is a pure function of its inputs; the only shared state is the
coefficient cache in :mod:`~interferometer_analyzer.analysis.savgol`. Each call
builds a fresh :class:`~interferometer_analyzer.models.results.PipelineResult`.

Functions
---------
process
    Run all stages on a parsed Trace.
process_text
    Parse scope CSV text, then :func:`process`.
process_file
    Read a scope CSV file, then :func:`process` (raises OSError if unreadable).
recompute_intersections
    Intersections of the strain and corrected interferometer series after
    vertical offsets, with the threshold of the result's configuration.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from interferometer_analyzer.analysis.baseline import remove_baseline
from interferometer_analyzer.analysis.jump_edge import find_largest_jump_start
from interferometer_analyzer.analysis.linalg import DegenerateMatrixError
from interferometer_analyzer.analysis.roots import (
    filter_close_points,
    find_intersections,
    find_zero_crossings,
)
from interferometer_analyzer.analysis.savgol import (
    local_derivative,
    savgol_coefficients,
    savgol_smooth,
    window_mask,
)
from interferometer_analyzer.ingest.readers_csv import parse_trace_text, read_trace_file
from interferometer_analyzer.models.config import AnalysisConfig
from interferometer_analyzer.models.frames import Trace
from interferometer_analyzer.models.results import PipelineResult, RootPoint


# Relative spread of dt above which the uniform-spacing derivative is flagged.
_DT_UNIFORM_REL_TOL = 0.01


def _spacing_warning(t: np.ndarray) -> Optional[str]:
    if t.size < 3:
        return None
    dt = np.diff(t)
    dt0 = float(dt[0])
    if not np.isfinite(dt0) or dt0 <= 0:
        return f"first sample spacing dt={dt0:.6g} is not positive; derivative may be zero"
    dev = float(np.max(np.abs(dt - dt0))) / dt0
    if dev > _DT_UNIFORM_REL_TOL:
        return (
            f"non-uniform sampling: derivative assumes dt=t[1]-t[0]={dt0:.6g} s, "
            f"max relative deviation {dev:.3g}"
        )
    return None


def process(trace: Trace, config: Optional[AnalysisConfig] = None) -> PipelineResult:
    """Run the full pipeline on ``trace``.

    Numerical edge cases never raise: an empty trace yields empty outputs, a
    degenerate least-squares matrix yields a pass-through smoothing and a zero
    derivative. Diagnostics are collected in ``PipelineResult.warnings``.
    """
    raw_cfg = config or AnalysisConfig()
    warnings: List[str] = list(trace.warnings)
    warnings += [f"config normalized: {s}" for s in raw_cfg.normalization_notes()]
    cfg = raw_cfg.normalized()

    window = cfg.smoothing_window_size
    order = cfg.polynomial_order

    try:
        savgol_coefficients(window, order)
    except DegenerateMatrixError as e:
        warnings.append(f"degenerate normal matrix for window={window}, order={order}: {e}; "
                        "smoothing is pass-through and derivative is zero")

    t = trace.t
    strain = trace.strain

    interf_smoothed = savgol_smooth(trace.interf, window, order)
    interf_corrected = remove_baseline(interf_smoothed, cfg.baseline_sample_count)

    crossings = filter_close_points(find_zero_crossings(t, interf_corrected), cfg.root_min_separation_s)

    mask = window_mask(t, [p.time for p in crossings], cfg.derivative_window_s)
    spacing = _spacing_warning(t) if mask.any() else None
    if spacing:
        warnings.append(spacing)
    derivative = local_derivative(t, interf_corrected, mask, window, order)

    intersections = find_intersections(
        t,
        strain,
        interf_corrected,
        threshold=cfg.intersection_amplitude_threshold,
    )

    focus = find_largest_jump_start(t, interf_corrected)
    if trace.n_samples and focus is None:
        warnings.append("no dominant transient resolved (focus hint unavailable)")

    return PipelineResult(
        trace=trace,
        config=cfg,
        interf_smoothed=interf_smoothed,
        interf_corrected=interf_corrected,
        zero_crossings=tuple(crossings),
        derivative=derivative,
        intersections=tuple(intersections),
        focus=focus,
        warnings=tuple(warnings),
    )


def process_text(text: Union[str, bytes], config: Optional[AnalysisConfig] = None) -> PipelineResult:
    cfg = config or AnalysisConfig()
    return process(parse_trace_text(text, cfg), cfg)


def process_file(file_path: Union[str, Path], config: Optional[AnalysisConfig] = None) -> PipelineResult:
    cfg = config or AnalysisConfig()
    return process(read_trace_file(file_path, cfg), cfg)


def recompute_intersections(
    result: PipelineResult,
    *,
    strain_offset: float = 0.0,
    interf_offset: float = 0.0,
    threshold: Optional[float] = None,
) -> Tuple[RootPoint, ...]:
    """Intersections after shifting the strain and/or corrected interferometer series vertically."""
    thr = result.config.intersection_amplitude_threshold if threshold is None else float(threshold)
    pts = find_intersections(
        result.trace.t,
        result.trace.strain,
        result.interf_corrected,
        threshold=thr,
        a_offset=strain_offset,
        b_offset=interf_offset,
    )
    return tuple(pts)


def with_offsets(
    result: PipelineResult,
    *,
    strain_offset: float = 0.0,
    interf_offset: float = 0.0,
) -> PipelineResult:
    """Copy of ``result`` whose ``intersections`` are recomputed for the given offsets."""
    pts = recompute_intersections(result, strain_offset=strain_offset, interf_offset=interf_offset)
    return replace(result, intersections=pts)

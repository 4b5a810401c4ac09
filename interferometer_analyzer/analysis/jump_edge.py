"""Heuristic locator of the dominant transient edge in a signal.

The detector looks for a downward jump first: after a light SG(11, 2)
smoothing, the baseline is the mean of the leading samples and the onset is
the first sample that has dropped by 15% of the total drop below the
baseline. When the signal never drops below its baseline, the onset is found
from the steepest slope instead, walking back to where the slope is still
above 35% of its peak.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from interferometer_analyzer.analysis.savgol import savgol_smooth
from interferometer_analyzer.models.results import FocusHint


EDGE_SMOOTH_WINDOW = 11
EDGE_SMOOTH_ORDER = 2
DROP_FRACTION = 0.15
SLOPE_ONSET_FRACTION = 0.35
MIN_DT_S = 1e-12
MIN_FOCUS_WINDOW_S = 1e-6


def find_jump_by_derivative(t: Sequence[float], y: Sequence[float]) -> Optional[int]:
    """Index of the onset of the steepest segment of ``y``.

    Slopes are ``(y[i+1] - y[i]) / max(t[i+1] - t[i], 1e-12)``. Starting from
    the slope with the largest magnitude, walk backwards while the previous
    slope has the same sign and at least 35% of the peak magnitude. A zero
    peak slope counts as positive. The returned value indexes the slope array,
    i.e. the first sample of the onset segment. None if fewer than 2 samples.
    """
    t = np.asarray(t, dtype=float)
    y = np.asarray(y, dtype=float)
    if y.size < 2:
        return None

    dt = np.maximum(np.diff(t), MIN_DT_S)
    slopes = np.diff(y) / dt

    max_idx = int(np.argmax(np.abs(slopes)))
    max_slope = float(slopes[max_idx])
    sign = np.sign(max_slope) or 1.0
    start_threshold = abs(max_slope) * SLOPE_ONSET_FRACTION

    start = max_idx
    while start > 0:
        prev = slopes[start - 1]
        if np.sign(prev) != sign or abs(prev) < start_threshold:
            break
        start -= 1
    return start


def find_largest_jump_start(t: Sequence[float], y: Sequence[float]) -> Optional[FocusHint]:
    """Locate the dominant transient of ``y`` and return its onset and a view width.

    Returns None if the inputs have different lengths or fewer than 3 samples.
    The window spans ``max(20, 2% of n)`` samples on each side of the onset
    (clipped to the trace), or ``1e-6`` if that time span is not positive.
    """
    t = np.asarray(t, dtype=float)
    y = np.asarray(y, dtype=float)
    if t.ndim != 1 or y.ndim != 1 or t.size != y.size or t.size < 3:
        return None

    s = savgol_smooth(y, EDGE_SMOOTH_WINDOW, EDGE_SMOOTH_ORDER)
    n = s.size

    head = min(n, max(20, int(n * 0.05)))
    baseline = float(np.mean(s[:head]))
    min_val = min(baseline, float(np.min(s)))
    amplitude = baseline - min_val

    start: Optional[int] = None
    if amplitude > 0:
        below = np.flatnonzero(s <= baseline - amplitude * DROP_FRACTION)
        if below.size:
            start = int(below[0])

    if start is None:
        start = find_jump_by_derivative(t, s)
    if start is None:
        return None

    w = max(20, int(n * 0.02))
    left = max(0, start - w)
    right = min(n - 1, start + w)
    span = float(t[right] - t[left])
    window = span if span > 0 else MIN_FOCUS_WINDOW_S
    return FocusHint(time=float(t[start]), window=window)

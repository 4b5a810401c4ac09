"""Zero-crossing and intersection finding with linear interpolation.

Functions
---------
find_zero_crossings
    Strict sign changes of one sequence (``y[i-1] * y[i] < 0``).
filter_close_points
    Iterative left-to-right de-duplication by minimum time separation.
find_intersections
    Crossings of two sequences whose interpolated amplitude is near zero.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from interferometer_analyzer.models.results import RootPoint


MAX_FILTER_PASSES = 10


def _check_same_length(*arrays: np.ndarray) -> int:
    if arrays[0].ndim != 1:
        raise ValueError(f"Expected 1D array, got shape {arrays[0].shape}")
    n = arrays[0].shape[0]
    for i, a in enumerate(arrays[1:], start=1):
        if a.ndim != 1 or a.shape[0] != n:
            raise ValueError(f"Array {i} length mismatch: expected {n}, got shape {a.shape}")
    return n


def find_zero_crossings(t: Sequence[float], y: Sequence[float]) -> List[RootPoint]:
    """Interpolated times where ``y`` changes sign strictly between adjacent samples.

    Samples that are exactly zero break a crossing (``0 * y < 0`` is false),
    so a sequence touching zero on a sample reports nothing at that point.
    """
    t = np.asarray(t, dtype=float)
    y = np.asarray(y, dtype=float)
    n = _check_same_length(t, y)
    if n < 2:
        return []

    y1, y2 = y[:-1], y[1:]
    hits = np.flatnonzero(y1 * y2 < 0)
    x1, x2 = t[hits], t[hits + 1]
    tz = x1 - y1[hits] * (x2 - x1) / (y2[hits] - y1[hits])
    return [RootPoint(time=float(tt), value=0.0) for tt in tz]


def _filter_pass(points: List[RootPoint], min_distance: float) -> List[RootPoint]:
    kept = [points[0]]
    for p in points[1:]:
        if p.time - kept[-1].time >= min_distance:
            kept.append(p)
    return kept


def filter_close_points(points: Sequence[RootPoint], min_distance: float = 100e-9) -> List[RootPoint]:
    """Drop points closer than ``min_distance`` to the previously kept point.

    Sweeps are repeated until the list stops shrinking, at most
    :data:`MAX_FILTER_PASSES` times. The result is a fixed point of the sweep,
    so applying the filter again returns the same list.
    """
    out = list(points)
    if len(out) <= 1:
        return out
    for _ in range(MAX_FILTER_PASSES):
        nxt = _filter_pass(out, float(min_distance))
        if len(nxt) == len(out):
            break
        out = nxt
    return out


def find_intersections(
    t: Sequence[float],
    a: Sequence[float],
    b: Sequence[float],
    *,
    threshold: float = 0.02,
    a_offset: float = 0.0,
    b_offset: float = 0.0,
) -> List[RootPoint]:
    """Crossings of ``a + a_offset`` and ``b + b_offset`` with near-zero amplitude.

    For ``d = a - b`` a crossing between samples ``i-1`` and ``i`` requires
    ``(d[i-1] <= 0 and d[i] > 0) or (d[i-1] >= 0 and d[i] < 0)``. The time is
    linearly interpolated at ``d = 0``; the value is the mean of both series
    interpolated at that time. Crossings with ``|value| > threshold`` are dropped.
    Pairs with ``d[i] == d[i-1]`` are skipped.
    """
    t = np.asarray(t, dtype=float)
    a = np.asarray(a, dtype=float) + float(a_offset)
    b = np.asarray(b, dtype=float) + float(b_offset)
    n = _check_same_length(t, a, b)
    if n < 2:
        return []

    d = a - b
    d0, d1 = d[:-1], d[1:]
    rising = (d0 <= 0) & (d1 > 0)
    falling = (d0 >= 0) & (d1 < 0)
    delta = d1 - d0
    hits = np.flatnonzero((rising | falling) & (delta != 0))

    out: List[RootPoint] = []
    for i in hits:
        ratio = -d0[i] / delta[i]
        time = t[i] + ratio * (t[i + 1] - t[i])
        va = a[i] + ratio * (a[i + 1] - a[i])
        vb = b[i] + ratio * (b[i + 1] - b[i])
        value = (va + vb) / 2.0
        if abs(value) <= threshold:
            out.append(RootPoint(time=float(time), value=float(value)))
    return out


def points_as_arrays(points: Sequence[RootPoint]) -> Tuple[np.ndarray, np.ndarray]:
    """Split RootPoints into ``(times, values)`` arrays."""
    times = np.array([p.time for p in points], dtype=float)
    values = np.array([p.value for p in points], dtype=float)
    return times, values

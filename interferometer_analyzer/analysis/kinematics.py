from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from interferometer_analyzer.analysis.roots import points_as_arrays
from interferometer_analyzer.models.results import RootPoint


def velocity_at_points(
    t: Sequence[float],
    derivative: Sequence[float],
    points: Sequence[RootPoint],
) -> pd.DataFrame:
    """Sample the local derivative at each point and integrate it over the point times.

    Points are visited in order with a forward-only sample cursor: for each
    point the cursor advances while ``t[idx] < time`` (never past the last
    sample) and the velocity is ``derivative[idx]``. Displacement is the
    running trapezoid sum of velocity over consecutive point times, 0 at the
    first point.

    Returns
    -------
    DataFrame with columns ``time``, ``velocity``, ``displacement`` (one row per point).
    """
    t = np.asarray(t, dtype=float)
    d = np.asarray(derivative, dtype=float)
    if t.shape != d.shape:
        raise ValueError(f"t and derivative must have the same shape, got {t.shape} and {d.shape}")

    times, _ = points_as_arrays(points)
    m = times.size
    velocity = np.zeros(m, dtype=float)
    displacement = np.zeros(m, dtype=float)
    if m == 0 or t.size == 0:
        return pd.DataFrame({"time": times, "velocity": velocity, "displacement": displacement})

    idx = 0
    disp = 0.0
    for k in range(m):
        while idx < t.size - 1 and t[idx] < times[k]:
            idx += 1
        velocity[k] = d[idx]
        if k > 0:
            disp += 0.5 * (velocity[k] + velocity[k - 1]) * (times[k] - times[k - 1])
        displacement[k] = disp

    return pd.DataFrame({"time": times, "velocity": velocity, "displacement": displacement})

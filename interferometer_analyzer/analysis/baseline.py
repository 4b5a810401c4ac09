from __future__ import annotations

from typing import Sequence

import numpy as np


def remove_baseline(x: Sequence[float], n_samples: int = 2000) -> np.ndarray:
    """Subtract the mean of the first ``min(n_samples, len(x))`` samples from every sample.

    ``n_samples < 1`` is treated as 1. Empty input returns an empty array.
    """
    x = np.asarray(x, dtype=float)
    if x.size == 0:
        return np.zeros(0, dtype=float)
    count = min(x.size, max(1, int(n_samples)))
    return x - float(np.mean(x[:count]))

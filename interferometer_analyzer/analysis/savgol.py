"""Savitzky-Golay smoothing and differentiation.

Coefficients are derived from an explicit least-squares fit over a symmetric
window (see :mod:`~interferometer_analyzer.analysis.linalg`) and applied as a
sliding dot product with edge clamping: indices outside ``[0, n-1]`` are
replaced by the nearest edge sample, so the output always has the input length.

Functions
---------
savgol_coefficients
    Smoothing (row 0) and first-derivative (row 1) coefficient vectors, memoized.
apply_coefficients
    Symmetric sliding dot product with edge clamping.
savgol_smooth
    Smoothed copy of a sequence (pass-through on a degenerate normal matrix).
savgol_derivative
    First derivative assuming uniform spacing ``t[1] - t[0]`` (zeros on failure).
window_mask
    Boolean mask of samples within a half-width of any center time.
local_derivative
    Derivative evaluated on a masked sub-sequence and scattered back.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np

from interferometer_analyzer.analysis.linalg import (
    DegenerateMatrixError,
    gauss_jordan_inverse,
    matmul,
    transpose,
)
from interferometer_analyzer.models.config import normalize_window


@dataclass(frozen=True)
class SavgolCoefficients:
    """Convolution coefficients for one ``(window_size, polynomial_order)`` pair.

    Attributes
    ----------
    smooth:
        Row 0 of ``(AᵀA)⁻¹Aᵀ``, shape ``(window_size,)``. Sums to 1.
    derivative:
        Row 1 of ``(AᵀA)⁻¹Aᵀ``, shape ``(window_size,)``. Divide the filtered
        output by the sample spacing to get a time derivative.
    """

    window_size: int
    polynomial_order: int
    smooth: np.ndarray
    derivative: np.ndarray

    @property
    def half(self) -> int:
        return (self.window_size - 1) // 2


_CACHE: Dict[Tuple[int, int], SavgolCoefficients] = {}
_CACHE_LOCK = threading.Lock()


def design_matrix(window_size: int, polynomial_order: int) -> np.ndarray:
    """``A[r, p] = i**p`` with ``i = r - half`` for ``r`` in ``[0, window_size)``."""
    half = (int(window_size) - 1) // 2
    offsets = np.arange(-half, half + 1, dtype=float)
    powers = np.arange(int(polynomial_order) + 1)
    return offsets[:, None] ** powers[None, :]


def _compute_coefficients(window_size: int, polynomial_order: int) -> SavgolCoefficients:
    A = design_matrix(window_size, polynomial_order)
    At = transpose(A)
    inv_AtA = gauss_jordan_inverse(matmul(At, A))
    pinv = matmul(inv_AtA, At)

    smooth = pinv[0].copy()
    deriv = pinv[1].copy()
    smooth.setflags(write=False)
    deriv.setflags(write=False)
    return SavgolCoefficients(
        window_size=window_size,
        polynomial_order=polynomial_order,
        smooth=smooth,
        derivative=deriv,
    )


def savgol_coefficients(window_size: int, polynomial_order: int) -> SavgolCoefficients:
    """Return (cached) coefficients after normalizing the window/order pair.

    Raises
    ------
    DegenerateMatrixError
        If the normal matrix ``AᵀA`` is numerically singular. Failures are not cached.
    """
    key = normalize_window(window_size, polynomial_order)
    with _CACHE_LOCK:
        hit = _CACHE.get(key)
    if hit is not None:
        return hit

    # Computed outside the lock; a concurrent duplicate computation is harmless.
    coeffs = _compute_coefficients(*key)
    with _CACHE_LOCK:
        return _CACHE.setdefault(key, coeffs)


def clear_coefficient_cache() -> None:
    with _CACHE_LOCK:
        _CACHE.clear()


def apply_coefficients(x: Sequence[float], coeff: Sequence[float]) -> np.ndarray:
    """Sliding dot product ``out[i] = sum_j x[clamp(i+j)] * coeff[j+half]``.

    ``coeff`` must have odd length. Returns an array with the length of ``x``.
    """
    x = np.asarray(x, dtype=float)
    c = np.asarray(coeff, dtype=float)
    if x.ndim != 1 or c.ndim != 1:
        raise ValueError("x and coeff must be 1D")
    if c.size % 2 != 1:
        raise ValueError(f"coefficient vector must have odd length, got {c.size}")
    if x.size == 0:
        return np.zeros(0, dtype=float)

    half = c.size // 2
    padded = np.pad(x, half, mode="edge")
    return np.correlate(padded, c, mode="valid")


def savgol_smooth(x: Sequence[float], window_size: int = 31, polynomial_order: int = 3) -> np.ndarray:
    """Smoothed copy of ``x``. On a degenerate normal matrix the input is returned unchanged."""
    x = np.asarray(x, dtype=float)
    if x.size == 0:
        return np.zeros(0, dtype=float)
    try:
        coeffs = savgol_coefficients(window_size, polynomial_order)
    except DegenerateMatrixError:
        return x.copy()
    return apply_coefficients(x, coeffs.smooth)


def savgol_derivative(
    t: Sequence[float],
    x: Sequence[float],
    window_size: int = 31,
    polynomial_order: int = 3,
) -> np.ndarray:
    """First derivative ``dx/dt`` from the SG derivative coefficients.

    Spacing is taken as ``t[1] - t[0]`` (uniform sampling is assumed). Returns
    zeros when there are fewer than 3 samples, when the spacing is not a
    positive finite number, or when the normal matrix is degenerate.
    """
    t = np.asarray(t, dtype=float)
    x = np.asarray(x, dtype=float)
    if t.shape != x.shape:
        raise ValueError(f"t and x must have the same shape, got {t.shape} and {x.shape}")

    n = x.size
    zeros = np.zeros(n, dtype=float)
    if n < 3:
        return zeros

    dt = float(t[1] - t[0])
    if not np.isfinite(dt) or dt <= 0.0:
        return zeros
    try:
        coeffs = savgol_coefficients(window_size, polynomial_order)
    except DegenerateMatrixError:
        return zeros
    return apply_coefficients(x, coeffs.derivative) / dt


def window_mask(t: Sequence[float], centers: Sequence[float], half_width: float) -> np.ndarray:
    """True for samples with ``c - half_width <= t <= c + half_width`` for any center ``c``."""
    t = np.asarray(t, dtype=float)
    mask = np.zeros(t.shape, dtype=bool)
    w = float(half_width)
    for c in centers:
        mask |= (t >= c - w) & (t <= c + w)
    return mask


def local_derivative(
    t: Sequence[float],
    x: Sequence[float],
    mask: np.ndarray,
    window_size: int = 31,
    polynomial_order: int = 3,
) -> np.ndarray:
    """Derivative evaluated only on the masked samples.

    The masked samples are gathered into a shorter sequence (possibly joining
    disjoint windows end to end), differentiated with :func:`savgol_derivative`
    and scattered back to their original positions. All other positions are
    zero. Nothing is evaluated unless more than 3 samples are selected.
    """
    t = np.asarray(t, dtype=float)
    x = np.asarray(x, dtype=float)
    mask = np.asarray(mask, dtype=bool)
    if not (t.shape == x.shape == mask.shape):
        raise ValueError(f"t, x and mask must have the same shape, got {t.shape}, {x.shape}, {mask.shape}")

    out = np.zeros(x.shape, dtype=float)
    idx = np.flatnonzero(mask)
    if idx.size <= 3:
        return out
    out[idx] = savgol_derivative(t[idx], x[idx], window_size, polynomial_order)
    return out

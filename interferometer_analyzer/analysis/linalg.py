"""Small dense linear-algebra helpers for the least-squares filter kernel.

The helpers are generic in matrix dimensions. The inversion is an explicit
Gauss-Jordan elimination with partial pivoting so that a numerically singular
normal matrix is reported as :class:`DegenerateMatrixError` instead of
producing a garbage inverse.
"""

from __future__ import annotations

import numpy as np


PIVOT_EPS = 1e-15


class DegenerateMatrixError(ValueError):
    """Raised when a pivot magnitude falls below :data:`PIVOT_EPS`."""


def _as_2d(m: np.ndarray, name: str) -> np.ndarray:
    a = np.asarray(m, dtype=float)
    if a.ndim != 2:
        raise ValueError(f"{name} must be 2D, got shape {a.shape}")
    return a


def transpose(m: np.ndarray) -> np.ndarray:
    return _as_2d(m, "m").T.copy()


def matmul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    a = _as_2d(a, "a")
    b = _as_2d(b, "b")
    if a.shape[1] != b.shape[0]:
        raise ValueError(f"shape mismatch: {a.shape} @ {b.shape}")
    return a @ b


def gauss_jordan_inverse(m: np.ndarray, *, eps: float = PIVOT_EPS) -> np.ndarray:
    """Invert a square matrix by Gauss-Jordan elimination with partial pivoting.

    At step ``i`` the row (at or below ``i``) with the largest ``|a[k, i]|`` is
    swapped into place; if that magnitude is below ``eps`` the matrix is
    considered singular.

    Raises
    ------
    ValueError
        If ``m`` is not square.
    DegenerateMatrixError
        If a pivot is smaller than ``eps`` in magnitude.
    """
    a = _as_2d(m, "m")
    n, n2 = a.shape
    if n != n2:
        raise ValueError(f"matrix must be square, got shape {a.shape}")

    aug = np.hstack([a, np.eye(n)])
    for i in range(n):
        p = i + int(np.argmax(np.abs(aug[i:, i])))
        if abs(aug[p, i]) < eps:
            raise DegenerateMatrixError(f"pivot {i} magnitude {abs(aug[p, i]):.3g} < {eps:g}")
        if p != i:
            aug[[i, p]] = aug[[p, i]]
        aug[i] /= aug[i, i]
        for k in range(n):
            if k == i:
                continue
            aug[k] -= aug[k, i] * aug[i]
    return aug[:, n:]

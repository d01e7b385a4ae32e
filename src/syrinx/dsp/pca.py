"""Three-axis PCA by fixed-round power iteration.

This is an approximation: each axis gets exactly `n_iter` multiply/normalize
rounds with no convergence check, so the result is deterministic and bounded
in cost but not an exact eigendecomposition.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .config import DEFAULT_POWER_ITERATIONS
from .errors import DimensionMismatchError

FloatArray = npt.NDArray[np.float64]

N_COMPONENTS = 3
NORM_FLOOR = 1e-6
STD_FLOOR = 1e-6


def _normalize(v: FloatArray) -> FloatArray:
    # a (near) zero vector is returned unchanged
    norm = float(np.linalg.norm(v))
    if norm > NORM_FLOOR:
        return v / norm
    return v


def _orthogonalize(v: FloatArray, axes: list[FloatArray]) -> FloatArray:
    for axis in axes:
        v = v - np.dot(v, axis) * axis
    return v


def covariance(centered: npt.ArrayLike) -> FloatArray:
    """``X^T X / max(1, T - 1)`` for already-centered data."""
    x = np.asarray(centered, dtype=np.float64)
    scale = 1.0 / max(1, x.shape[0] - 1)
    return (x.T @ x) * scale


def principal_axes(
    cov: npt.ArrayLike,
    k: int = N_COMPONENTS,
    n_iter: int = DEFAULT_POWER_ITERATIONS,
) -> FloatArray:
    """Top-`k` eigenvector estimates of a symmetric matrix, shape (k, F).

    Axis p starts from a one-hot seed at index ``p % F``, is orthogonalized
    against the axes already found, then refined by `n_iter` rounds of
    ``v <- normalize(C v)`` with re-orthogonalization after each round.
    """
    c = np.asarray(cov, dtype=np.float64)
    if c.ndim != 2 or c.shape[0] != c.shape[1]:
        raise DimensionMismatchError(f"covariance must be square, got shape {c.shape}")
    n = c.shape[0]
    axes: list[FloatArray] = []
    for p in range(k):
        v = np.zeros(n, dtype=np.float64)
        v[p % n] = 1.0
        v = _normalize(_orthogonalize(v, axes))
        for _ in range(n_iter):
            v = _normalize(c @ v)
            v = _orthogonalize(v, axes)
        axes.append(v)
    return np.stack(axes)


def zscore_columns(points: npt.ArrayLike) -> FloatArray:
    """Z-score each column; columns with std <= STD_FLOOR are left untouched."""
    out = np.array(points, dtype=np.float64)
    if out.shape[0] == 0:
        return out
    mean = out.mean(axis=0)
    std = out.std(axis=0)
    for j in range(out.shape[1]):
        if std[j] > STD_FLOOR:
            out[:, j] = (out[:, j] - mean[j]) / std[j]
    return out


def compute_pca_3d(
    features: npt.ArrayLike,
    n_iter: int = DEFAULT_POWER_ITERATIONS,
) -> FloatArray:
    """Reduce a (T, F) feature matrix to (T, 3) z-scored coordinates.

    T = 0 gives an empty (0, 3) result. T = 1 centers the single frame to
    zero and returns it as one point.
    """
    x = np.asarray(features, dtype=np.float64)
    if x.size == 0:
        return np.zeros((0, N_COMPONENTS), dtype=np.float64)
    if x.ndim != 2:
        raise DimensionMismatchError(f"features must be 2-D (frames, features), got shape {x.shape}")

    centered = x - x.mean(axis=0)
    axes = principal_axes(covariance(centered), N_COMPONENTS, n_iter)
    projected = centered @ axes.T
    return zscore_columns(projected)

"""Tapering windows for short-time analysis frames."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .errors import ensure_same_length

FloatArray = npt.NDArray[np.float64]


def hann_window(size: int) -> FloatArray:
    """Symmetric Hann window ``w[i] = 0.5 * (1 - cos(2*pi*i / (size - 1)))``.

    A single-sample window is ``[1.0]``, matching ``np.hanning(1)``.
    """
    if size < 1:
        raise ValueError(f"window size must be >= 1, got {size}")
    if size == 1:
        return np.ones(1, dtype=np.float64)
    i = np.arange(size, dtype=np.float64)
    return 0.5 * (1.0 - np.cos(2.0 * np.pi * i / (size - 1)))


def apply_window(frame: npt.ArrayLike, window: npt.ArrayLike) -> FloatArray:
    """Multiply a frame by a window element-wise.

    Raises:
        DimensionMismatchError: If frame and window lengths differ.
    """
    x = np.asarray(frame, dtype=np.float64)
    w = np.asarray(window, dtype=np.float64)
    ensure_same_length(x, w, what="frame and window")
    return x * w

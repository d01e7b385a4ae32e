"""Cepstral features: mel filterbank -> power -> log10 -> orthonormal DCT-II."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .config import DEFAULT_CONFIG
from .mel import MelFilterbank
from .spectrogram import Spectrogram

FloatArray = npt.NDArray[np.float64]

LOG_EPSILON = 1e-10


def dct_basis(n: int, count: int) -> FloatArray:
    """Orthonormal DCT-II basis restricted to the first `count` outputs, shape (count, n)."""
    if n <= 0:
        raise ValueError(f"n must be positive, got {n}")
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")
    k = np.arange(count, dtype=np.float64)[:, None]
    i = np.arange(n, dtype=np.float64)[None, :]
    basis = np.cos(np.pi * k * (i + 0.5) / n)
    basis[0] *= 1.0 / np.sqrt(n)
    basis[1:] *= np.sqrt(2.0 / n)
    return basis


def dct_ii(x: npt.ArrayLike, count: int) -> FloatArray:
    """First `count` orthonormal DCT-II coefficients of a 1-D signal."""
    v = np.asarray(x, dtype=np.float64)
    if v.ndim != 1:
        raise ValueError(f"x must be 1-D, got shape {v.shape}")
    return dct_basis(v.shape[0], count) @ v


def log_mel_power(mel_magnitudes: npt.ArrayLike) -> FloatArray:
    """``log10(mel^2 + LOG_EPSILON)``; finite even for all-zero input."""
    mel = np.asarray(mel_magnitudes, dtype=np.float64)
    return np.log10(np.square(mel) + LOG_EPSILON)


def compute_mfcc(
    spectrogram: Spectrogram,
    filterbank: MelFilterbank,
    mfcc_count: int = DEFAULT_CONFIG.mfcc_count,
) -> FloatArray:
    """Cepstral coefficients for every spectrogram frame.

    Args:
        spectrogram: Magnitude spectrogram.
        filterbank: Bank built for the spectrogram's sample rate and FFT size.
        mfcc_count: Coefficients kept per frame, at most ``filterbank.mel_bins``.

    Returns:
        Feature matrix of shape (n_frames, mfcc_count).

    Raises:
        DimensionMismatchError: If the spectrogram bin count does not match
            the filterbank.
    """
    n_mel = filterbank.mel_bins
    if not 1 <= mfcc_count <= n_mel:
        raise ValueError(f"mfcc_count must be in [1, {n_mel}], got {mfcc_count}")

    mel = filterbank.apply_frames(spectrogram.magnitudes)
    log_mel = log_mel_power(mel)
    return log_mel @ dct_basis(n_mel, mfcc_count).T

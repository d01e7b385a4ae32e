"""Triangular mel filterbank.

The bank is an immutable value: build it once per (sample rate, FFT size,
band) and share it across all frames of a run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import librosa
import numpy as np
import numpy.typing as npt

from .config import DEFAULT_CONFIG, DspConfig
from .errors import DimensionMismatchError
from .spectrogram import Spectrogram

logger = logging.getLogger(__name__)

FloatArray = npt.NDArray[np.float64]


def hz_to_mel(hz: npt.ArrayLike) -> FloatArray:
    """HTK mel scale: ``2595 * log10(1 + hz / 700)``."""
    return np.asarray(librosa.hz_to_mel(np.asarray(hz, dtype=np.float64), htk=True), dtype=np.float64)


def mel_to_hz(mel: npt.ArrayLike) -> FloatArray:
    """Inverse of `hz_to_mel`: ``700 * (10 ** (mel / 2595) - 1)``."""
    return np.asarray(librosa.mel_to_hz(np.asarray(mel, dtype=np.float64), htk=True), dtype=np.float64)


def _readonly(a: FloatArray) -> FloatArray:
    a.flags.writeable = False
    return a


@dataclass(frozen=True, slots=True)
class MelFilter:
    """One triangular filter over linear-frequency bins."""

    weights: FloatArray
    left_hz: float
    center_hz: float
    right_hz: float

    @property
    def support(self) -> npt.NDArray[np.intp]:
        """Indices of bins with non-zero weight."""
        return np.flatnonzero(self.weights)


def _triangle(freqs: FloatArray, left: float, center: float, right: float) -> FloatArray:
    weights = np.zeros_like(freqs)
    if center > left:
        rising = (freqs >= left) & (freqs <= center)
        weights[rising] = (freqs[rising] - left) / (center - left)
    if right > center:
        falling = (freqs > center) & (freqs <= right)
        weights[falling] = (right - freqs[falling]) / (right - center)
    return weights


class MelFilterbank:
    """Immutable bank of `mel_bins` triangular filters.

    Filter m rises linearly from edge m to a peak of 1 at edge m+1 and falls
    back to 0 at edge m+2, where the ``mel_bins + 2`` edges are equally spaced
    on the mel scale between ``f_min`` and ``min(f_max, sample_rate / 2)``.
    """

    __slots__ = ("_sample_rate", "_fft_size", "_f_min", "_f_max", "_filters", "_matrix")

    def __init__(
        self,
        sample_rate: int,
        fft_size: int,
        mel_bins: int = DEFAULT_CONFIG.mel_bins,
        f_min: float = DEFAULT_CONFIG.f_min,
        f_max: float = DEFAULT_CONFIG.f_max,
    ) -> None:
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        if fft_size <= 0:
            raise ValueError(f"fft_size must be positive, got {fft_size}")
        if mel_bins <= 0:
            raise ValueError(f"mel_bins must be positive, got {mel_bins}")

        nyquist = sample_rate / 2.0
        f_max = min(f_max, nyquist)
        if f_min >= f_max:
            logger.warning(
                "Mel band is empty (f_min=%.1f Hz >= f_max=%.1f Hz); filters will be zero",
                f_min,
                f_max,
            )

        self._sample_rate = int(sample_rate)
        self._fft_size = int(fft_size)
        self._f_min = float(f_min)
        self._f_max = float(f_max)

        n_freq_bins = fft_size // 2 + 1
        freqs = np.arange(n_freq_bins, dtype=np.float64) * (sample_rate / fft_size)
        edges = mel_to_hz(np.linspace(hz_to_mel(f_min), hz_to_mel(f_max), mel_bins + 2))

        filters = []
        for m in range(mel_bins):
            left, center, right = (float(e) for e in edges[m : m + 3])
            filters.append(
                MelFilter(
                    weights=_readonly(_triangle(freqs, left, center, right)),
                    left_hz=left,
                    center_hz=center,
                    right_hz=right,
                )
            )
        self._filters: tuple[MelFilter, ...] = tuple(filters)
        self._matrix = _readonly(np.stack([f.weights for f in filters]))

    @classmethod
    def from_config(cls, sample_rate: int, config: DspConfig | None = None) -> MelFilterbank:
        cfg = config or DEFAULT_CONFIG
        return cls(sample_rate, cfg.fft_size, cfg.mel_bins, cfg.f_min, cfg.f_max)

    @classmethod
    def for_spectrogram(cls, spectrogram: Spectrogram, config: DspConfig | None = None) -> MelFilterbank:
        """Build the bank matching a spectrogram's sample rate and FFT size."""
        cfg = config or DEFAULT_CONFIG
        return cls(spectrogram.sample_rate, spectrogram.fft_size, cfg.mel_bins, cfg.f_min, cfg.f_max)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def fft_size(self) -> int:
        return self._fft_size

    @property
    def f_min(self) -> float:
        return self._f_min

    @property
    def f_max(self) -> float:
        """Upper band edge after clipping to Nyquist."""
        return self._f_max

    @property
    def mel_bins(self) -> int:
        return len(self._filters)

    @property
    def n_freq_bins(self) -> int:
        return self._fft_size // 2 + 1

    @property
    def filters(self) -> tuple[MelFilter, ...]:
        return self._filters

    @property
    def matrix(self) -> FloatArray:
        """Read-only (mel_bins, n_freq_bins) weight matrix."""
        return self._matrix

    def __len__(self) -> int:
        return len(self._filters)

    def __repr__(self) -> str:
        return (
            f"MelFilterbank(sample_rate={self._sample_rate}, fft_size={self._fft_size}, "
            f"mel_bins={self.mel_bins}, f_min={self._f_min}, f_max={self._f_max})"
        )

    def apply(self, spectrum: npt.ArrayLike) -> FloatArray:
        """Weighted sum of one magnitude spectrum under each filter.

        Raises:
            DimensionMismatchError: If the spectrum does not have
                ``fft_size // 2 + 1`` bins.
        """
        s = np.asarray(spectrum, dtype=np.float64)
        if s.ndim != 1 or s.shape[0] != self.n_freq_bins:
            raise DimensionMismatchError(
                f"Magnitude spectrum size mismatch: expected {self.n_freq_bins}, got {s.shape}"
            )
        return self._matrix @ s

    def apply_frames(self, magnitudes: npt.ArrayLike) -> FloatArray:
        """Apply the bank to every row of a (n_frames, n_bins) matrix."""
        s = np.asarray(magnitudes, dtype=np.float64)
        if s.ndim != 2 or s.shape[1] != self.n_freq_bins:
            raise DimensionMismatchError(
                f"Magnitude spectrum size mismatch: expected (*, {self.n_freq_bins}), got {s.shape}"
            )
        return s @ self._matrix.T

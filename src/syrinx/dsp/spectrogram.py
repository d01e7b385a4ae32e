"""Short-time magnitude spectrogram (pre-emphasis -> frames -> Hann -> FFT)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from .config import DEFAULT_CONFIG, DspConfig
from .fft import compute_fft, magnitude_spectrum, next_power_of_two, one_sided
from .windowing import apply_window, hann_window

logger = logging.getLogger(__name__)

FloatArray = npt.NDArray[np.float64]

FrameProgress = Callable[[int, int], None]


@dataclass(frozen=True, slots=True)
class Spectrogram:
    """Time-major magnitude spectrogram, shape (n_frames, n_bins)."""

    magnitudes: FloatArray
    sample_rate: int
    window_size: int
    hop_size: int
    fft_size: int

    @property
    def n_frames(self) -> int:
        return int(self.magnitudes.shape[0])

    @property
    def n_bins(self) -> int:
        return int(self.magnitudes.shape[1])

    @property
    def frame_rate_hz(self) -> float:
        """Frames per second of audio."""
        return self.sample_rate / self.hop_size

    def frame_times(self) -> FloatArray:
        """Start time of each frame in seconds."""
        return np.arange(self.n_frames, dtype=np.float64) * self.hop_size / self.sample_rate

    def bin_frequencies(self) -> FloatArray:
        """Center frequency of each bin in Hz."""
        return np.arange(self.n_bins, dtype=np.float64) * self.sample_rate / self.fft_size


def pre_emphasis(x: npt.ArrayLike, coeff: float = DEFAULT_CONFIG.pre_emphasis) -> FloatArray:
    """First-order high-pass: ``y[0] = x[0]``, ``y[i] = x[i] - coeff * x[i-1]``."""
    x = np.asarray(x, dtype=np.float64)
    if x.size == 0:
        return x.copy()
    return np.concatenate((x[:1], x[1:] - coeff * x[:-1]))


def frame_count(n_samples: int, window_size: int, hop_size: int, max_frames: int) -> int:
    """Number of full frames, capped at max_frames. Zero if no full window fits."""
    if n_samples < window_size:
        return 0
    return min(max_frames, (n_samples - window_size) // hop_size + 1)


def compute_spectrogram(
    samples: npt.ArrayLike,
    sample_rate: int,
    config: DspConfig | None = None,
    *,
    on_progress: FrameProgress | None = None,
) -> Spectrogram:
    """Compute the one-sided magnitude spectrogram of a mono signal.

    Frames past `config.max_frames` are dropped; this bounds memory for long
    recordings and is not an error.

    Args:
        samples: Mono samples, nominally in [-1, 1].
        sample_rate: Sample rate in Hz.
        config: DSP parameters; defaults to `DEFAULT_CONFIG`.
        on_progress: Called as ``on_progress(done, total)`` after each frame.

    Returns:
        Spectrogram with ``config.n_bins`` bins per frame.
    """
    cfg = config or DEFAULT_CONFIG
    x = np.asarray(samples, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"samples must be 1-D, got shape {x.shape}")
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")

    emphasized = pre_emphasis(x, cfg.pre_emphasis)
    window_size, hop_size = cfg.window_size, cfg.hop_size
    fft_size = next_power_of_two(window_size)
    n_bins = fft_size // 2 + 1

    n_frames = frame_count(emphasized.size, window_size, hop_size, cfg.max_frames)
    if emphasized.size >= window_size:
        available = (emphasized.size - window_size) // hop_size + 1
        if available > n_frames:
            logger.debug("Truncating spectrogram to %d of %d frames", n_frames, available)

    window = hann_window(window_size)
    magnitudes = np.zeros((n_frames, n_bins), dtype=np.float64)
    for i in range(n_frames):
        start = i * hop_size
        frame = apply_window(emphasized[start : start + window_size], window)
        spectrum = compute_fft(frame, fft_size)
        magnitudes[i] = one_sided(magnitude_spectrum(spectrum))
        if on_progress is not None:
            on_progress(i + 1, n_frames)

    return Spectrogram(
        magnitudes=magnitudes,
        sample_rate=int(sample_rate),
        window_size=window_size,
        hop_size=hop_size,
        fft_size=fft_size,
    )

"""DSP building blocks: window, FFT, spectrogram, mel, cepstral features, PCA."""

from .config import DEFAULT_CONFIG, DspConfig
from .errors import DimensionMismatchError, ProtocolViolationError, SyrinxError
from .fft import compute_fft, magnitude_spectrum, next_power_of_two
from .mel import MelFilter, MelFilterbank, hz_to_mel, mel_to_hz
from .mfcc import compute_mfcc, dct_ii
from .pca import compute_pca_3d, principal_axes
from .spectrogram import Spectrogram, compute_spectrogram, frame_count, pre_emphasis
from .windowing import apply_window, hann_window

__all__ = [
    "DEFAULT_CONFIG",
    "DimensionMismatchError",
    "DspConfig",
    "MelFilter",
    "MelFilterbank",
    "ProtocolViolationError",
    "Spectrogram",
    "SyrinxError",
    "apply_window",
    "compute_fft",
    "compute_mfcc",
    "compute_pca_3d",
    "compute_spectrogram",
    "dct_ii",
    "frame_count",
    "hann_window",
    "hz_to_mel",
    "magnitude_spectrum",
    "mel_to_hz",
    "next_power_of_two",
    "pre_emphasis",
    "principal_axes",
]

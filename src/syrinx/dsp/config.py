"""DSP configuration defaults and the per-run `DspConfig` value object."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

from .fft import next_power_of_two

DEFAULT_WINDOW_SIZE = 2048
DEFAULT_HOP_SIZE = 512  # 75% overlap at the default window
DEFAULT_MEL_BINS = 128
DEFAULT_MFCC_COUNT = 40
DEFAULT_F_MIN_HZ = 500.0
DEFAULT_F_MAX_HZ = 12000.0  # clamped to Nyquist when the filterbank is built
DEFAULT_PRE_EMPHASIS = 0.97
DEFAULT_MAX_FRAMES = 2000
DEFAULT_POWER_ITERATIONS = 10


@dataclass(frozen=True, slots=True)
class DspConfig:
    """Parameters for one spectrogram/manifold run.

    Every field has a fixed default; callers override per run with
    `with_overrides`, which ignores ``None`` so CLI options can be passed
    straight through.
    """

    window_size: int = DEFAULT_WINDOW_SIZE
    hop_size: int = DEFAULT_HOP_SIZE
    mel_bins: int = DEFAULT_MEL_BINS
    mfcc_count: int = DEFAULT_MFCC_COUNT
    f_min: float = DEFAULT_F_MIN_HZ
    f_max: float = DEFAULT_F_MAX_HZ
    pre_emphasis: float = DEFAULT_PRE_EMPHASIS
    max_frames: int = DEFAULT_MAX_FRAMES
    power_iterations: int = DEFAULT_POWER_ITERATIONS

    def __post_init__(self) -> None:
        if self.window_size <= 0:
            raise ValueError(f"window_size must be > 0, got {self.window_size}")
        if self.hop_size <= 0:
            raise ValueError(f"hop_size must be > 0, got {self.hop_size}")
        if self.mel_bins <= 0:
            raise ValueError(f"mel_bins must be > 0, got {self.mel_bins}")
        if not 1 <= self.mfcc_count <= self.mel_bins:
            raise ValueError(
                f"mfcc_count must be in [1, mel_bins={self.mel_bins}], got {self.mfcc_count}"
            )
        if self.f_min < 0:
            raise ValueError(f"f_min must be >= 0, got {self.f_min}")
        if self.f_max <= self.f_min:
            raise ValueError(f"f_max must be > f_min, got f_min={self.f_min}, f_max={self.f_max}")
        if not 0.0 <= self.pre_emphasis < 1.0:
            raise ValueError(f"pre_emphasis must be in [0, 1), got {self.pre_emphasis}")
        if self.max_frames <= 0:
            raise ValueError(f"max_frames must be > 0, got {self.max_frames}")
        if self.power_iterations < 0:
            raise ValueError(f"power_iterations must be >= 0, got {self.power_iterations}")

    @property
    def fft_size(self) -> int:
        """Power-of-two transform length each frame is zero-padded to."""
        return next_power_of_two(self.window_size)

    @property
    def n_bins(self) -> int:
        """Number of non-negative frequency bins per spectral frame."""
        return self.fft_size // 2 + 1

    def with_overrides(self, **overrides: Any) -> DspConfig:
        """Return a copy with the given fields replaced; ``None`` values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = DspConfig()

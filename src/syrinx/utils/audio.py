"""Audio input: resolve files and load mono samples."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import librosa
import numpy as np
import numpy.typing as npt


@dataclass(frozen=True, slots=True)
class AudioSamples:
    """Immutable mono signal with its sample rate."""

    samples: npt.NDArray[np.float64]
    sample_rate: int

    def __post_init__(self) -> None:
        y = np.array(self.samples, dtype=np.float64)
        if y.ndim != 1:
            raise ValueError(f"samples must be 1-D, got shape {y.shape}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if not np.all(np.isfinite(y)):
            raise ValueError("samples contain non-finite values")
        y.flags.writeable = False
        object.__setattr__(self, "samples", y)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @property
    def duration_sec(self) -> float:
        return self.samples.size / self.sample_rate

    def __len__(self) -> int:
        return int(self.samples.size)


def resolve_audio_files(files: list[Path] | None, raw_audio_dir: Path) -> list[Path]:
    """Return list of audio paths: explicit files if given, else all .wav in raw_audio_dir."""
    if files:
        return [Path(p).resolve() for p in files]
    if not raw_audio_dir.exists():
        return []
    return sorted(raw_audio_dir.glob("*.wav"))


def track_name(audio_path: Path) -> str:
    """Stem of the audio file (no extension)."""
    return audio_path.stem


def load_audio(audio_path: Path) -> AudioSamples:
    """Load a file as mono float samples at its native sample rate."""
    y, sr = librosa.load(audio_path, sr=None, mono=True)
    return AudioSamples(samples=y, sample_rate=int(sr))

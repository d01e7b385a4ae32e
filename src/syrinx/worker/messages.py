"""Typed request/response messages exchanged with the manifold worker."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from ..dsp.config import DspConfig
from ..utils.audio import AudioSamples

FloatArray = npt.NDArray[np.float64]


def _frozen_array(values: npt.ArrayLike) -> FloatArray:
    a = np.asarray(values, dtype=np.float64)
    a.flags.writeable = False
    return a


# --- requests ---


@dataclass(frozen=True, slots=True)
class ComputeSpectrogram:
    """Compute the magnitude spectrogram only."""

    samples: npt.ArrayLike
    sample_rate: int
    config: DspConfig | None = None

    @classmethod
    def from_audio(cls, audio: AudioSamples, config: DspConfig | None = None) -> ComputeSpectrogram:
        return cls(samples=audio.samples, sample_rate=audio.sample_rate, config=config)


@dataclass(frozen=True, slots=True)
class ComputeManifold:
    """Run the full pipeline through dimensionality reduction."""

    samples: npt.ArrayLike
    sample_rate: int
    config: DspConfig | None = None

    @classmethod
    def from_audio(cls, audio: AudioSamples, config: DspConfig | None = None) -> ComputeManifold:
        return cls(samples=audio.samples, sample_rate=audio.sample_rate, config=config)


@dataclass(frozen=True, slots=True)
class Cancel:
    """Cancel the live run, if any."""


Request = ComputeSpectrogram | ComputeManifold | Cancel
COMPUTE_REQUESTS = (ComputeSpectrogram, ComputeManifold)


# --- responses ---


@dataclass(frozen=True, slots=True)
class Progress:
    run_id: int
    stage: str
    fraction: float


@dataclass(frozen=True, slots=True)
class SpectrogramResult:
    run_id: int
    magnitudes: FloatArray
    sample_rate: int
    hop_size: int
    window_size: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "magnitudes", _frozen_array(self.magnitudes))

    @property
    def n_frames(self) -> int:
        return int(self.magnitudes.shape[0])

    @property
    def n_bins(self) -> int:
        return int(self.magnitudes.shape[1])


@dataclass(frozen=True, slots=True)
class ManifoldResult:
    run_id: int
    points: FloatArray
    features: FloatArray

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", _frozen_array(self.points))
        object.__setattr__(self, "features", _frozen_array(self.features))

    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])


@dataclass(frozen=True, slots=True)
class Error:
    """Terminal failure; `run_id` is None for requests rejected at the boundary."""

    run_id: int | None
    message: str


@dataclass(frozen=True, slots=True)
class RunCancelled:
    """Terminal acknowledgement that a run ended without a result."""

    run_id: int


Response = Progress | SpectrogramResult | ManifoldResult | Error | RunCancelled
TERMINAL_RESPONSES = (SpectrogramResult, ManifoldResult, Error, RunCancelled)


def is_terminal(message: Response) -> bool:
    return isinstance(message, TERMINAL_RESPONSES)

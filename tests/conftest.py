from __future__ import annotations

import wave
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Throwaway project tree with the data/ layout the CLI expects."""
    root = tmp_path / "proj"
    (root / "data" / "datasets" / "raw" / "audio").mkdir(parents=True)
    (root / "data" / "logs" / "derived").mkdir(parents=True)
    return root


@pytest.fixture(autouse=True)
def isolated_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test inside project_root so nothing lands in the real data/ folder."""
    monkeypatch.chdir(project_root)
    monkeypatch.setattr("syrinx.cli.base.DERIVED_LOGS_DIR", project_root / "data" / "logs" / "derived")


def make_sine(freq_hz: float, sr: int, duration_sec: float, amplitude: float = 0.5) -> np.ndarray:
    """Pure sinusoid as float64 samples."""
    t = np.arange(int(sr * duration_sec), dtype=np.float64) / sr
    return amplitude * np.sin(2.0 * np.pi * freq_hz * t)


def write_wav(path: Path, samples: np.ndarray, sr: int) -> Path:
    """Write mono float samples in [-1, 1] as a 16-bit WAV so librosa can load it."""
    buf = np.clip(np.round(samples * 32767.0), -32768, 32767).astype(np.int16)
    with wave.open(str(path), "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(sr)
        w.writeframes(buf.tobytes())
    return path


@pytest.fixture
def sine_1khz() -> np.ndarray:
    """One second of a 1 kHz tone at 44.1 kHz."""
    return make_sine(1000.0, 44100, 1.0)


@pytest.fixture
def wav_factory(tmp_path: Path) -> Callable[..., Path]:
    """Create WAV files under tmp_path/audio."""
    audio_dir = tmp_path / "audio"
    audio_dir.mkdir(exist_ok=True)

    def _make(name: str, samples: np.ndarray, sr: int = 22050) -> Path:
        return write_wav(audio_dir / name, samples, sr)

    return _make

"""Pipeline for computing spectrogram summaries from raw audio files."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from ..dsp.config import DEFAULT_CONFIG, DspConfig
from ..global_config import RAW_AUDIO_DIR
from ..utils.audio import load_audio, resolve_audio_files, track_name
from ..worker import ComputeSpectrogram, ManifoldWorker, SpectrogramResult
from ._runner import ProgressCallback, run_on_worker


def _dominant_frequency_hz(result: SpectrogramResult) -> float | None:
    """Median over frames of the peak-bin frequency; None for an empty spectrogram."""
    if result.n_frames == 0:
        return None
    fft_size = (result.n_bins - 1) * 2
    peaks = np.argmax(result.magnitudes, axis=1)
    return float(np.median(peaks) * result.sample_rate / fft_size)


def run_spectrogram(
    *,
    audio_files: list[Path] | None = None,
    raw_audio_dir: Path = RAW_AUDIO_DIR,
    config: DspConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> dict:
    """Compute spectrograms for audio file(s) on the background worker.

    If audio_files is None or empty, uses all .wav files in raw_audio_dir.
    Nothing is written to disk; the returned items summarize each result.

    Returns:
        Dict with success, total, succeeded, failed, skipped, message, items, failures.
    """
    cfg = config or DEFAULT_CONFIG
    paths = resolve_audio_files(audio_files, raw_audio_dir)
    if not paths:
        return {
            "success": True,
            "total": 0,
            "succeeded": 0,
            "failed": 0,
            "skipped": 0,
            "message": "No audio files to process.",
            "items": [],
            "failures": [],
        }

    succeeded = 0
    failed = 0
    items: list[dict] = []
    failures: list[dict] = []

    with ManifoldWorker() as worker:
        for audio_path in paths:
            name = track_name(audio_path)
            if not audio_path.exists():
                failed += 1
                failures.append({"item": str(audio_path), "reason": "File not found"})
                items.append({"file": str(audio_path), "status": "failed", "detail": "File not found"})
                continue

            try:
                audio = load_audio(audio_path)
                result = run_on_worker(
                    worker,
                    ComputeSpectrogram.from_audio(audio, cfg),
                    track=name,
                    on_progress=on_progress,
                )
                succeeded += 1
                items.append({
                    "file": audio_path.name,
                    "status": "success",
                    "kind": "spectrogram",
                    "sample_rate": result.sample_rate,
                    "duration_sec": audio.duration_sec,
                    "n_frames": result.n_frames,
                    "n_bins": result.n_bins,
                    "frame_rate_hz": result.sample_rate / result.hop_size,
                    "dominant_hz": _dominant_frequency_hz(result),
                })
            except Exception as e:
                failed += 1
                failures.append({"item": str(audio_path), "reason": str(e)})
                items.append({"file": audio_path.name, "status": "failed", "detail": str(e)})

    return {
        "success": failed == 0,
        "total": len(paths),
        "succeeded": succeeded,
        "failed": failed,
        "skipped": 0,
        "message": f"Processed {len(paths)} file(s). Succeeded: {succeeded}, failed: {failed}.",
        "items": items,
        "failures": failures,
    }

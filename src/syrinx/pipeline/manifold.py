"""Pipeline for computing acoustic manifolds (3D trajectories) from raw audio files."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from ..dsp.config import DEFAULT_CONFIG, DspConfig
from ..global_config import RAW_AUDIO_DIR
from ..utils.audio import load_audio, resolve_audio_files, track_name
from ..worker import ComputeManifold, ManifoldResult, ManifoldWorker
from ._runner import ProgressCallback, run_on_worker


def _axis_ranges(result: ManifoldResult) -> list[tuple[float, float]]:
    """(min, max) of each manifold axis; empty for a zero-frame result."""
    if result.n_points == 0:
        return []
    lo = np.min(result.points, axis=0)
    hi = np.max(result.points, axis=0)
    return [(float(a), float(b)) for a, b in zip(lo, hi)]


def run_manifold(
    *,
    audio_files: list[Path] | None = None,
    raw_audio_dir: Path = RAW_AUDIO_DIR,
    config: DspConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> dict:
    """Compute the 3D acoustic manifold for audio file(s) on the background worker.

    If audio_files is None or empty, uses all .wav files in raw_audio_dir.
    Results are summarized in the returned items, not persisted.

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
                    ComputeManifold.from_audio(audio, cfg),
                    track=name,
                    on_progress=on_progress,
                )
                succeeded += 1
                items.append({
                    "file": audio_path.name,
                    "status": "success",
                    "kind": "manifold",
                    "sample_rate": audio.sample_rate,
                    "duration_sec": audio.duration_sec,
                    "n_points": result.n_points,
                    "points_shape": tuple(result.points.shape),
                    "features_shape": tuple(result.features.shape),
                    "axis_ranges": _axis_ranges(result),
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

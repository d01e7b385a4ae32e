"""Drive one request through a ManifoldWorker and wait for its terminal message."""

from __future__ import annotations

from collections.abc import Callable

from ..dsp.errors import SyrinxError
from ..worker import (
    ComputeManifold,
    ComputeSpectrogram,
    Error,
    ManifoldResult,
    ManifoldWorker,
    Progress,
    RunCancelled,
    SpectrogramResult,
)

# (track name, stage, fraction)
ProgressCallback = Callable[[str, str, float], None]

# Generous bound on silence from the worker between two messages.
RESPONSE_TIMEOUT_S = 600.0


class RunFailedError(SyrinxError):
    """The worker answered a run with an Error or a cancellation."""


def run_on_worker(
    worker: ManifoldWorker,
    request: ComputeSpectrogram | ComputeManifold,
    *,
    track: str,
    on_progress: ProgressCallback | None = None,
    timeout: float = RESPONSE_TIMEOUT_S,
) -> SpectrogramResult | ManifoldResult:
    """Send `request` and block until its result arrives.

    Raises:
        RunFailedError: If the run ends with an Error or RunCancelled response.
    """
    run_id = worker.send(request)
    if run_id is None:
        raise RunFailedError(f"Request rejected: {type(request).__name__}")
    for message in worker.iter_run(run_id, timeout=timeout):
        if isinstance(message, Progress):
            if on_progress is not None:
                on_progress(track, message.stage, message.fraction)
        elif isinstance(message, (SpectrogramResult, ManifoldResult)):
            return message
        elif isinstance(message, Error):
            raise RunFailedError(message.message)
        elif isinstance(message, RunCancelled):
            raise RunFailedError("Run was cancelled")
    raise RunFailedError(f"Run {run_id} ended without a terminal message")

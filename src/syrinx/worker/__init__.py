"""Pipeline orchestration on a background worker with message passing."""

from .messages import (
    Cancel,
    ComputeManifold,
    ComputeSpectrogram,
    Error,
    ManifoldResult,
    Progress,
    RunCancelled,
    SpectrogramResult,
    is_terminal,
)
from .orchestrator import CancellationToken, PipelineRun, PipelineState
from .worker import ManifoldWorker

__all__ = [
    "Cancel",
    "CancellationToken",
    "ComputeManifold",
    "ComputeSpectrogram",
    "Error",
    "ManifoldResult",
    "ManifoldWorker",
    "PipelineRun",
    "PipelineState",
    "Progress",
    "RunCancelled",
    "SpectrogramResult",
    "is_terminal",
]

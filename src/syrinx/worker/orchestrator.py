"""Sequential pipeline state machine for one spectrogram/manifold run.

A run moves strictly forward through its phases; each phase consumes the
complete output of the previous one:

    IDLE -> SPECTROGRAM -> FEATURES -> REDUCTION -> DONE

A spectrogram-only run goes from SPECTROGRAM straight to DONE. CANCELLED and
FAILED are terminal and reachable from any non-terminal state.

Cancellation is cooperative. The token is checked at phase boundaries and
before every progress or result emission; a numeric loop that is already
running (the frame loop, power iteration) finishes, but nothing it produces
is emitted once the token is set.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import StrEnum

from ..dsp.config import DEFAULT_CONFIG, DspConfig
from ..dsp.errors import ProtocolViolationError
from ..dsp.mel import MelFilterbank
from ..dsp.mfcc import compute_mfcc
from ..dsp.pca import compute_pca_3d
from ..dsp.spectrogram import FrameProgress, compute_spectrogram
from ..utils.audio import AudioSamples
from .messages import (
    ComputeManifold,
    ComputeSpectrogram,
    Error,
    ManifoldResult,
    Progress,
    Response,
    RunCancelled,
    SpectrogramResult,
)

logger = logging.getLogger(__name__)

STAGE_SPECTROGRAM = "Computing spectrogram"
STAGE_MEL = "Computing mel features"
STAGE_MFCC = "Computing MFCC"
STAGE_PCA = "Computing PCA"

# Run-wide progress ranges per phase for a full manifold run.
SPECTROGRAM_SPAN = (0.0, 0.6)
FEATURES_SPAN = (0.6, 0.85)
REDUCTION_SPAN = (0.85, 1.0)

# Minimum fraction between two frame-loop progress messages.
PROGRESS_STEP = 0.05

Emit = Callable[[Response], None]


class PipelineState(StrEnum):
    IDLE = "idle"
    SPECTROGRAM = "spectrogram"
    FEATURES = "features"
    REDUCTION = "reduction"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


TERMINAL_STATES = frozenset({PipelineState.DONE, PipelineState.CANCELLED, PipelineState.FAILED})

_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.SPECTROGRAM}),
    PipelineState.SPECTROGRAM: frozenset({PipelineState.FEATURES, PipelineState.DONE}),
    PipelineState.FEATURES: frozenset({PipelineState.REDUCTION}),
    PipelineState.REDUCTION: frozenset({PipelineState.DONE}),
}


class CancellationToken:
    """Thread-safe, one-way cancellation flag shared between a run and its owner."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class _Cancelled(Exception):
    """Unwinds a run at a cancellation checkpoint."""


class PipelineRun:
    """Execute one compute request, emitting progress and one terminal response."""

    def __init__(
        self,
        run_id: int,
        request: ComputeSpectrogram | ComputeManifold,
        emit: Emit,
        token: CancellationToken | None = None,
    ) -> None:
        self.run_id = run_id
        self.request = request
        self.token = token or CancellationToken()
        self._emit = emit
        self._state = PipelineState.IDLE
        self._history: list[PipelineState] = [PipelineState.IDLE]
        self._last_fraction = 0.0
        self._last_report: tuple[str, float] | None = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def history(self) -> tuple[PipelineState, ...]:
        return tuple(self._history)

    def execute(self) -> PipelineState:
        """Run to a terminal state and return it. Never raises for run failures."""
        try:
            self._checkpoint()
            if isinstance(self.request, ComputeManifold):
                self._run_manifold()
            elif isinstance(self.request, ComputeSpectrogram):
                self._run_spectrogram()
            else:
                raise ProtocolViolationError(f"Unknown message type: {type(self.request).__name__}")
        except _Cancelled:
            logger.info("Run %d cancelled during %s", self.run_id, self._state)
            self._terminate(PipelineState.CANCELLED)
            self._emit(RunCancelled(run_id=self.run_id))
        except Exception as exc:  # noqa: BLE001
            if self.token.cancelled:
                logger.info("Run %d cancelled; discarding error: %s", self.run_id, exc)
                self._terminate(PipelineState.CANCELLED)
                self._emit(RunCancelled(run_id=self.run_id))
            else:
                logger.exception("Run %d failed during %s", self.run_id, self._state)
                self._terminate(PipelineState.FAILED)
                self._emit(Error(run_id=self.run_id, message=str(exc)))
        return self._state

    # --- phases ---

    def _config(self) -> DspConfig:
        return self.request.config or DEFAULT_CONFIG

    def _audio(self) -> AudioSamples:
        return AudioSamples(samples=self.request.samples, sample_rate=self.request.sample_rate)

    def _run_spectrogram(self) -> None:
        cfg = self._config()
        audio = self._audio()
        logger.info(
            "Run %d: spectrogram for %.2fs of audio @ %d Hz", self.run_id, audio.duration_sec, audio.sample_rate
        )

        self._advance(PipelineState.SPECTROGRAM)
        self._progress(STAGE_SPECTROGRAM, 0.0)
        spectrogram = compute_spectrogram(
            audio.samples,
            audio.sample_rate,
            cfg,
            on_progress=self._frame_progress(STAGE_SPECTROGRAM, (0.0, 1.0)),
        )
        self._progress(STAGE_SPECTROGRAM, 1.0)

        self._deliver(
            SpectrogramResult(
                run_id=self.run_id,
                magnitudes=spectrogram.magnitudes,
                sample_rate=spectrogram.sample_rate,
                hop_size=spectrogram.hop_size,
                window_size=spectrogram.window_size,
            )
        )
        logger.info("Run %d: %d spectrogram frames", self.run_id, spectrogram.n_frames)

    def _run_manifold(self) -> None:
        cfg = self._config()
        audio = self._audio()
        logger.info(
            "Run %d: manifold for %.2fs of audio @ %d Hz", self.run_id, audio.duration_sec, audio.sample_rate
        )

        self._advance(PipelineState.SPECTROGRAM)
        self._progress(STAGE_SPECTROGRAM, SPECTROGRAM_SPAN[0])
        spectrogram = compute_spectrogram(
            audio.samples,
            audio.sample_rate,
            cfg,
            on_progress=self._frame_progress(STAGE_SPECTROGRAM, SPECTROGRAM_SPAN),
        )
        self._checkpoint()

        self._advance(PipelineState.FEATURES)
        self._progress(STAGE_MEL, FEATURES_SPAN[0])
        filterbank = MelFilterbank.for_spectrogram(spectrogram, cfg)
        logger.debug("Run %d: %r", self.run_id, filterbank)
        self._progress(STAGE_MFCC, (FEATURES_SPAN[0] + FEATURES_SPAN[1]) / 2)
        features = compute_mfcc(spectrogram, filterbank, cfg.mfcc_count)
        self._checkpoint()

        self._advance(PipelineState.REDUCTION)
        self._progress(STAGE_PCA, REDUCTION_SPAN[0])
        points = compute_pca_3d(features, cfg.power_iterations)
        self._progress(STAGE_PCA, REDUCTION_SPAN[1])

        self._deliver(ManifoldResult(run_id=self.run_id, points=points, features=features))
        logger.info("Run %d: %d manifold points", self.run_id, points.shape[0])

    # --- plumbing ---

    def _advance(self, new_state: PipelineState) -> None:
        allowed = _TRANSITIONS.get(self._state, frozenset())
        if new_state not in allowed:
            raise RuntimeError(f"Illegal pipeline transition {self._state} -> {new_state}")
        logger.debug("Run %d: %s -> %s", self.run_id, self._state, new_state)
        self._state = new_state
        self._history.append(new_state)

    def _terminate(self, new_state: PipelineState) -> None:
        if self._state in TERMINAL_STATES:
            return
        self._state = new_state
        self._history.append(new_state)

    def _checkpoint(self) -> None:
        if self.token.cancelled:
            raise _Cancelled

    def _progress(self, stage: str, fraction: float) -> None:
        if self.token.cancelled:
            return
        fraction = min(1.0, max(fraction, self._last_fraction))
        # a phase end is often reported by both the frame loop and the phase itself
        if self._last_report == (stage, fraction):
            return
        self._last_fraction = fraction
        self._last_report = (stage, fraction)
        self._emit(Progress(run_id=self.run_id, stage=stage, fraction=fraction))

    def _frame_progress(self, stage: str, span: tuple[float, float]) -> FrameProgress:
        lo, hi = span
        next_report = PROGRESS_STEP

        def _on_frame(done: int, total: int) -> None:
            nonlocal next_report
            local = done / total
            if local >= next_report or done == total:
                self._progress(stage, lo + (hi - lo) * local)
                while next_report <= local:
                    next_report += PROGRESS_STEP

        return _on_frame

    def _deliver(self, result: SpectrogramResult | ManifoldResult) -> None:
        self._checkpoint()
        self._emit(result)
        self._advance(PipelineState.DONE)

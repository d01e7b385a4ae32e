"""Tests for the background worker's message protocol."""

from __future__ import annotations

import numpy as np
import pytest

from syrinx.worker import (
    Cancel,
    ComputeManifold,
    ComputeSpectrogram,
    Error,
    ManifoldResult,
    ManifoldWorker,
    Progress,
    RunCancelled,
    SpectrogramResult,
)

TIMEOUT_S = 60.0

pytestmark = pytest.mark.integration


def test_manifold_run_end_to_end(sine_1khz: np.ndarray) -> None:
    with ManifoldWorker() as worker:
        run_id = worker.send(ComputeManifold(samples=sine_1khz, sample_rate=44100))
        assert run_id is not None
        messages = list(worker.iter_run(run_id, timeout=TIMEOUT_S))

    assert isinstance(messages[-1], ManifoldResult)
    assert messages[-1].points.shape == (83, 3)
    fractions = [m.fraction for m in messages if isinstance(m, Progress)]
    assert fractions == sorted(fractions)
    assert all(m.run_id == run_id for m in messages)


def test_run_ids_increase(sine_1khz: np.ndarray) -> None:
    with ManifoldWorker() as worker:
        first = worker.send(ComputeSpectrogram(samples=sine_1khz, sample_rate=44100))
        list(worker.iter_run(first, timeout=TIMEOUT_S))
        second = worker.send(ComputeSpectrogram(samples=sine_1khz, sample_rate=44100))
        messages = list(worker.iter_run(second, timeout=TIMEOUT_S))
    assert second > first
    assert isinstance(messages[-1], SpectrogramResult)


def test_unknown_request_answered_with_error() -> None:
    with ManifoldWorker() as worker:
        assert worker.send(object()) is None  # type: ignore[arg-type]
        message = worker.responses.get(timeout=TIMEOUT_S)
    assert isinstance(message, Error)
    assert message.run_id is None
    assert "Unknown message type" in message.message


def test_cancel_before_start(sine_1khz: np.ndarray) -> None:
    worker = ManifoldWorker()
    run_id = worker.send(ComputeManifold(samples=sine_1khz, sample_rate=44100))
    worker.cancel()
    worker.start()
    try:
        messages = list(worker.iter_run(run_id, timeout=TIMEOUT_S))
    finally:
        worker.close()
    assert messages == [RunCancelled(run_id=run_id)]


def test_new_request_supersedes_live_run(sine_1khz: np.ndarray) -> None:
    worker = ManifoldWorker()
    first = worker.send(ComputeManifold(samples=sine_1khz, sample_rate=44100))
    second = worker.send(ComputeManifold(samples=sine_1khz, sample_rate=44100))
    worker.start()
    try:
        first_messages = list(worker.iter_run(first, timeout=TIMEOUT_S))
        second_messages = list(worker.iter_run(second, timeout=TIMEOUT_S))
    finally:
        worker.close()
    assert first_messages == [RunCancelled(run_id=first)]
    assert isinstance(second_messages[-1], ManifoldResult)
    assert not any(isinstance(m, ManifoldResult) for m in first_messages)


def test_cancel_message_returns_none() -> None:
    with ManifoldWorker() as worker:
        assert worker.send(Cancel()) is None
        assert worker.live_run_id is None


def test_close_is_idempotent_and_final(sine_1khz: np.ndarray) -> None:
    worker = ManifoldWorker().start()
    worker.close()
    worker.close()
    with pytest.raises(RuntimeError):
        worker.send(ComputeSpectrogram(samples=sine_1khz, sample_rate=44100))
    with pytest.raises(RuntimeError):
        worker.start()


def test_runs_can_be_read_in_any_order(sine_1khz: np.ndarray) -> None:
    worker = ManifoldWorker()
    first = worker.send(ComputeManifold(samples=sine_1khz, sample_rate=44100))
    second = worker.send(ComputeManifold(samples=sine_1khz, sample_rate=44100))
    worker.start()
    try:
        second_messages = list(worker.iter_run(second, timeout=TIMEOUT_S))
        first_messages = list(worker.iter_run(first, timeout=2.0))
    finally:
        worker.close()
    assert isinstance(second_messages[-1], ManifoldResult)
    assert first_messages == [RunCancelled(run_id=first)]


def test_results_are_read_only(sine_1khz: np.ndarray) -> None:
    with ManifoldWorker() as worker:
        run_id = worker.send(ComputeManifold(samples=sine_1khz, sample_rate=44100))
        result = list(worker.iter_run(run_id, timeout=TIMEOUT_S))[-1]
    assert isinstance(result, ManifoldResult)
    with pytest.raises(ValueError):
        result.points[0, 0] = 1.0
    with pytest.raises(ValueError):
        result.features[0, 0] = 1.0

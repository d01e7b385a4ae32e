"""Tests for shared CLI helpers: result formatting, run logs, error exit."""

from __future__ import annotations

from pathlib import Path

import pytest
import typer

from syrinx.cli import base
from syrinx.cli.base import BaseCLI, format_result, handle_errors


@pytest.mark.unit
class TestFormatResult:
    def test_none_is_success(self) -> None:
        assert format_result(None, operation="manifold") == "✓ manifold"

    def test_counters_failures_and_items(self) -> None:
        text = format_result(
            {
                "success": False,
                "total": 2,
                "succeeded": 1,
                "failed": 1,
                "skipped": 0,
                "message": "Processed 2 file(s).",
                "failures": [{"item": "/x/missing.wav", "reason": "File not found"}],
                "items": [
                    {
                        "file": "a.wav",
                        "status": "success",
                        "kind": "manifold",
                        "sample_rate": 22050,
                        "duration_sec": 0.5,
                        "points_shape": (18, 3),
                        "features_shape": (18, 40),
                        "axis_ranges": [(-1.0, 2.0), (-1.5, 1.5), (0.0, 0.0)],
                    },
                    {"file": "/x/missing.wav", "status": "failed", "detail": "File not found"},
                ],
            },
            operation="manifold",
        )
        lines = text.splitlines()
        assert lines[0] == "✗ manifold"
        assert "total: 2 | succeeded: 1 | failed: 1 | skipped: 0" in text
        assert "    • /x/missing.wav: File not found" in lines
        assert "    • a.wav: success" in lines
        assert "points: (18, 3) | features: (18, 40)" in text
        assert "[-1.00, +2.00]" in text
        assert "    • /x/missing.wav: failed (File not found)" in lines

    def test_spectrogram_item_without_dominant(self) -> None:
        text = format_result(
            {
                "success": True,
                "items": [
                    {
                        "file": "silence.wav",
                        "status": "success",
                        "kind": "spectrogram",
                        "sample_rate": 22050,
                        "duration_sec": 0.01,
                        "n_frames": 0,
                        "n_bins": 1025,
                        "frame_rate_hz": 43.07,
                        "dominant_hz": None,
                    }
                ],
            },
            operation="spectrogram",
        )
        assert "frames: 0 x 1025 bins" in text
        assert "dominant: n/a" in text


@pytest.mark.unit
def test_handle_errors_exits_with_1() -> None:
    with pytest.raises(typer.Exit) as excinfo:
        with handle_errors("manifold"):
            raise ValueError("boom")
    assert excinfo.value.exit_code == 1


@pytest.mark.unit
def test_handle_errors_passes_exit_through() -> None:
    with pytest.raises(typer.Exit) as excinfo:
        with handle_errors("manifold"):
            raise typer.Exit(3)
    assert excinfo.value.exit_code == 3


class TestRunLog:
    def test_log_file_written(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(base, "DERIVED_LOGS_DIR", tmp_path / "logs")
        result = BaseCLI("manifold").handle_cli_operation(
            operation="manifold",
            op_callable=lambda: {"success": True, "total": 0},
            pre_message="Computing manifold...",
            log_module="manifold",
            log_context={"inputs": "none"},
        )
        assert result == {"success": True, "total": 0}
        logs = list((tmp_path / "logs").glob("*_manifold.log"))
        assert len(logs) == 1
        content = logs[0].read_text(encoding="utf-8")
        assert "command: manifold" in content
        assert "inputs: none" in content
        assert "Computing manifold..." in content
        assert "✓ manifold" in content

    def test_failure_recorded_in_log(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(base, "DERIVED_LOGS_DIR", tmp_path / "logs")

        def _fail() -> dict:
            raise RuntimeError("worker exploded")

        with pytest.raises(typer.Exit):
            BaseCLI("manifold").handle_cli_operation(operation="manifold", op_callable=_fail, log_module="manifold")
        content = next((tmp_path / "logs").glob("*_manifold.log")).read_text(encoding="utf-8")
        assert "✗ manifold failed: worker exploded" in content
        assert "exception_type: RuntimeError" in content

    def test_no_log_when_disabled(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(base, "DERIVED_LOGS_DIR", tmp_path / "logs")
        BaseCLI("manifold").handle_cli_operation(
            operation="manifold",
            op_callable=lambda: None,
            log_module="manifold",
            enable_log=False,
        )
        assert not (tmp_path / "logs").exists()

"""CLI command for acoustic manifold computation."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ...dsp.config import DEFAULT_CONFIG
from ...global_config import RAW_AUDIO_DIR
from ...pipeline.manifold import run_manifold
from ..base import BaseCLI, progress_display

app = typer.Typer(
    name="manifold",
    help="Compute 3D acoustic manifolds (MFCC + PCA) from audio and report a per-file summary",
)


@app.callback(invoke_without_command=True)
def manifold(
    files: Annotated[
        list[Path],
        typer.Argument(
            help="Audio file(s) to process. If omitted, all .wav files in data/datasets/raw/audio are used.",
        ),
    ] = [],
    window_size: Annotated[
        int | None,
        typer.Option("--window-size", "-N", help=f"Window size in samples. Default: {DEFAULT_CONFIG.window_size}."),
    ] = None,
    hop_size: Annotated[
        int | None,
        typer.Option("--hop-size", "-H", help=f"Hop size in samples. Default: {DEFAULT_CONFIG.hop_size}."),
    ] = None,
    mel_bins: Annotated[
        int | None,
        typer.Option("--mel-bins", help=f"Number of mel filters. Default: {DEFAULT_CONFIG.mel_bins}."),
    ] = None,
    mfcc_count: Annotated[
        int | None,
        typer.Option("--mfcc-count", help=f"Cepstral coefficients per frame. Default: {DEFAULT_CONFIG.mfcc_count}."),
    ] = None,
    f_min: Annotated[
        float | None,
        typer.Option("--f-min", help=f"Lower mel band edge in Hz. Default: {DEFAULT_CONFIG.f_min}."),
    ] = None,
    f_max: Annotated[
        float | None,
        typer.Option("--f-max", help=f"Upper mel band edge in Hz (clamped to Nyquist). Default: {DEFAULT_CONFIG.f_max}."),
    ] = None,
    max_frames: Annotated[
        int | None,
        typer.Option("--max-frames", help=f"Frame cap; later audio is dropped. Default: {DEFAULT_CONFIG.max_frames}."),
    ] = None,
    no_progress: Annotated[
        bool,
        typer.Option("--no-progress", help="Do not show the progress bar."),
    ] = False,
    no_log: Annotated[
        bool,
        typer.Option("--no-log", help="Do not write a log file to data/logs/derived."),
    ] = False,
) -> None:
    """Compute acoustic manifolds on the background worker and summarize each file.

    Each file goes through spectrogram, mel filterbank, cepstral features and
    a three-axis PCA; the summary lists point/feature shapes and axis ranges.
    """
    cli = BaseCLI("manifold")
    audio_list = list(files) if files else None

    def _run() -> dict:
        config = DEFAULT_CONFIG.with_overrides(
            window_size=window_size,
            hop_size=hop_size,
            mel_bins=mel_bins,
            mfcc_count=mfcc_count,
            f_min=f_min,
            f_max=f_max,
            max_frames=max_frames,
        )
        with progress_display(enabled=not no_progress) as on_progress:
            return run_manifold(
                audio_files=audio_list,
                raw_audio_dir=RAW_AUDIO_DIR,
                config=config,
                on_progress=on_progress,
            )

    inputs_desc = str([str(p) for p in audio_list]) if audio_list else f"all .wav in {RAW_AUDIO_DIR}"
    cli.handle_cli_operation(
        operation="manifold",
        op_callable=_run,
        pre_message="Computing manifold for "
        + (f"{len(audio_list)} file(s)..." if audio_list else "all audio in raw folder..."),
        log_module="manifold",
        enable_log=not no_log,
        log_context={"inputs": inputs_desc},
    )

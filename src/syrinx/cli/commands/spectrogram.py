"""CLI command for spectrogram computation."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ...dsp.config import DEFAULT_CONFIG
from ...global_config import RAW_AUDIO_DIR
from ...pipeline.spectrogram import run_spectrogram
from ..base import BaseCLI, progress_display

app = typer.Typer(
    name="spectrogram",
    help="Compute magnitude spectrograms from audio and report a per-file summary",
)


@app.callback(invoke_without_command=True)
def spectrogram(
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
    """Compute spectrograms on the background worker and summarize each file."""
    cli = BaseCLI("spectrogram")
    audio_list = list(files) if files else None

    def _run() -> dict:
        config = DEFAULT_CONFIG.with_overrides(
            window_size=window_size,
            hop_size=hop_size,
            max_frames=max_frames,
        )
        with progress_display(enabled=not no_progress) as on_progress:
            return run_spectrogram(
                audio_files=audio_list,
                raw_audio_dir=RAW_AUDIO_DIR,
                config=config,
                on_progress=on_progress,
            )

    inputs_desc = str([str(p) for p in audio_list]) if audio_list else f"all .wav in {RAW_AUDIO_DIR}"
    cli.handle_cli_operation(
        operation="spectrogram",
        op_callable=_run,
        pre_message="Computing spectrogram for "
        + (f"{len(audio_list)} file(s)..." if audio_list else "all audio in raw folder..."),
        log_module="spectrogram",
        enable_log=not no_log,
        log_context={"inputs": inputs_desc},
    )

"""Shared plumbing for syrinx CLI commands.

Every command goes through `BaseCLI.handle_cli_operation`, which prints a
summary of the pipeline's result dictionary, turns exceptions into exit
code 1, and optionally mirrors everything into a per-run log file under
`data/logs/derived`.
"""

from __future__ import annotations

import logging
import os
import sys
import traceback
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, TextIO

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TaskProgressColumn, TextColumn

from ..global_config import DERIVED_LOGS_DIR, PACKAGE_NAME
from ..pipeline._runner import ProgressCallback

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_logging_ready = False


def _package_version() -> str:
    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        return "unknown"


def configure_logging(level: int = logging.INFO) -> None:
    """Install the root logging handler the first time it is called.

    Later calls are no-ops, so commands and tests can call it freely.
    """
    global _logging_ready
    if _logging_ready:
        return
    logging.basicConfig(level=level, format=LOG_FORMAT)
    _logging_ready = True


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def handle_errors(
    operation: str,
    *,
    logger: logging.Logger | None = None,
    log_file: TextIO | None = None,
) -> Iterator[None]:
    """Report any exception from the block and exit with status 1.

    The traceback goes to `logger` and, when given, to `log_file`; the user
    sees a one-line red message. `typer.Exit` passes through untouched.
    """
    logger = logger or get_logger(__name__)
    try:
        yield
    except typer.Exit:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("%s failed", operation)
        message = f"✗ {operation} failed: {exc}"
        typer.secho(message, fg=typer.colors.RED)
        if log_file is not None:
            log_file.write(
                f"\n{message}\n"
                f"exception_type: {type(exc).__name__}\n"
                f"traceback:\n{traceback.format_exc()}"
            )
            log_file.flush()
        raise typer.Exit(1) from exc


@contextmanager
def progress_display(enabled: bool = True) -> Iterator[ProgressCallback | None]:
    """Render worker progress as one rich progress bar per track.

    Yields a callback suitable for the pipelines' ``on_progress`` argument,
    or None when disabled.
    """
    if not enabled:
        yield None
        return

    columns = (
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
    )
    with Progress(*columns, console=Console(stderr=True), transient=True) as bar:
        tasks: dict[str, TaskID] = {}

        def _update(track: str, stage: str, fraction: float) -> None:
            if track not in tasks:
                tasks[track] = bar.add_task(track, total=1.0)
            bar.update(tasks[track], completed=fraction, description=f"{track}: {stage}")

        yield _update


def _open_run_log(command: str, context: dict[str, Any]) -> tuple[Path, TextIO]:
    """Create ``{utc timestamp}_{command}.log`` and write its metadata header."""
    DERIVED_LOGS_DIR.mkdir(parents=True, exist_ok=True)
    now = datetime.now(timezone.utc)
    path = DERIVED_LOGS_DIR / f"{now.strftime('%Y%m%d-%H%M%S')}_{command}.log"
    handle = open(path, "w", encoding="utf-8")  # noqa: SIM115
    header = {
        "timestamp": now.isoformat(),
        "command": command,
        "argv": sys.argv,
        "cwd": os.getcwd(),
        "syrinx_version": _package_version(),
        "python_version": sys.version.split()[0],
        **context,
    }
    handle.write("--- metadata ---\n")
    handle.writelines(f"{key}: {value}\n" for key, value in header.items())
    handle.write("---\n")
    handle.flush()
    return path, handle


class BaseCLI:
    """Runs one command's operation with shared output, logging and error handling."""

    def __init__(self, domain: str) -> None:
        self.domain = domain
        self.logger = get_logger(f"{__name__}.{domain}")

    def handle_cli_operation(
        self,
        *,
        operation: str,
        op_callable: Callable[[], Any],
        pre_message: str | None = None,
        log_module: str | None = None,
        enable_log: bool = True,
        log_context: dict[str, Any] | None = None,
    ) -> Any:
        """Call `op_callable`, print its formatted result and return it.

        Args:
            operation: Label used in the summary and in error messages.
            op_callable: Zero-argument callable doing the work.
            pre_message: Printed before the work starts.
            log_module: Log file suffix; no log file is written when None.
            enable_log: Set False to skip the log file (``--no-log``).
            log_context: Extra metadata lines for the log header.
        """
        log_file: TextIO | None = None
        if enable_log and log_module is not None:
            log_path, log_file = _open_run_log(log_module, log_context or {})
            self.logger.debug("Writing run log to %s", log_path)

        def _echo(text: str) -> None:
            typer.echo(text)
            if log_file is not None:
                log_file.write(text + "\n")
                log_file.flush()

        try:
            if pre_message:
                _echo(pre_message)
            with handle_errors(operation, logger=self.logger, log_file=log_file):
                result = op_callable()
            _echo(format_result(result, operation=operation))
            return result
        finally:
            if log_file is not None:
                log_file.close()


def format_result(result: dict[str, Any] | None, *, operation: str) -> str:
    """Render a pipeline result dictionary as indented CLI text.

    The first line is ✓/✗ and the operation; then the counters, the message,
    any failures, and one line (plus a detail line) per processed file.
    """
    if result is None:
        return f"✓ {operation}"

    lines = [f"{'✓' if result.get('success', True) else '✗'} {operation}"]

    counters = [
        f"{key}: {result[key]}"
        for key in ("total", "succeeded", "failed", "skipped")
        if result.get(key) is not None
    ]
    if counters:
        lines.append("  " + " | ".join(counters))
    if result.get("message"):
        lines.append(f"  ℹ {result['message']}")

    failures = result.get("failures") or []
    if failures:
        lines.append("  Failures:")
        lines.extend(f"    • {f.get('item', '?')}: {f.get('reason') or 'Unknown error'}" for f in failures)

    items = result.get("items") or []
    if items:
        lines.append("  Items:")
        for item in items:
            detail = item.get("detail")
            suffix = f" ({detail})" if detail else ""
            lines.append(f"    • {item.get('file', '?')}: {item.get('status', 'unknown')}{suffix}")
            summary = _ITEM_SUMMARIES.get(item.get("kind"))
            line = summary(item) if summary is not None else None
            if line:
                lines.append(f"      {line}")

    return "\n".join(lines)


def _spectrogram_summary(item: dict[str, Any]) -> str | None:
    try:
        dominant = item["dominant_hz"]
        return (
            f"audio: {item['duration_sec']:.3f}s @ {item['sample_rate']} Hz | "
            f"frames: {item['n_frames']} x {item['n_bins']} bins @ {item['frame_rate_hz']:.2f} Hz | "
            f"dominant: {'n/a' if dominant is None else f'{dominant:.1f} Hz'}"
        )
    except KeyError:
        return None


def _manifold_summary(item: dict[str, Any]) -> str | None:
    try:
        ranges = " ".join(f"[{lo:+.2f}, {hi:+.2f}]" for lo, hi in item["axis_ranges"]) or "n/a"
        return (
            f"audio: {item['duration_sec']:.3f}s @ {item['sample_rate']} Hz | "
            f"points: {item['points_shape']} | features: {item['features_shape']} | "
            f"axes: {ranges}"
        )
    except KeyError:
        return None


_ITEM_SUMMARIES: dict[str, Callable[[dict[str, Any]], str | None]] = {
    "spectrogram": _spectrogram_summary,
    "manifold": _manifold_summary,
}

"""Filesystem anchors shared across syrinx.

Only paths and names live here. Analysis parameters belong to
`syrinx.dsp.config.DspConfig`, which is passed per run.
"""

from pathlib import Path

PACKAGE_NAME = "syrinx"

PACKAGE_ROOT: Path = Path(__file__).resolve().parent
# src/syrinx -> src -> repo root (holds pyproject.toml and data/)
PROJECT_ROOT: Path = PACKAGE_ROOT.parent.parent

# Input recordings; the CLI falls back to every .wav here when given no files
DATA_DIR: Path = PROJECT_ROOT / "data"
RAW_AUDIO_DIR: Path = DATA_DIR / "datasets" / "raw" / "audio"

# One log file per CLI run
DERIVED_LOGS_DIR: Path = DATA_DIR / "logs" / "derived"

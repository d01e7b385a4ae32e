"""Utility modules.

This package provides shared utilities used across the codebase.
"""

from .audio import AudioSamples, load_audio, resolve_audio_files, track_name

__all__ = [
    "AudioSamples",
    "load_audio",
    "resolve_audio_files",
    "track_name",
]

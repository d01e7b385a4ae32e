"""Pipeline orchestration layer.

Pipeline modules are organized by verb, one module per CLI command:
- `pipeline/spectrogram.py` - spectrogram summaries for audio files
- `pipeline/manifold.py` - 3D acoustic manifolds for audio files

Import policy:
- CLI imports only from `pipeline.*` for orchestration (verbs).
- `pipeline.*` submits work to `worker.*`, which calls `dsp.*`.
- `dsp.*` must not call `pipeline.*` or `worker.*`.
"""

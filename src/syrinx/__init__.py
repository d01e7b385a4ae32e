"""
syrinx core package.

Turns a mono recording into an "acoustic manifold": a 3D trajectory, one
point per analysis frame, for visualizing the structure of bird song.

- `syrinx.dsp` - window, FFT, spectrogram, mel filterbank, cepstral
  features and three-axis PCA.
- `syrinx.worker` - the sequential, cancellable pipeline run on a
  background thread, spoken to through typed messages.
- `syrinx.pipeline` / `syrinx.cli` - batch runs over audio files and the
  Typer CLI on top of them.

Configuration:
- Shared, project-wide filesystem anchors live in `syrinx.global_config`.
- DSP parameters live in `syrinx.dsp.config` (`DspConfig`).
"""

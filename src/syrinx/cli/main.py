from __future__ import annotations

import typer

from .base import configure_logging
from .commands.manifold import app as manifold_app
from .commands.spectrogram import app as spectrogram_app

configure_logging()
app = typer.Typer(
    help="Acoustic manifolds for bird song: spectrogram, MFCC and 3D PCA trajectories",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(spectrogram_app, name="spectrogram")
app.add_typer(manifold_app, name="manifold")


def main() -> None:
    """Main entry point for package CLI.

    Invokes the Typer application, which handles command parsing and
    execution.
    """
    app()


if __name__ == "__main__":
    main()

"""Typer-based command line interface for syrinx."""

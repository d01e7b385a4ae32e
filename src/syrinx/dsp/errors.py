"""DSP-specific exception types for the project."""

from __future__ import annotations

from collections.abc import Sized


class SyrinxError(Exception):
    """Base exception for syrinx processing errors."""


class DimensionMismatchError(SyrinxError):
    """Raised when two array-like values violate a length or shape contract."""


class ProtocolViolationError(SyrinxError):
    """Raised when an unrecognized request reaches the worker boundary."""


def ensure_same_length(a: Sized, b: Sized, *, what: str = "inputs") -> None:
    """Raise DimensionMismatchError if two sized values differ in length.

    Args:
        a: First value (e.g. a frame).
        b: Second value (e.g. a window).
        what: Human-readable description used in the error message.

    Raises:
        DimensionMismatchError: If ``len(a) != len(b)``.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(f"{what} must have the same length: got {len(a)} and {len(b)}")

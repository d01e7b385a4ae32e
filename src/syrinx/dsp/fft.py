"""Radix-2 Cooley-Tukey FFT and magnitude spectra.

Two variants compute the same transform:

- `fft_recursive`: the textbook even/odd split, vectorized per level.
- `fft_iterative`: in-place bit-reversal + butterfly passes, compiled with
  numba. Used for long windows where the recursive call tree gets costly.

Both expect a power-of-two length; `compute_fft` takes care of padding.
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt
from numba import jit

FloatArray = npt.NDArray[np.float64]
ComplexArray = npt.NDArray[np.complex128]

# Sizes above this use the iterative variant when method="auto".
RECURSIVE_FFT_MAX_SIZE = 1024

FftMethod = Literal["auto", "recursive", "iterative"]


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= max(n, 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def fft_recursive(x: npt.ArrayLike) -> ComplexArray:
    """Recursive radix-2 FFT of a power-of-two length signal."""
    x = np.asarray(x)
    n = x.shape[0]
    if n == 0 or n & (n - 1):
        raise ValueError(f"length must be a power of two, got {n}")
    if n == 1:
        return x.astype(np.complex128)
    even = fft_recursive(x[0::2])
    odd = fft_recursive(x[1::2])
    twiddled = np.exp(-2j * np.pi * np.arange(n // 2) / n) * odd
    return np.concatenate((even + twiddled, even - twiddled))


@jit(nopython=True)
def _fft_inplace(out):
    """Iterative radix-2 FFT over a complex128 buffer, in place."""
    n = out.shape[0]

    # bit-reversal permutation
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j ^= bit
        if i < j:
            tmp = out[i]
            out[i] = out[j]
            out[j] = tmp

    size = 2
    while size <= n:
        half = size // 2
        for k in range(half):
            angle = -2.0 * np.pi * k / size
            w = np.cos(angle) + 1j * np.sin(angle)
            for start in range(0, n, size):
                u = out[start + k]
                t = w * out[start + k + half]
                out[start + k] = u + t
                out[start + k + half] = u - t
        size *= 2
    return out


def fft_iterative(x: npt.ArrayLike) -> ComplexArray:
    """Iterative in-place radix-2 FFT of a power-of-two length signal."""
    buf = np.array(x, dtype=np.complex128)
    n = buf.shape[0]
    if n == 0 or n & (n - 1):
        raise ValueError(f"length must be a power of two, got {n}")
    return _fft_inplace(buf)


def compute_fft(
    samples: npt.ArrayLike,
    fft_size: int | None = None,
    *,
    method: FftMethod = "auto",
) -> ComplexArray:
    """Transform a real signal, zero-padded to the next power of two.

    Args:
        samples: Real-valued 1-D input.
        fft_size: Requested transform length; rounded up to a power of two.
            Defaults to the input length. Inputs longer than the rounded size
            are truncated.
        method: "recursive", "iterative", or "auto" (recursive up to
            RECURSIVE_FFT_MAX_SIZE, iterative above).

    Returns:
        Complex spectrum with exactly the padded length.
    """
    x = np.asarray(samples, dtype=np.float64).ravel()
    size = next_power_of_two(x.size if fft_size is None else fft_size)
    padded = np.zeros(size, dtype=np.float64)
    count = min(x.size, size)
    padded[:count] = x[:count]

    if method == "auto":
        method = "recursive" if size <= RECURSIVE_FFT_MAX_SIZE else "iterative"
    if method == "recursive":
        return fft_recursive(padded)
    if method == "iterative":
        return fft_iterative(padded)
    raise ValueError(f"Unknown FFT method: {method}")


def magnitude_spectrum(spectrum: npt.ArrayLike) -> FloatArray:
    """Per-bin magnitude ``sqrt(real^2 + imag^2)``."""
    z = np.asarray(spectrum)
    return np.sqrt(np.square(z.real) + np.square(z.imag)).astype(np.float64)


def one_sided(values: npt.ArrayLike) -> npt.NDArray:
    """Keep the ``N // 2 + 1`` non-negative frequency bins of a real signal's spectrum."""
    v = np.asarray(values)
    return v[: v.shape[0] // 2 + 1]

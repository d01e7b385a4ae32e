"""Tests for the Hann window."""

from __future__ import annotations

import numpy as np
import pytest

from syrinx.dsp.errors import DimensionMismatchError
from syrinx.dsp.windowing import apply_window, hann_window


class TestHannWindow:
    @pytest.mark.parametrize("size", [2, 7, 64, 2048])
    def test_symmetric(self, size: int) -> None:
        w = hann_window(size)
        assert w.shape == (size,)
        assert np.allclose(w, w[::-1], atol=1e-12)

    @pytest.mark.parametrize("size", [1, 5, 512])
    def test_matches_numpy_hanning(self, size: int) -> None:
        assert np.allclose(hann_window(size), np.hanning(size))

    def test_endpoints_zero_and_peak_one(self) -> None:
        w = hann_window(9)
        assert w[0] == pytest.approx(0.0)
        assert w[-1] == pytest.approx(0.0, abs=1e-15)
        assert w[4] == pytest.approx(1.0)

    def test_rejects_empty(self) -> None:
        with pytest.raises(ValueError, match=">= 1"):
            hann_window(0)


class TestApplyWindow:
    def test_elementwise_product(self) -> None:
        frame = np.array([2.0, 2.0, 2.0])
        out = apply_window(frame, np.array([0.0, 1.0, 0.5]))
        assert np.allclose(out, [0.0, 2.0, 1.0])

    def test_length_mismatch_raises(self) -> None:
        with pytest.raises(DimensionMismatchError, match="same length"):
            apply_window(np.ones(4), hann_window(5))

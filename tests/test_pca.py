"""Tests for the power-iteration PCA."""

from __future__ import annotations

import numpy as np
import pytest

from syrinx.dsp.errors import DimensionMismatchError
from syrinx.dsp.pca import compute_pca_3d, covariance, principal_axes, zscore_columns


def _random_features(t: int = 200, f: int = 10, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    scales = np.linspace(5.0, 0.5, f)
    mixing = np.linalg.qr(rng.standard_normal((f, f)))[0]
    return (rng.standard_normal((t, f)) * scales) @ mixing + 3.0


class TestCovariance:
    def test_matches_numpy(self) -> None:
        x = _random_features()
        centered = x - x.mean(axis=0)
        assert np.allclose(covariance(centered), np.cov(x, rowvar=False))

    def test_single_row_uses_unit_divisor(self) -> None:
        assert np.allclose(covariance(np.zeros((1, 4))), 0.0)


class TestPrincipalAxes:
    def test_recovers_leading_eigenvectors(self) -> None:
        c = np.array([[1.0, 0.1, 0.1], [0.1, 5.0, 0.2], [0.1, 0.2, 50.0]])
        axes = principal_axes(c, 3, 10)
        _, vecs = np.linalg.eigh(c)
        assert abs(np.dot(axes[0], vecs[:, 2])) > 0.99
        assert abs(np.dot(axes[1], vecs[:, 1])) > 0.99

    def test_axes_unit_norm_and_orthogonal(self) -> None:
        c = np.array([[1.0, 0.1, 0.1], [0.1, 5.0, 0.2], [0.1, 0.2, 50.0]])
        axes = principal_axes(c, 3, 10)
        assert np.allclose(np.linalg.norm(axes, axis=1), 1.0, atol=1e-4)
        gram = axes @ axes.T
        assert np.allclose(gram - np.diag(np.diag(gram)), 0.0, atol=1e-8)

    def test_zero_matrix_gives_zero_axes_not_nan(self) -> None:
        axes = principal_axes(np.zeros((4, 4)), 3, 10)
        assert np.all(np.isfinite(axes))
        assert np.allclose(axes, 0.0)

    def test_rejects_non_square(self) -> None:
        with pytest.raises(DimensionMismatchError):
            principal_axes(np.zeros((3, 4)))


class TestComputePca3d:
    def test_empty_input(self) -> None:
        assert compute_pca_3d(np.zeros((0, 40))).shape == (0, 3)

    def test_single_frame(self) -> None:
        points = compute_pca_3d(np.arange(40, dtype=np.float64)[None, :])
        assert points.shape == (1, 3)
        assert np.all(np.isfinite(points))
        assert np.allclose(points, 0.0)

    def test_axes_are_zscored(self) -> None:
        points = compute_pca_3d(_random_features())
        assert points.shape == (200, 3)
        assert np.allclose(points.mean(axis=0), 0.0, atol=1e-9)
        assert np.allclose(points.std(axis=0), 1.0, atol=1e-9)

    def test_constant_features_stay_finite(self) -> None:
        points = compute_pca_3d(np.full((50, 40), -7.0))
        assert np.all(np.isfinite(points))
        assert np.allclose(points, 0.0)

    def test_fewer_features_than_axes(self) -> None:
        points = compute_pca_3d(_random_features(f=2))
        assert points.shape == (200, 3)
        assert np.all(np.isfinite(points))
        assert np.allclose(points[:, 2], 0.0, atol=1e-6)

    def test_deterministic(self) -> None:
        x = _random_features(seed=4)
        assert np.array_equal(compute_pca_3d(x), compute_pca_3d(x))

    def test_rejects_1d_input(self) -> None:
        with pytest.raises(DimensionMismatchError):
            compute_pca_3d(np.ones(5))


class TestZscoreColumns:
    def test_degenerate_column_untouched(self) -> None:
        x = np.column_stack([np.arange(5.0), np.full(5, 3.0)])
        out = zscore_columns(x)
        assert np.allclose(out[:, 1], 3.0)
        assert out[:, 0].std() == pytest.approx(1.0)

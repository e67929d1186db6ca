"""
Tests for bidiagonalization, the Golub-Kahan SVD and svd().
"""

import warnings

import numpy as np
import pytest

from pydecomp import ExecutionContext, SVD, svd
from pydecomp.core.exceptions import ConvergenceError, DimensionError
from pydecomp.core.protocols import SVDDecomposition
from pydecomp.factorization.bidiagonalization import Bidiagonalization
from pydecomp.factorization.golub_kahan import (
    DEFAULT_MAX_ITERATIONS,
    GolubKahanStep,
    GolubKahanSVD,
    default_max_iterations,
    normalize_svd,
)


def reconstruct(result):
    return result.U() @ result.D() @ result.V().T


# ═══════════════════════════════════════════════════════════════════════
# Bidiagonalization
# ═══════════════════════════════════════════════════════════════════════


class TestBidiagonalization:

    def test_reconstruction(self, tall_matrix):
        bd = Bidiagonalization(tall_matrix)
        U, V, B = bd.U(), bd.V(), bd.B()
        np.testing.assert_allclose((U.T @ tall_matrix @ V)[:4], B, atol=1e-12)
        np.testing.assert_allclose((U.T @ tall_matrix @ V)[4:], 0.0, atol=1e-12)

    def test_orthogonal_factors(self, tall_matrix):
        bd = Bidiagonalization(tall_matrix)
        np.testing.assert_allclose(bd.U().T @ bd.U(), np.eye(6), atol=1e-12)
        np.testing.assert_allclose(bd.V().T @ bd.V(), np.eye(4), atol=1e-12)

    def test_exact_band(self, tall_matrix):
        B = Bidiagonalization(tall_matrix).B()
        band = np.triu(np.tril(B, 1))
        np.testing.assert_array_equal(B, band)
        assert B.shape == (4, 4)

    def test_diagonals(self, tall_matrix):
        bd = Bidiagonalization(tall_matrix)
        assert bd.diagonal.shape == (4,)
        assert bd.superdiagonal.shape == (3,)

    def test_two_columns_needs_no_right_reflector(self, rng):
        bd = Bidiagonalization(rng.standard_normal((4, 2)))
        np.testing.assert_array_equal(bd.V(), np.eye(2))

    def test_single_column(self):
        bd = Bidiagonalization([[3.0], [4.0]])
        assert abs(bd.B()[0, 0]) == pytest.approx(5.0)

    def test_rejects_fat(self):
        with pytest.raises(DimensionError):
            Bidiagonalization(np.ones((2, 3)))


# ═══════════════════════════════════════════════════════════════════════
# Golub-Kahan step
# ═══════════════════════════════════════════════════════════════════════


class TestGolubKahanStep:

    def test_preserves_bidiagonal_form(self):
        B = np.diag([4.0, 3.0, 2.0, 1.0]) + np.diag([1.0, 1.0, 1.0], k=1)
        step = GolubKahanStep(B)
        U, V = step.U(), step.V()
        np.testing.assert_allclose(U.T @ B @ V, step.UtBV(), atol=1e-12)
        D = step.UtBV()
        np.testing.assert_allclose(np.tril(D, -1), 0.0, atol=1e-12)
        np.testing.assert_allclose(np.triu(D, 2), 0.0, atol=1e-12)
        assert abs(D[2, 3]) < abs(B[2, 3])

    def test_rejects_1x1(self):
        with pytest.raises(ValueError):
            GolubKahanStep(np.array([[1.0]]))


# ═══════════════════════════════════════════════════════════════════════
# SVD
# ═══════════════════════════════════════════════════════════════════════


class TestSVD:

    def test_rank_one_example(self):
        A = np.outer([1.0, 2.0, 3.0], [1.0, 1.0])
        result = svd(A)
        sv = result.singular_values()
        assert sv[0] == pytest.approx(np.sqrt(14) * np.sqrt(2))
        assert sv[1] == pytest.approx(0.0, abs=1e-12)
        assert result.rank() == 1
        np.testing.assert_allclose(reconstruct(result), A, atol=1e-12)

    def test_matches_numpy(self, tall_matrix):
        result = svd(tall_matrix)
        np.testing.assert_allclose(
            result.singular_values(), np.linalg.svd(tall_matrix, compute_uv=False), rtol=1e-10
        )

    def test_factors(self, tall_matrix):
        result = svd(tall_matrix)
        U, V = result.U(), result.V()
        assert U.shape == (6, 4)
        assert V.shape == (4, 4)
        np.testing.assert_allclose(U.T @ U, np.eye(4), atol=1e-12)
        np.testing.assert_allclose(V.T @ V, np.eye(4), atol=1e-12)
        np.testing.assert_allclose(reconstruct(result), tall_matrix, atol=1e-12)
        np.testing.assert_allclose(result.Ut(), U.T)

    def test_fat_matrix(self, rng):
        A = rng.standard_normal((3, 5))
        result = svd(A)
        assert result.transposed
        assert result.U().shape == (3, 3)
        assert result.V().shape == (5, 3)
        np.testing.assert_allclose(reconstruct(result), A, atol=1e-12)

    def test_square_matrix(self, square_matrix):
        result = svd(square_matrix)
        np.testing.assert_allclose(reconstruct(result), square_matrix, atol=1e-12)

    def test_normalized_order(self, rng):
        result = svd(rng.standard_normal((8, 5)))
        sv = np.diag(result.D())
        assert np.all(sv >= 0)
        assert np.all(np.diff(sv) <= 0)

    def test_rank_deficient(self, rank2_matrix):
        result = svd(rank2_matrix)
        assert result.rank() == 2
        np.testing.assert_allclose(reconstruct(result), rank2_matrix, atol=1e-10)

    def test_zero_matrix(self):
        result = svd(np.zeros((3, 2)))
        np.testing.assert_array_equal(result.singular_values(), [0.0, 0.0])
        assert result.converged
        assert result.iterations == 0

    def test_diagonal_input_needs_no_iteration(self):
        result = svd(np.diag([1.0, 3.0, 2.0]))
        assert result.iterations == 0
        np.testing.assert_allclose(result.singular_values(), [3.0, 2.0, 1.0])

    def test_values_only(self, tall_matrix):
        result = svd(tall_matrix, compute_uv=False)
        np.testing.assert_allclose(
            result.singular_values(), np.linalg.svd(tall_matrix, compute_uv=False), rtol=1e-10
        )
        for accessor in (result.U, result.Ut, result.V):
            with pytest.raises(RuntimeError, match="only singular values"):
                accessor()

    def test_without_normalization(self, tall_matrix):
        result = svd(tall_matrix, normalize=False)
        np.testing.assert_allclose(reconstruct(result), tall_matrix, atol=1e-12)
        np.testing.assert_allclose(
            np.sort(result.singular_values())[::-1],
            np.linalg.svd(tall_matrix, compute_uv=False),
            rtol=1e-10,
        )

    def test_protocol_and_metadata(self, tall_matrix):
        result = SVD(tall_matrix)
        assert isinstance(result, SVDDecomposition)
        assert result.converged
        assert result.iterations > 0
        assert {"total_seconds", "bidiagonalization", "iteration"} <= set(result.timing)

    def test_threaded_context_matches_serial(self, rng):
        A = rng.standard_normal((30, 20))
        serial = svd(A)
        with ExecutionContext(max_workers=3, threshold=1) as ctx:
            threaded = svd(A, context=ctx)
        np.testing.assert_allclose(
            threaded.singular_values(), serial.singular_values(), rtol=1e-12
        )
        np.testing.assert_allclose(reconstruct(threaded), A, atol=1e-10)

    def test_iteration_cap_warns(self, tall_matrix):
        with pytest.warns(RuntimeWarning, match="did not converge"):
            result = svd(tall_matrix, max_iterations=1)
        assert not result.converged
        assert result.iterations == 1

    def test_no_warning_when_converged(self, tall_matrix):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            svd(tall_matrix)

    def test_strict_raises_on_iteration_cap(self, tall_matrix):
        with pytest.raises(ConvergenceError, match="did not converge") as exc_info:
            svd(tall_matrix, max_iterations=1, strict=True)
        err = exc_info.value
        assert err.iterations == 1
        assert err.reason == "max_iterations"
        assert err.final_change > err.threshold

    def test_strict_when_converged(self, tall_matrix):
        result = svd(tall_matrix, strict=True)
        assert result.converged

    def test_default_cap_scales_with_columns(self):
        assert default_max_iterations(2) == DEFAULT_MAX_ITERATIONS
        assert default_max_iterations(80) > DEFAULT_MAX_ITERATIONS
        assert GolubKahanSVD(np.eye(3)).max_iterations == DEFAULT_MAX_ITERATIONS

    def test_large_square_converges(self, rng):
        A = rng.standard_normal((80, 80))
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = svd(A)
        assert result.converged
        np.testing.assert_allclose(
            result.singular_values(), np.linalg.svd(A, compute_uv=False), atol=1e-9
        )
        np.testing.assert_allclose(reconstruct(result), A, atol=1e-9)

    def test_rejects_fat_in_strategy(self):
        with pytest.raises(DimensionError):
            GolubKahanSVD(np.ones((2, 3)))


# ═══════════════════════════════════════════════════════════════════════
# Normalization
# ═══════════════════════════════════════════════════════════════════════


class TestNormalize:

    def test_flips_negative_and_sorts(self):
        d = np.array([1.0, -3.0, 2.0])
        Ut = np.eye(3)
        V = np.eye(3)
        d2, Ut2, V2 = normalize_svd(d, Ut, V)
        np.testing.assert_array_equal(d2, [3.0, 2.0, 1.0])
        np.testing.assert_array_equal(Ut2[0], [0.0, -1.0, 0.0])
        np.testing.assert_array_equal(V2[:, 0], [0.0, 1.0, 0.0])
        # U·D·Vᵗ is unchanged
        np.testing.assert_allclose(
            Ut2.T @ np.diag(d2) @ V2.T, Ut.T @ np.diag(d) @ V.T
        )

    def test_idempotent(self, tall_matrix):
        result = svd(tall_matrix)
        d = np.diag(result.D())
        once = normalize_svd(d, result.Ut(), result.V())
        twice = normalize_svd(*once)
        for a, b in zip(once, twice):
            np.testing.assert_array_equal(a, b)
        np.testing.assert_array_equal(once[0], d)

    def test_stable_for_ties(self):
        d = np.array([2.0, -2.0, 1.0])
        Ut = np.arange(9.0).reshape(3, 3)
        d2, Ut2, _ = normalize_svd(d, Ut)
        np.testing.assert_array_equal(d2, [2.0, 2.0, 1.0])
        np.testing.assert_array_equal(Ut2[0], Ut[0])
        np.testing.assert_array_equal(Ut2[1], -Ut[1])

    def test_values_only(self):
        d2, Ut2, V2 = normalize_svd(np.array([-1.0, 5.0]))
        np.testing.assert_array_equal(d2, [5.0, 1.0])
        assert Ut2 is None and V2 is None

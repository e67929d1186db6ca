"""
Tests for Householder reflections, Givens rotations and permutation matrices.
"""

import numpy as np
import pytest

from pydecomp.core.exceptions import DimensionError, ValidationError
from pydecomp.factorization.elementary import Givens, Householder
from pydecomp.factorization.permutation import PermutationMatrix


# ═══════════════════════════════════════════════════════════════════════
# Householder
# ═══════════════════════════════════════════════════════════════════════


class TestHouseholder:

    def test_from_vector_maps_to_multiple_of_e1(self):
        x = np.array([3.0, 4.0, 0.0])
        ctx = Householder.from_vector(x)
        assert ctx.lam == pytest.approx(-5.0)
        np.testing.assert_allclose(ctx.reflector().reflect(x), [-5.0, 0.0, 0.0], atol=1e-14)

    def test_lambda_sign_for_non_positive_head(self):
        x = np.array([-3.0, 4.0])
        ctx = Householder.from_vector(x)
        assert ctx.lam == pytest.approx(5.0)
        np.testing.assert_allclose(ctx.reflector().reflect(x), [5.0, 0.0], atol=1e-14)

    def test_zero_vector_gives_identity(self):
        ctx = Householder.from_vector(np.zeros(3))
        assert ctx.lam == 0.0
        np.testing.assert_array_equal(ctx.generator, np.zeros(3))
        h = ctx.reflector()
        np.testing.assert_array_equal(h.H(), np.eye(3))

    def test_H_is_symmetric_orthogonal(self, rng):
        h = Householder(rng.standard_normal(5))
        H = h.H()
        np.testing.assert_allclose(H, H.T, atol=1e-14)
        np.testing.assert_allclose(H @ H, np.eye(5), atol=1e-14)

    def test_generator_is_unit(self):
        h = Householder([3.0, 4.0])
        np.testing.assert_allclose(h.generator, [0.6, 0.8])
        assert h.size == 2

    def test_reflect_matches_dense(self, rng):
        h = Householder(rng.standard_normal(4))
        A = rng.standard_normal((4, 3))
        np.testing.assert_allclose(h.reflect(A), h.H() @ A, atol=1e-13)
        np.testing.assert_allclose(h.reflect(A[:, 0]), h.H() @ A[:, 0], atol=1e-13)

    def test_reflect_rows_matches_dense(self, rng):
        h = Householder(rng.standard_normal(4))
        A = rng.standard_normal((3, 4))
        np.testing.assert_allclose(h.reflect_rows(A), A @ h.H(), atol=1e-13)

    def test_reflect_size_mismatch(self):
        with pytest.raises(DimensionError):
            Householder([1.0, 2.0]).reflect(np.ones(3))

    def test_product(self, rng):
        hs = [Householder(rng.standard_normal(4)) for _ in range(3)]
        expected = hs[0].H() @ hs[1].H() @ hs[2].H()
        np.testing.assert_allclose(Householder.product(hs, 4, 4), expected, atol=1e-13)
        np.testing.assert_allclose(
            Householder.product(hs, 4, 2), expected[:, :2], atol=1e-13
        )

    def test_product_skips_none(self, rng):
        h = Householder(rng.standard_normal(3))
        np.testing.assert_allclose(Householder.product([None, h], 3, 3), h.H())


# ═══════════════════════════════════════════════════════════════════════
# Givens
# ═══════════════════════════════════════════════════════════════════════


class TestGivens:

    def test_layout(self):
        G = Givens(3, 0, 2, 0.6, 0.8).to_array()
        expected = np.array([
            [0.6, 0.0, 0.8],
            [0.0, 1.0, 0.0],
            [-0.8, 0.0, 0.6],
        ])
        np.testing.assert_array_equal(G, expected)

    def test_for_rows_zeroes_second_entry(self):
        x = np.array([3.0, 1.0, 4.0])
        G = Givens.for_rows(3, 0, 2, x[0], x[2])
        np.testing.assert_allclose(G.multiply(x), [5.0, 1.0, 0.0], atol=1e-14)

    def test_for_columns_zeroes_second_entry(self):
        x = np.array([3.0, 1.0, 4.0])
        G = Givens.for_columns(3, 0, 2, x[0], x[2])
        np.testing.assert_allclose(G.right_multiply(x), [5.0, 1.0, 0.0], atol=1e-14)

    def test_zero_pair_gives_identity(self):
        G = Givens.for_rows(2, 0, 1, 0.0, 0.0)
        np.testing.assert_array_equal(G.to_array(), np.eye(2))

    def test_no_overflow(self):
        G = Givens.for_rows(2, 0, 1, 1e300, 1e300)
        assert np.isfinite(G.c) and np.isfinite(G.s)
        assert G.c == pytest.approx(np.sqrt(0.5))

    def test_multiply_matches_dense(self, rng):
        G = Givens.for_rows(4, 1, 3, 0.3, -1.2)
        A = rng.standard_normal((4, 3))
        np.testing.assert_allclose(G.multiply(A), G.to_array() @ A, atol=1e-14)

    def test_right_multiply_matches_dense(self, rng):
        G = Givens.for_columns(4, 3, 0, 2.0, 0.5)
        A = rng.standard_normal((3, 4))
        np.testing.assert_allclose(G.right_multiply(A), A @ G.to_array(), atol=1e-14)

    def test_transpose_is_inverse(self):
        G = Givens.for_rows(3, 0, 1, 1.0, 2.0)
        np.testing.assert_allclose(G.t().to_array(), G.to_array().T)
        np.testing.assert_allclose(G.t().to_array() @ G.to_array(), np.eye(3), atol=1e-14)

    def test_product(self):
        g1 = Givens.for_rows(3, 0, 1, 1.0, 2.0)
        g2 = Givens.for_rows(3, 1, 2, 3.0, -1.0)
        expected = g1.to_array() @ g2.to_array()
        np.testing.assert_allclose(Givens.product([g1, None, g2]), expected, atol=1e-14)

    def test_product_of_nothing_needs_dim(self):
        np.testing.assert_array_equal(Givens.product([], dim=3), np.eye(3))
        with pytest.raises(ValueError):
            Givens.product([None])

    @pytest.mark.parametrize("args", [(3, 0, 0), (3, 0, 3), (3, -1, 1), (1, 0, 0)])
    def test_invalid_indices(self, args):
        with pytest.raises(ValidationError):
            Givens(*args, 1.0, 0.0)


# ═══════════════════════════════════════════════════════════════════════
# PermutationMatrix
# ═══════════════════════════════════════════════════════════════════════


class TestPermutationMatrix:

    def test_rejects_non_permutation(self):
        with pytest.raises(ValidationError, match="not a permutation"):
            PermutationMatrix([0, 0, 1])
        with pytest.raises(ValidationError):
            PermutationMatrix([0, 3, 1])

    def test_from_array_rejects_two_ones_in_a_row(self):
        with pytest.raises(ValidationError):
            PermutationMatrix.from_array([[1, 1], [0, 0]])

    def test_from_array_round_trip(self):
        P = np.array([[0, 1, 0], [0, 0, 1], [1, 0, 0]], dtype=float)
        np.testing.assert_array_equal(PermutationMatrix.from_array(P).to_array(), P)

    def test_multiply_permutes_rows(self, rng):
        P = PermutationMatrix([2, 0, 1])
        A = rng.standard_normal((3, 2))
        np.testing.assert_array_equal(P.multiply(A), P.to_array() @ A)

    def test_right_multiply_permutes_columns(self, rng):
        P = PermutationMatrix([2, 0, 1])
        A = rng.standard_normal((2, 3))
        np.testing.assert_array_equal(P.right_multiply(A), A @ P.to_array())

    def test_swap_rows(self):
        P = PermutationMatrix.identity(3)
        P.swap_rows(0, 2)
        expected = np.eye(3)[[2, 1, 0]]
        np.testing.assert_array_equal(P.to_array(), expected)
        assert P.sign == -1

    def test_swap_columns(self):
        P = PermutationMatrix([1, 2, 0])
        dense = P.to_array()
        P.swap_columns(0, 1)
        np.testing.assert_array_equal(P.to_array(), dense[:, [1, 0, 2]])

    def test_move_row_to_end(self):
        P = PermutationMatrix.identity(4)
        P.move_row_to_end(1)
        np.testing.assert_array_equal(P.to_array(), np.eye(4)[[0, 2, 3, 1]])

    def test_move_column_to_end(self):
        P = PermutationMatrix.identity(4)
        P.move_column_to_end(1)
        np.testing.assert_array_equal(P.to_array(), np.eye(4)[:, [0, 2, 3, 1]])

    def test_sign_matches_determinant(self):
        for data in ([0, 1, 2], [1, 0, 2], [1, 2, 0], [2, 1, 0], [3, 0, 1, 2]):
            P = PermutationMatrix(data)
            assert P.sign == round(np.linalg.det(P.to_array()))

    def test_transpose(self):
        P = PermutationMatrix([2, 0, 1])
        np.testing.assert_array_equal(P.t().to_array(), P.to_array().T)

    def test_one_per_row_and_column(self):
        P = PermutationMatrix([3, 1, 0, 2]).to_array()
        np.testing.assert_array_equal(P.sum(axis=0), np.ones(4))
        np.testing.assert_array_equal(P.sum(axis=1), np.ones(4))

    def test_index_out_of_range(self):
        with pytest.raises(ValidationError):
            PermutationMatrix.identity(2).swap_rows(0, 2)

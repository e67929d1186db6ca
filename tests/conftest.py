"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def tall_matrix(rng):
    """Well-conditioned 6 x 4 matrix."""
    return rng.standard_normal((6, 4))


@pytest.fixture
def square_matrix(rng):
    """Random 5 x 5 matrix (non-singular with probability 1)."""
    return rng.standard_normal((5, 5))


@pytest.fixture
def spd_matrix(rng):
    """Symmetric positive definite 5 x 5 matrix."""
    X = rng.standard_normal((8, 5))
    return X.T @ X + np.eye(5)


@pytest.fixture
def rank2_matrix(rng):
    """7 x 5 matrix of rank exactly 2."""
    return rng.standard_normal((7, 2)) @ rng.standard_normal((2, 5))

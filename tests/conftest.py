"""Shared test fixtures for pygridapprox tests."""

import math

import numpy as np
import pytest

from pygridapprox import Approximant, GridBasis, SmolyakBasis


# ---------------------------------------------------------------------------
# Test functions (take an (N, d) array of points)
# ---------------------------------------------------------------------------

def poly_2d(x):
    """x^3 y^2 + x - 2y"""
    return x[:, 0] ** 3 * x[:, 1] ** 2 + x[:, 0] - 2.0 * x[:, 1]


def poly_2d_dx(x):
    return 3.0 * x[:, 0] ** 2 * x[:, 1] ** 2 + 1.0


def poly_2d_dy(x):
    return 2.0 * x[:, 0] ** 3 * x[:, 1] - 2.0


def poly_2d_dxdy(x):
    return 6.0 * x[:, 0] ** 2 * x[:, 1]


def sin_sum_2d(x):
    """sin(x) + sin(y)"""
    return np.sin(x[:, 0]) + np.sin(x[:, 1])


def cos_prod_2d(x):
    """cos(x) * cos(y)"""
    return np.cos(x[:, 0]) * np.cos(x[:, 1])


def smolyak_poly(x):
    """1 + x + y^2 + x*y: inside the level-2 Smolyak span."""
    return 1.0 + x[:, 0] + x[:, 1] ** 2 + x[:, 0] * x[:, 1]


TEST_POINTS_2D = np.array([
    [0.5, 0.3],
    [-0.7, 0.8],
    [0.0, 0.0],
    [0.9, -0.9],
    [-0.2, 0.6],
])


def random_points(lower, upper, n, seed=0):
    """Uniform random points in the box [lower, upper]."""
    rng = np.random.default_rng(seed)
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)
    return lower + (upper - lower) * rng.random((n, len(lower)))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def lagrange_1d():
    """1D Lagrange basis, 5 equispaced nodes on [0, 4]."""
    return GridBasis.build([(0.0, 4.0, 5)], family="lagrange")


@pytest.fixture(scope="module")
def lagrange_poly_2d():
    """2D Lagrange basis on [0, 1] x [-1, 1] with 7 x 5 nodes, fitted on poly_2d."""
    basis = GridBasis.build([(0.0, 1.0, 7), (-1.0, 1.0, 5)], family="lagrange")
    return Approximant.fit(basis, poly_2d(basis.nodes()))


@pytest.fixture(scope="module")
def cheb_sin_2d():
    """2D Chebyshev modal basis on [-1, 1]^2, 12 x 12 nodes, fitted on sin(x)+sin(y)."""
    basis = GridBasis.build([(-1.0, 1.0, 12), (-1.0, 1.0, 12)], family="chebyshev")
    return Approximant.fit(basis, sin_sum_2d(basis.nodes()))


@pytest.fixture(scope="module")
def cheb_cos_2d(cheb_sin_2d):
    """cos(x)*cos(y) on the same basis object as cheb_sin_2d."""
    basis = cheb_sin_2d.basis
    return Approximant.fit(basis, cos_prod_2d(basis.nodes()))


@pytest.fixture(scope="module")
def cubic_sin_2d():
    """2D cubic spline basis on [-1, 1]^2, 21 x 21 nodes, fitted on sin(x)+sin(y)."""
    basis = GridBasis.build([(-1.0, 1.0, 21), (-1.0, 1.0, 21)], family="cubic")
    return Approximant.fit(basis, sin_sum_2d(basis.nodes()))


@pytest.fixture(scope="module")
def smolyak_2d():
    """Level-2 Smolyak basis on [0, 2] x [-1, 1]."""
    return SmolyakBasis([(0.0, 2.0), (-1.0, 1.0)], level=2)


@pytest.fixture
def multi_output_2d():
    """sin(x)+sin(y) and cos(x)*cos(y) fitted together on one Chebyshev basis."""
    basis = GridBasis.build([(-1.0, 1.0, 12), (-1.0, 1.0, 12)], family="chebyshev")
    x = basis.nodes()
    return Approximant.fit(basis, np.column_stack([sin_sum_2d(x), cos_prod_2d(x)]))


def exact_sin_sum(p):
    return math.sin(p[0]) + math.sin(p[1])

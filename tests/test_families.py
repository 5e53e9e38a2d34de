"""Tests for univariate basis families and their shared kernels."""

import numpy as np
import pytest

from pygridapprox import (
    ChebyshevFamily,
    InvalidDimensionError,
    LagrangeFamily,
    SplineFamily,
    get_family,
)
from pygridapprox.families import (
    LagrangeBasis1D,
    SplineBasis1D,
    chebyshev_nodes,
    chebyshev_vandermonde,
    compute_barycentric_weights,
    compute_differentiation_matrix,
)


# ---------------------------------------------------------------------------
# Kernels
# ---------------------------------------------------------------------------

class TestKernels:
    def test_chebyshev_nodes_inside_and_sorted(self):
        nodes = chebyshev_nodes(2.0, 5.0, 9)
        assert len(nodes) == 9
        assert np.all(np.diff(nodes) > 0)
        assert nodes[0] > 2.0 and nodes[-1] < 5.0

    def test_barycentric_weights_scaled(self):
        w = compute_barycentric_weights(np.linspace(0, 100, 15))
        assert np.max(np.abs(w)) == pytest.approx(1.0)
        # Equispaced weights alternate in sign.
        assert np.all(np.sign(w[:-1]) != np.sign(w[1:]))

    def test_differentiation_matrix_exact_on_quadratic(self):
        nodes = np.linspace(-1, 2, 6)
        D = compute_differentiation_matrix(nodes, compute_barycentric_weights(nodes))
        np.testing.assert_allclose(D @ nodes ** 2, 2 * nodes, atol=1e-10)

    def test_chebyshev_vandermonde_values(self):
        t = np.array([-0.5, 0.0, 0.3])
        V = chebyshev_vandermonde(t, 2)
        np.testing.assert_allclose(V[:, 0], 1.0)
        np.testing.assert_allclose(V[:, 1], t)
        np.testing.assert_allclose(V[:, 2], 2 * t ** 2 - 1)

    def test_chebyshev_vandermonde_derivative_with_scale(self):
        t = np.array([-0.5, 0.0, 0.3])
        dV = chebyshev_vandermonde(t, 3, order=1, scale=0.5)
        np.testing.assert_allclose(dV[:, 0], 0.0)
        np.testing.assert_allclose(dV[:, 1], 0.5)
        np.testing.assert_allclose(dV[:, 2], 0.5 * 4 * t, atol=1e-14)
        np.testing.assert_allclose(dV[:, 3], 0.5 * (12 * t ** 2 - 3), atol=1e-14)

    def test_chebyshev_vandermonde_high_order_is_zero(self):
        dV = chebyshev_vandermonde(np.array([0.1, 0.2]), 2, order=3)
        assert dV.shape == (2, 3)
        assert np.all(dV == 0.0)


# ---------------------------------------------------------------------------
# Univariate bases
# ---------------------------------------------------------------------------

class TestLagrangeBasis1D:
    def test_identity_at_nodes(self):
        nodes = np.linspace(0, 1, 6)
        B = LagrangeBasis1D(nodes).evaluate(nodes)
        np.testing.assert_array_equal(B, np.eye(6))

    def test_partition_of_unity(self):
        basis = LagrangeBasis1D(np.linspace(0, 1, 6))
        B = basis.evaluate(np.array([0.05, 0.33, 0.71, 0.99]))
        np.testing.assert_allclose(B.sum(axis=1), 1.0, atol=1e-13)

    def test_derivative_of_cubic(self):
        nodes = np.linspace(-1, 1, 5)
        basis = LagrangeBasis1D(nodes)
        x = np.array([-0.8, 0.1, 0.65])
        np.testing.assert_allclose(basis.evaluate(x, 1) @ nodes ** 3, 3 * x ** 2, atol=1e-10)
        np.testing.assert_allclose(basis.evaluate(x, 2) @ nodes ** 3, 6 * x, atol=1e-9)


class TestSplineBasis1D:
    def test_hat_functions(self):
        basis = SplineBasis1D(np.array([0.0, 1.0, 3.0]), degree=1)
        B = basis.evaluate(np.array([0.5, 2.0]))
        np.testing.assert_allclose(B, [[0.5, 0.5, 0.0], [0.0, 0.5, 0.5]])

    def test_hat_derivative_piecewise_constant(self):
        basis = SplineBasis1D(np.array([0.0, 1.0, 3.0]), degree=1)
        dB = basis.evaluate(np.array([0.5, 2.0]), 1)
        np.testing.assert_allclose(dB, [[-1.0, 1.0, 0.0], [0.0, -0.5, 0.5]])

    def test_order_above_degree_is_zero(self):
        basis = SplineBasis1D(np.linspace(0, 1, 4), degree=1)
        assert np.all(basis.evaluate(np.array([0.3]), 2) == 0.0)

    def test_cubic_identity_at_nodes(self):
        nodes = np.linspace(0, 2, 7)
        B = SplineBasis1D(nodes, degree=3).evaluate(nodes)
        np.testing.assert_allclose(B, np.eye(7), atol=1e-12)

    def test_natural_spline_zero_curvature_at_ends(self):
        nodes = np.linspace(0, 1, 6)
        basis = SplineBasis1D(nodes, degree=3, bc_type="natural")
        d2 = basis.evaluate(np.array([0.0, 1.0]), 2)
        np.testing.assert_allclose(d2, 0.0, atol=1e-10)


# ---------------------------------------------------------------------------
# Families
# ---------------------------------------------------------------------------

class TestFamilies:
    @pytest.mark.parametrize("name,cls", [
        ("lagrange", LagrangeFamily),
        ("chebyshev", ChebyshevFamily),
        ("linear", SplineFamily),
        ("cubic", SplineFamily),
    ])
    def test_get_family_by_name(self, name, cls):
        fam = get_family(name)
        assert isinstance(fam, cls)
        assert fam.name == name

    def test_get_family_passes_instances_through(self):
        fam = ChebyshevFamily(degree=3)
        assert get_family(fam) is fam

    def test_unknown_family_raises(self):
        with pytest.raises(InvalidDimensionError, match="Unknown basis family"):
            get_family("wavelet")

    def test_equality_and_hash(self):
        assert SplineFamily() == get_family("cubic")
        assert SplineFamily(bc_type="natural") != SplineFamily()
        assert LagrangeFamily() != SplineFamily()
        assert hash(ChebyshevFamily(4)) == hash(ChebyshevFamily(4))

    def test_linear_spline_ignores_bc_type(self):
        assert SplineFamily(1, "natural") == SplineFamily(1)

    def test_default_node_placement(self):
        np.testing.assert_allclose(
            LagrangeFamily().default_nodes(0.0, 4.0, 5), [0, 1, 2, 3, 4]
        )
        np.testing.assert_allclose(
            LagrangeFamily("chebyshev").default_nodes(-1.0, 1.0, 4),
            chebyshev_nodes(-1.0, 1.0, 4),
        )
        np.testing.assert_allclose(
            ChebyshevFamily().default_nodes(-1.0, 1.0, 4),
            chebyshev_nodes(-1.0, 1.0, 4),
        )

    @pytest.mark.parametrize("factory", [
        lambda: LagrangeFamily("random"),
        lambda: ChebyshevFamily(-1),
        lambda: SplineFamily(degree=2),
        lambda: SplineFamily(bc_type="periodic"),
    ])
    def test_invalid_parameters_raise(self, factory):
        with pytest.raises(ValueError):
            factory()

    def test_chebyshev_degree_exceeding_nodes_raises(self):
        fam = ChebyshevFamily(degree=5)
        with pytest.raises(InvalidDimensionError, match="needs at least 6 nodes"):
            fam.univariate(np.linspace(0, 1, 4), 0.0, 1.0)

    def test_chebyshev_truncated_size(self):
        basis = ChebyshevFamily(degree=2).univariate(np.linspace(0, 1, 8), 0.0, 1.0)
        assert basis.size == 3
        assert basis.evaluate(np.array([0.2, 0.4])).shape == (2, 3)

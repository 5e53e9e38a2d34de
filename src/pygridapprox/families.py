"""Univariate basis families used as per-dimension factors of a tensor basis.

A *family* decides where nodes go when only a count is given and turns a
node array into a univariate basis object.  Every univariate basis exposes
``nodes``, ``size`` and ``evaluate(x, order)``, which returns the matrix of
all basis functions (or their ``order``-th derivatives) at the points ``x``.

Families
--------
``"lagrange"``
    Barycentric Lagrange cardinal functions (Berrut & Trefethen 2004).
``"chebyshev"``
    Modal Chebyshev polynomials on the mapped interval, optionally
    truncated to a lower degree for least-squares fits.
``"linear"`` / ``"cubic"``
    Piecewise-linear hat functions and cubic spline cardinal functions.

References
----------
- Berrut & Trefethen (2004), "Barycentric Lagrange Interpolation",
  SIAM Review 46(3):501-517
"""

from __future__ import annotations

from typing import Union

import numpy as np
from numpy.polynomial.chebyshev import chebder, chebpts1, chebvander
from scipy.interpolate import CubicSpline, make_interp_spline

from pygridapprox.exceptions import InvalidDimensionError

#: Distance below which a query point is treated as lying on a node.
NODE_COINCIDENCE_TOL = 1e-14


# ----------------------------------------------------------------------
# Node placement and shared kernels
# ----------------------------------------------------------------------

def equispaced_nodes(lo: float, hi: float, n: int) -> np.ndarray:
    """Return *n* equally spaced nodes on [lo, hi], endpoints included."""
    return np.linspace(lo, hi, n)


def chebyshev_nodes(lo: float, hi: float, n: int) -> np.ndarray:
    """Return *n* Chebyshev Type I nodes mapped to [lo, hi], ascending."""
    nodes_std = chebpts1(n)
    nodes = 0.5 * (lo + hi) + 0.5 * (hi - lo) * nodes_std
    return np.sort(nodes)


def compute_barycentric_weights(nodes: np.ndarray) -> np.ndarray:
    """Compute barycentric weights for given nodes.

    Parameters
    ----------
    nodes : ndarray
        Interpolation nodes of shape (n,).

    Returns
    -------
    ndarray
        Barycentric weights w_i = 1 / prod_{j!=i} (x_i - x_j), rescaled so
        that max |w_i| = 1.  The barycentric formula is invariant under a
        common scale factor, and rescaling avoids overflow for wide domains.
    """
    n = len(nodes)
    weights = np.ones(n)
    for i in range(n):
        for j in range(n):
            if j != i:
                weights[i] /= (nodes[i] - nodes[j])
    return weights / np.max(np.abs(weights))


def compute_differentiation_matrix(nodes: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Compute spectral differentiation matrix for barycentric interpolation.

    Based on Berrut & Trefethen (2004), Section 9.3.

    Parameters
    ----------
    nodes : ndarray
        Interpolation nodes of shape (n,).
    weights : ndarray
        Barycentric weights of shape (n,).

    Returns
    -------
    ndarray
        Differentiation matrix D of shape (n, n) such that D @ f gives
        derivative values at nodes.
    """
    c = nodes[:, np.newaxis] - nodes
    np.fill_diagonal(c, 1.0)
    c = weights / (c * weights[:, np.newaxis])
    np.fill_diagonal(c, 0.0)
    d = -c.sum(axis=1)
    np.fill_diagonal(c, d)
    return c


def chebyshev_vandermonde(t: np.ndarray, degree: int, order: int = 0,
                          scale: float = 1.0) -> np.ndarray:
    """Evaluate T_0..T_degree (or a derivative of each) at points *t*.

    Parameters
    ----------
    t : ndarray of shape (N,)
        Points in the reference interval [-1, 1].
    degree : int
        Highest polynomial degree.
    order : int, optional
        Derivative order.  Default is 0.
    scale : float, optional
        Chain-rule factor applied once per differentiation, i.e.
        ``dt/dx`` for the affine map from the physical interval.

    Returns
    -------
    ndarray of shape (N, degree + 1)
    """
    size = degree + 1
    if order == 0:
        return chebvander(t, degree)
    if order > degree:
        return np.zeros((len(t), size))
    # Column j holds the Chebyshev coefficients of d^order T_j / dx^order.
    coef = chebder(np.eye(size), order, scl=scale)
    return chebvander(t, degree - order) @ coef


# ----------------------------------------------------------------------
# Univariate bases
# ----------------------------------------------------------------------

class LagrangeBasis1D:
    """Lagrange cardinal functions on arbitrary distinct nodes.

    ``evaluate`` uses the second (true) barycentric formula; derivatives
    apply powers of the spectral differentiation matrix, since
    ``p^(m)(x) = l(x) @ D^m @ f`` for cardinal row vector ``l(x)``.
    """

    def __init__(self, nodes: np.ndarray):
        self.nodes = np.asarray(nodes, dtype=float)
        self.size = len(self.nodes)
        self.weights = compute_barycentric_weights(self.nodes)
        self.diff_matrix = compute_differentiation_matrix(self.nodes, self.weights)

    def evaluate(self, x: np.ndarray, order: int = 0) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        diff = x[:, np.newaxis] - self.nodes
        exact = np.abs(diff) < NODE_COINCIDENCE_TOL
        with np.errstate(divide="ignore", invalid="ignore"):
            w_over_diff = self.weights / diff
            result = w_over_diff / np.sum(w_over_diff, axis=1, keepdims=True)
        rows, cols = np.nonzero(exact)
        result[rows] = 0.0
        result[rows, cols] = 1.0
        for _ in range(order):
            result = result @ self.diff_matrix
        return result


class ChebyshevBasis1D:
    """Modal Chebyshev basis T_0..T_degree on [lower, upper]."""

    def __init__(self, nodes: np.ndarray, lower: float, upper: float, degree: int):
        self.nodes = np.asarray(nodes, dtype=float)
        self.lower = float(lower)
        self.upper = float(upper)
        self.degree = degree
        self.size = degree + 1

    def to_reference(self, x: np.ndarray) -> np.ndarray:
        """Map physical coordinates to [-1, 1]."""
        return (2.0 * np.asarray(x, dtype=float) - (self.lower + self.upper)) / (
            self.upper - self.lower
        )

    def evaluate(self, x: np.ndarray, order: int = 0) -> np.ndarray:
        scale = 2.0 / (self.upper - self.lower)
        return chebyshev_vandermonde(self.to_reference(x), self.degree, order, scale)


class SplineBasis1D:
    """Cardinal spline functions: the spline through each unit vector.

    Degree 1 gives hat functions; degree 3 gives cubic splines with the
    requested boundary condition.  Points outside the node range are
    extrapolated from the end pieces.
    """

    def __init__(self, nodes: np.ndarray, degree: int = 3, bc_type: str = "not-a-knot"):
        self.nodes = np.asarray(nodes, dtype=float)
        self.size = len(self.nodes)
        self.degree = degree
        identity = np.eye(self.size)
        if degree == 1:
            self._spline = make_interp_spline(self.nodes, identity, k=1)
        else:
            self._spline = CubicSpline(self.nodes, identity, bc_type=bc_type)

    def evaluate(self, x: np.ndarray, order: int = 0) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if order > self.degree:
            return np.zeros((len(x), self.size))
        return np.asarray(self._spline(x, order), dtype=float)


# ----------------------------------------------------------------------
# Families
# ----------------------------------------------------------------------

class BasisFamily:
    """Strategy that turns per-dimension nodes into a univariate basis.

    Subclasses set ``name`` and override :meth:`univariate`; they may
    override :meth:`default_nodes` to change node placement.  Families
    compare equal when their type and parameters match.
    """

    name = "base"
    #: True when basis index k has polynomial degree k, so that tensor
    #: functions can be truncated by total degree.
    hierarchical = False

    def default_nodes(self, lower: float, upper: float, n: int) -> np.ndarray:
        return equispaced_nodes(lower, upper, n)

    def univariate(self, nodes: np.ndarray, lower: float, upper: float):
        raise NotImplementedError

    def _params(self) -> tuple:
        return ()

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._params() == other._params()

    def __hash__(self):
        return hash((type(self).__name__,) + self._params())

    def __repr__(self) -> str:
        params = ", ".join(repr(p) for p in self._params())
        return f"{type(self).__name__}({params})"


class LagrangeFamily(BasisFamily):
    """Barycentric Lagrange interpolation.

    Parameters
    ----------
    spacing : {"equispaced", "chebyshev"}, optional
        Node placement used when a dimension gives only a node count.
        Default is ``"equispaced"``.
    """

    name = "lagrange"

    def __init__(self, spacing: str = "equispaced"):
        if spacing not in ("equispaced", "chebyshev"):
            raise ValueError(
                f"spacing must be 'equispaced' or 'chebyshev', got {spacing!r}"
            )
        self.spacing = spacing

    def default_nodes(self, lower, upper, n):
        if self.spacing == "chebyshev":
            return chebyshev_nodes(lower, upper, n)
        return equispaced_nodes(lower, upper, n)

    def univariate(self, nodes, lower, upper):
        return LagrangeBasis1D(nodes)

    def _params(self):
        return (self.spacing,)


class ChebyshevFamily(BasisFamily):
    """Modal Chebyshev polynomial basis.

    Parameters
    ----------
    degree : int or None, optional
        Highest polynomial degree.  ``None`` (default) uses ``n - 1`` for
        *n* nodes, which makes the fit an exact interpolation.  A smaller
        degree gives a least-squares fit.
    """

    name = "chebyshev"
    hierarchical = True

    def __init__(self, degree: int | None = None):
        if degree is not None and degree < 0:
            raise ValueError(f"degree must be non-negative, got {degree}")
        self.degree = degree

    def default_nodes(self, lower, upper, n):
        return chebyshev_nodes(lower, upper, n)

    def univariate(self, nodes, lower, upper):
        n = len(nodes)
        degree = n - 1 if self.degree is None else self.degree
        if degree > n - 1:
            raise InvalidDimensionError(
                f"Chebyshev degree {degree} needs at least {degree + 1} "
                f"nodes, got {n}"
            )
        return ChebyshevBasis1D(nodes, lower, upper, degree)

    def _params(self):
        return (self.degree,)


class SplineFamily(BasisFamily):
    """Piecewise-linear or cubic spline basis on the nodes.

    Parameters
    ----------
    degree : {1, 3}, optional
        Spline degree.  Default is 3.
    bc_type : {"not-a-knot", "natural", "clamped"}, optional
        Boundary condition for cubic splines (see
        :class:`scipy.interpolate.CubicSpline`).  Ignored for degree 1.
    """

    _BC_TYPES = ("not-a-knot", "natural", "clamped")

    def __init__(self, degree: int = 3, bc_type: str = "not-a-knot"):
        if degree not in (1, 3):
            raise ValueError(f"Spline degree must be 1 or 3, got {degree}")
        if bc_type not in self._BC_TYPES:
            raise ValueError(
                f"bc_type must be one of {self._BC_TYPES}, got {bc_type!r}"
            )
        self.degree = degree
        self.bc_type = bc_type if degree == 3 else None

    @property
    def name(self) -> str:
        return "cubic" if self.degree == 3 else "linear"

    def univariate(self, nodes, lower, upper):
        return SplineBasis1D(nodes, self.degree, self.bc_type)

    def _params(self):
        return (self.degree, self.bc_type)


FamilyLike = Union[str, BasisFamily]

_FAMILIES = {
    "lagrange": LagrangeFamily,
    "chebyshev": ChebyshevFamily,
    "linear": lambda: SplineFamily(degree=1),
    "cubic": SplineFamily,
}


def get_family(family: FamilyLike) -> BasisFamily:
    """Resolve a family name or instance to a :class:`BasisFamily`.

    Raises
    ------
    InvalidDimensionError
        If *family* is an unknown name or not a family at all.
    """
    if isinstance(family, BasisFamily):
        return family
    if isinstance(family, str) and family in _FAMILIES:
        return _FAMILIES[family]()
    raise InvalidDimensionError(
        f"Unknown basis family {family!r}; expected one of "
        f"{sorted(_FAMILIES)} or a BasisFamily instance"
    )

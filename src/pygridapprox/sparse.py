"""Isotropic Smolyak sparse grids with a Chebyshev polynomial basis.

Implements the construction of Judd, Maliar, Maliar & Valero (2014): the
grid is a union of small tensor products of *disjoint increments* of nested
Chebyshev-extrema sets, and the basis is built from the matching
increments of polynomial degrees.  Both sets have the same size, so the
interpolation system is square, while the node count grows polynomially
rather than exponentially with dimension.

Level ``mu`` uses multi-indices ``i >= 1`` with ``|i| <= d + mu``.  The
nested 1-D rule at index ``i`` has ``m(1) = 1`` and ``m(i) = 2**(i-1) + 1``
points (Clenshaw-Curtis growth).

References
----------
- Judd, Maliar, Maliar & Valero (2014), "Smolyak method for solving dynamic
  economic models", J. Economic Dynamics and Control 44:92-123
- Bungartz & Griebel (2004), "Sparse Grids", Acta Numerica 13:147-269
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from pygridapprox._validation import _as_derivative_order, _as_points
from pygridapprox.exceptions import InvalidDimensionError
from pygridapprox.families import chebyshev_vandermonde


def _rule_size(i: int) -> int:
    """Number of points of the nested rule at index *i* (1-based)."""
    return 1 if i == 1 else 2 ** (i - 1) + 1


def _node_increment(i: int) -> np.ndarray:
    """Points of rule *i* that are not in rule *i - 1*, ascending on [-1, 1]."""
    if i == 1:
        return np.array([0.0])
    m = _rule_size(i)
    j = np.arange(m)
    if i == 2:
        j = j[[0, 2]]
    else:
        j = j[1::2]
    pts = -np.cos(np.pi * j / (m - 1))
    pts[np.abs(pts) < 1e-15] = 0.0
    return pts


def _degree_increment(i: int) -> np.ndarray:
    """Chebyshev degrees introduced at index *i*."""
    if i == 1:
        return np.array([0])
    return np.arange(_rule_size(i - 1), _rule_size(i))


def _smolyak_indices(num_dimensions: int, level: int) -> List[Tuple[int, ...]]:
    """Multi-indices ``i >= 1`` with ``sum(i) <= num_dimensions + level``, lexicographic."""
    if num_dimensions == 1:
        return [(i,) for i in range(1, level + 2)]
    out = []
    for first in range(1, level + 2):
        for rest in _smolyak_indices(num_dimensions - 1, level - (first - 1)):
            out.append((first,) + rest)
    return out


def _product(arrays: Sequence[np.ndarray]) -> np.ndarray:
    grids = np.meshgrid(*arrays, indexing="ij")
    return np.column_stack([g.ravel() for g in grids])


class SmolyakBasis:
    """Sparse-grid basis with the same contract as :class:`~pygridapprox.GridBasis`.

    Parameters
    ----------
    domain : list of (float, float)
        Bounds ``[(lo, hi), ...]`` for each dimension.
    level : int
        Approximation level ``mu >= 0``.  Level 0 is a single node at the
        domain centre with a constant basis.

    Raises
    ------
    InvalidDimensionError
        If *domain* is empty or any ``lo >= hi``.
    ValueError
        If *level* is negative.

    Examples
    --------
    >>> basis = SmolyakBasis([(-1, 1), (-1, 1)], level=1)
    >>> basis.num_nodes, basis.num_basis_functions
    (5, 5)
    """

    def __init__(self, domain: Sequence[Tuple[float, float]], level: int):
        domain = [[float(lo), float(hi)] for lo, hi in domain]
        if len(domain) == 0:
            raise InvalidDimensionError("A grid needs at least one dimension")
        for d, (lo, hi) in enumerate(domain):
            if not (np.isfinite(lo) and np.isfinite(hi)):
                raise InvalidDimensionError(
                    f"domain[{d}]: bounds must be finite, got [{lo}, {hi}]"
                )
            if lo >= hi:
                raise InvalidDimensionError(
                    f"domain[{d}]: lo={lo} must be strictly less than hi={hi}"
                )
        if level < 0:
            raise ValueError(f"level must be non-negative, got {level}")

        ndim = len(domain)
        indices = _smolyak_indices(ndim, level)
        ref_nodes = np.vstack([
            _product([_node_increment(i) for i in idx]) for idx in indices
        ])
        degrees = np.vstack([
            _product([_degree_increment(i) for i in idx]) for idx in indices
        ]).astype(int)

        lo = np.array([b[0] for b in domain])
        hi = np.array([b[1] for b in domain])
        grid = lo + 0.5 * (ref_nodes + 1.0) * (hi - lo)
        grid.flags.writeable = False

        self.domain = domain
        self.level = int(level)
        self.degrees = degrees
        self._grid = grid

    @property
    def num_dimensions(self) -> int:
        return len(self.domain)

    @property
    def num_nodes(self) -> int:
        return self._grid.shape[0]

    @property
    def num_basis_functions(self) -> int:
        return self.degrees.shape[0]

    def nodes(self) -> np.ndarray:
        """Return the sparse grid as a read-only (num_nodes, num_dimensions) array."""
        return self._grid

    def basis_matrix(self, points, derivative_order: Sequence[int] | None = None) -> np.ndarray:
        """Evaluate every basis function (or a partial derivative) at each point.

        See :meth:`pygridapprox.GridBasis.basis_matrix`.
        """
        pts = _as_points(points, self.num_dimensions)
        order = _as_derivative_order(derivative_order, self.num_dimensions)

        matrix = np.ones((pts.shape[0], self.num_basis_functions))
        for d, (lo, hi) in enumerate(self.domain):
            t = (2.0 * pts[:, d] - (lo + hi)) / (hi - lo)
            max_degree = int(self.degrees[:, d].max())
            vander = chebyshev_vandermonde(t, max_degree, order[d], 2.0 / (hi - lo))
            matrix *= vander[:, self.degrees[:, d]]
        return matrix

    def is_compatible(self, other) -> bool:
        if self is other:
            return True
        return (
            type(other) is SmolyakBasis
            and self.domain == other.domain
            and self.level == other.level
        )

    def __repr__(self) -> str:
        return (
            f"SmolyakBasis(dims={self.num_dimensions}, "
            f"level={self.level}, nodes={self.num_nodes})"
        )

    def __str__(self) -> str:
        domain_str = " x ".join(f"[{lo}, {hi}]" for lo, hi in self.domain)
        return "\n".join([
            f"SmolyakBasis ({self.num_dimensions}D, level {self.level})",
            f"  Nodes:       {self.num_nodes:,}",
            f"  Domain:      {domain_str}",
            f"  Functions:   {self.num_basis_functions:,}",
        ])

"""Tensor-product interpolation grids and their basis matrices.

A :class:`GridBasis` is the Cartesian product of per-dimension node arrays,
each paired with a univariate basis from :mod:`pygridapprox.families`.  The
value of tensor basis function ``j`` at a point ``p`` is the product of the
univariate factors (or their derivatives) evaluated at ``p[d]``, so the full
basis matrix is a row-wise Kronecker product of per-dimension matrices.

Nodes and basis functions are enumerated in C order: the last dimension
varies fastest, matching ``np.ndindex(*basis.shape)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np

from pygridapprox._validation import _as_derivative_order, _as_points
from pygridapprox.exceptions import InvalidDimensionError
from pygridapprox.families import BasisFamily, FamilyLike, get_family


@dataclass(frozen=True)
class DimensionSpec:
    """Bounds and nodes of one input dimension.

    Parameters
    ----------
    lower, upper : float
        Interval bounds; ``lower < upper``.
    nodes : int or sequence of float
        Either a node count (>= 2, placement decided by the basis family)
        or explicit breakpoints, strictly increasing and inside
        ``[lower, upper]``.

    Raises
    ------
    InvalidDimensionError
        If any of the above conditions fails.
    """

    lower: float
    upper: float
    nodes: Union[int, Tuple[float, ...]]

    def __post_init__(self):
        lo, hi = float(self.lower), float(self.upper)
        if not (np.isfinite(lo) and np.isfinite(hi)):
            raise InvalidDimensionError(
                f"Bounds must be finite, got [{self.lower}, {self.upper}]"
            )
        if lo >= hi:
            raise InvalidDimensionError(
                f"lower={self.lower} must be strictly less than upper={self.upper}"
            )
        object.__setattr__(self, "lower", lo)
        object.__setattr__(self, "upper", hi)

        if isinstance(self.nodes, (int, np.integer)):
            if self.nodes < 2:
                raise InvalidDimensionError(
                    f"A dimension needs at least 2 nodes, got {self.nodes}"
                )
            object.__setattr__(self, "nodes", int(self.nodes))
            return

        try:
            breakpoints = tuple(float(b) for b in self.nodes)
        except (TypeError, ValueError):
            raise InvalidDimensionError(
                f"nodes must be an integer count or a sequence of breakpoints, "
                f"got {self.nodes!r}"
            ) from None
        if len(breakpoints) < 2:
            raise InvalidDimensionError(
                f"A dimension needs at least 2 nodes, got {len(breakpoints)}"
            )
        if np.any(np.diff(breakpoints) <= 0):
            raise InvalidDimensionError(
                f"Breakpoints must be strictly increasing, got {list(breakpoints)}"
            )
        if breakpoints[0] < lo or breakpoints[-1] > hi:
            raise InvalidDimensionError(
                f"Breakpoints {list(breakpoints)} must lie inside [{lo}, {hi}]"
            )
        object.__setattr__(self, "nodes", breakpoints)

    @property
    def count(self) -> int:
        """Number of nodes in this dimension."""
        if isinstance(self.nodes, int):
            return self.nodes
        return len(self.nodes)

    def resolve_nodes(self, family: BasisFamily) -> np.ndarray:
        """Return the node array, placing nodes with *family* if only a count is given."""
        if isinstance(self.nodes, int):
            return family.default_nodes(self.lower, self.upper, self.nodes)
        return np.array(self.nodes, dtype=float)


DimensionLike = Union[DimensionSpec, Sequence]


def _as_dimension(dim: DimensionLike) -> DimensionSpec:
    if isinstance(dim, DimensionSpec):
        return dim
    try:
        lower, upper, nodes = dim
    except (TypeError, ValueError):
        raise InvalidDimensionError(
            f"Expected a DimensionSpec or (lower, upper, nodes) triple, got {dim!r}"
        ) from None
    return DimensionSpec(lower, upper, nodes)


class GridBasis:
    """Tensor-product basis on a structured grid.

    Use :meth:`build` (or :meth:`from_domain`) to construct one.  A basis
    is immutable: its node array is read-only and no method changes its
    state, so one basis can back many :class:`~pygridapprox.Approximant`
    objects at once.

    Parameters
    ----------
    dimensions : sequence of DimensionSpec or (lower, upper, nodes)
        One entry per input dimension.
    family : str, BasisFamily, or sequence of these, optional
        Univariate basis family, shared by all dimensions or given per
        dimension.  Default is ``"cubic"``.
    total_degree : int or None, optional
        Keep only tensor functions whose per-dimension degrees sum to at
        most this value (a "complete polynomial" basis).  Requires
        hierarchical families such as ``"chebyshev"``.

    Examples
    --------
    >>> basis = GridBasis.build([(0.0, 4.0, 5)], family="lagrange")
    >>> basis.nodes()[:, 0]
    array([0., 1., 2., 3., 4.])
    """

    def __init__(
        self,
        dimensions: Sequence[DimensionLike],
        family: FamilyLike | Sequence[FamilyLike] = "cubic",
        total_degree: int | None = None,
    ):
        dims = tuple(_as_dimension(d) for d in dimensions)
        if len(dims) == 0:
            raise InvalidDimensionError("A grid needs at least one dimension")
        families = self._resolve_families(family, len(dims))

        axes = []
        for spec, fam in zip(dims, families):
            nodes = spec.resolve_nodes(fam)
            axes.append(fam.univariate(nodes, spec.lower, spec.upper))

        columns = None
        if total_degree is not None:
            if total_degree < 0:
                raise ValueError(
                    f"total_degree must be non-negative, got {total_degree}"
                )
            if not all(f.hierarchical for f in families):
                raise InvalidDimensionError(
                    "total_degree requires hierarchical families "
                    "(e.g. 'chebyshev') in every dimension"
                )
            sizes = tuple(ax.size for ax in axes)
            kept = [idx for idx in np.ndindex(*sizes) if sum(idx) <= total_degree]
            columns = np.ravel_multi_index(np.array(kept).T, sizes)

        # Full tensor grid in C order, matching np.ndindex(*shape).
        grids = np.meshgrid(*[ax.nodes for ax in axes], indexing="ij")
        grid = np.column_stack([g.ravel() for g in grids])
        grid.flags.writeable = False

        self.dimensions: Tuple[DimensionSpec, ...] = dims
        self.families: Tuple[BasisFamily, ...] = families
        self.total_degree = total_degree
        self._axes = axes
        self._columns = columns
        self._grid = grid

    @classmethod
    def build(
        cls,
        dimensions: Sequence[DimensionLike],
        family: FamilyLike | Sequence[FamilyLike] = "cubic",
        total_degree: int | None = None,
    ) -> "GridBasis":
        """Build a basis from dimension specifications.

        Parameters
        ----------
        dimensions : sequence of DimensionSpec or (lower, upper, nodes)
            One entry per input dimension.
        family : str, BasisFamily, or sequence of these, optional
            Univariate basis family per dimension.  Default is ``"cubic"``.
        total_degree : int or None, optional
            Total-degree truncation for hierarchical families.

        Returns
        -------
        GridBasis

        Raises
        ------
        InvalidDimensionError
            If a dimension is malformed or a family is unknown or unsuitable.
        """
        return cls(dimensions, family=family, total_degree=total_degree)

    @classmethod
    def from_domain(
        cls,
        domain: Sequence[Tuple[float, float]],
        n_nodes: Sequence[int],
        family: FamilyLike | Sequence[FamilyLike] = "cubic",
        total_degree: int | None = None,
    ) -> "GridBasis":
        """Build a basis from ``[[lo, hi], ...]`` bounds and per-dimension node counts."""
        if len(domain) != len(n_nodes):
            raise InvalidDimensionError(
                f"len(domain)={len(domain)} must equal len(n_nodes)={len(n_nodes)}"
            )
        dims = [DimensionSpec(lo, hi, n) for (lo, hi), n in zip(domain, n_nodes)]
        return cls(dims, family=family, total_degree=total_degree)

    @staticmethod
    def _resolve_families(family, ndim: int) -> Tuple[BasisFamily, ...]:
        if isinstance(family, (str, BasisFamily)):
            return (get_family(family),) * ndim
        try:
            families = tuple(get_family(f) for f in family)
        except TypeError:
            raise InvalidDimensionError(
                f"Expected a family name, BasisFamily or a sequence of these, "
                f"got {family!r}"
            ) from None
        if len(families) != ndim:
            raise InvalidDimensionError(
                f"Got {len(families)} families for {ndim} dimension(s)"
            )
        return families

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def num_dimensions(self) -> int:
        return len(self.dimensions)

    @property
    def shape(self) -> Tuple[int, ...]:
        """Per-dimension node counts."""
        return tuple(len(ax.nodes) for ax in self._axes)

    @property
    def num_nodes(self) -> int:
        return int(np.prod(self.shape))

    @property
    def num_basis_functions(self) -> int:
        if self._columns is not None:
            return len(self._columns)
        return int(np.prod([ax.size for ax in self._axes]))

    @property
    def node_axes(self) -> List[np.ndarray]:
        """Per-dimension node arrays (copies)."""
        return [ax.nodes.copy() for ax in self._axes]

    @property
    def domain(self) -> List[List[float]]:
        return [[spec.lower, spec.upper] for spec in self.dimensions]

    # ------------------------------------------------------------------
    # Nodes and basis evaluation
    # ------------------------------------------------------------------

    def nodes(self) -> np.ndarray:
        """Return the tensor-product grid.

        Returns
        -------
        ndarray of shape (num_nodes, num_dimensions)
            Read-only array; row order matches ``np.ndindex(*self.shape)``,
            so ``values.reshape(self.shape)`` gives the value tensor.
        """
        return self._grid

    def basis_matrix(self, points, derivative_order: Sequence[int] | None = None) -> np.ndarray:
        """Evaluate every basis function (or a partial derivative) at each point.

        Parameters
        ----------
        points : array_like of shape (N, num_dimensions)
            Query points.  A flat sequence is read as a single point, or as
            one point per entry when the basis is 1-D.
        derivative_order : sequence of int, optional
            Derivative order per dimension.  Default is all zeros.

        Returns
        -------
        ndarray of shape (N, num_basis_functions)

        Raises
        ------
        DimensionMismatchError
            If a point or *derivative_order* has the wrong length.
        ValueError
            If a derivative order is negative.
        """
        pts = _as_points(points, self.num_dimensions)
        order = _as_derivative_order(derivative_order, self.num_dimensions)
        n_points = pts.shape[0]

        matrix = np.ones((n_points, 1))
        for d, ax in enumerate(self._axes):
            factor = ax.evaluate(pts[:, d], order[d])
            matrix = (matrix[:, :, np.newaxis] * factor[:, np.newaxis, :]).reshape(
                n_points, matrix.shape[1] * factor.shape[1]
            )
        if self._columns is not None:
            matrix = matrix[:, self._columns]
        return matrix

    def is_compatible(self, other) -> bool:
        """True if *other* spans the same functions on the same nodes."""
        if self is other:
            return True
        return (
            type(other) is GridBasis
            and self.dimensions == other.dimensions
            and self.families == other.families
            and self.total_degree == other.total_degree
        )

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        names = [f.name for f in self.families]
        return (
            f"GridBasis(dims={self.num_dimensions}, "
            f"nodes={list(self.shape)}, "
            f"families={names})"
        )

    def __str__(self) -> str:
        domain_str = " x ".join(f"[{lo}, {hi}]" for lo, hi in self.domain)
        lines = [
            f"GridBasis ({self.num_dimensions}D)",
            f"  Nodes:       {list(self.shape)} ({self.num_nodes:,} total)",
            f"  Domain:      {domain_str}",
            f"  Families:    {', '.join(f.name for f in self.families)}",
            f"  Functions:   {self.num_basis_functions:,}",
        ]
        if self.total_degree is not None:
            lines.append(f"  Total deg:   <= {self.total_degree}")
        return "\n".join(lines)

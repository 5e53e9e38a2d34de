"""Coefficient fitting: solve ``basis_matrix(nodes) @ c = samples``.

Both the square (interpolation) and the overdetermined (least-squares)
cases go through a column-pivoted QR factorisation, ``A P = Q R``.  The
magnitudes on the diagonal of ``R`` are non-increasing, which gives a
cheap numerical-rank test and condition estimate without forming
``A^T A`` or inverting anything.
"""

from __future__ import annotations

import time
import warnings

import numpy as np
from scipy.linalg import qr, solve_triangular

from pygridapprox._validation import _as_samples
from pygridapprox.exceptions import IllConditionedBasisWarning, SingularBasisError

#: Condition estimate above which fitting emits IllConditionedBasisWarning.
DEFAULT_WARN_CONDITION = 1e12


class Factorization:
    """Pivoted QR factorisation of a basis matrix evaluated at its nodes.

    Solving for new samples reuses the factorisation, which is what makes
    :meth:`~pygridapprox.Approximant.update_coefficients` cheap.

    Parameters
    ----------
    matrix : ndarray of shape (M, N)
        Basis matrix at the grid nodes.
    rcond : float or None, optional
        Relative threshold on ``|R_kk| / |R_00|`` below which a direction
        counts as rank-deficient.  ``None`` uses ``eps * max(M, N)``, the
        same default as :func:`numpy.linalg.lstsq`.
    warn_condition : float, optional
        Condition estimate above which an
        :class:`~pygridapprox.exceptions.IllConditionedBasisWarning` is
        issued.

    Raises
    ------
    SingularBasisError
        If the numerical rank is smaller than N.
    """

    def __init__(self, matrix: np.ndarray, rcond: float | None = None,
                 warn_condition: float = DEFAULT_WARN_CONDITION):
        matrix = np.asarray(matrix, dtype=float)
        n_rows, n_cols = matrix.shape
        if n_rows < n_cols:
            raise SingularBasisError(
                f"{n_cols} basis functions cannot be determined from "
                f"{n_rows} nodes"
            )

        q, r, perm = qr(matrix, mode="economic", pivoting=True)
        diag = np.abs(np.diag(r))
        tol = np.finfo(float).eps * max(n_rows, n_cols) if rcond is None else rcond
        rank = int(np.sum(diag > tol * diag[0])) if diag[0] > 0 else 0
        if rank < n_cols:
            raise SingularBasisError(
                f"Basis matrix of shape {matrix.shape} has numerical rank "
                f"{rank} < {n_cols} (rcond={tol:.1e})"
            )

        self.matrix = matrix
        self.rank = rank
        self.condition = float(diag[0] / diag[-1])
        self._q = q
        self._r = r
        self._perm = perm

        if self.condition > warn_condition:
            warnings.warn(
                f"Basis matrix is ill-conditioned (condition estimate "
                f"{self.condition:.2e}); fitted coefficients may be inaccurate.",
                IllConditionedBasisWarning,
                stacklevel=3,
            )

    @property
    def shape(self):
        return self.matrix.shape

    def solve(self, values: np.ndarray) -> np.ndarray:
        """Return coefficients minimising ``||A c - values||`` (exact when square).

        Parameters
        ----------
        values : ndarray of shape (M,) or (M, k)

        Returns
        -------
        ndarray of shape (N,) or (N, k)
        """
        z = solve_triangular(self._r, self._q.T @ values)
        coefficients = np.empty_like(z)
        coefficients[self._perm] = z
        return coefficients

    def residual(self, values: np.ndarray, coefficients: np.ndarray) -> float:
        """Root-mean-square residual of a fit at the nodes."""
        diff = self.matrix @ coefficients - values
        return float(np.sqrt(np.mean(diff ** 2)))


class Fitter:
    """Least-squares / interpolation solver for basis coefficients.

    Parameters
    ----------
    rcond : float or None, optional
        Relative rank tolerance, see :class:`Factorization`.  Default
        ``None`` (``eps * max(M, N)``).
    warn_condition : float, optional
        Condition estimate that triggers an advisory warning.  Default
        :data:`DEFAULT_WARN_CONDITION`.
    verbose : bool, optional
        If True, print a summary of each factorisation.  Default is False.

    Examples
    --------
    >>> from pygridapprox import GridBasis
    >>> basis = GridBasis.build([(0.0, 4.0, 5)], family="lagrange")
    >>> coeffs = Fitter().fit(basis, basis.nodes()[:, 0] ** 2)
    >>> coeffs.shape
    (5,)
    """

    def __init__(self, rcond: float | None = None,
                 warn_condition: float = DEFAULT_WARN_CONDITION,
                 verbose: bool = False):
        self.rcond = rcond
        self.warn_condition = warn_condition
        self.verbose = verbose

    def factorize(self, basis) -> Factorization:
        """Factorise ``basis.basis_matrix(basis.nodes())``.

        Raises
        ------
        SingularBasisError
            If the basis matrix is rank-deficient.
        """
        if self.verbose:
            print(f"Factorizing {basis.num_nodes:,} x {basis.num_basis_functions:,} "
                  f"basis matrix ({basis.num_dimensions}D)...")
        start = time.time()
        factorization = Factorization(
            basis.basis_matrix(basis.nodes()),
            rcond=self.rcond,
            warn_condition=self.warn_condition,
        )
        if self.verbose:
            print(f"  Factorized in {time.time() - start:.3f}s "
                  f"(rank {factorization.rank}, "
                  f"cond {factorization.condition:.2e})")
        return factorization

    def fit(self, basis, sampled_values) -> np.ndarray:
        """Fit coefficients to values sampled at ``basis.nodes()``.

        Parameters
        ----------
        basis : GridBasis or SmolyakBasis
            Basis whose nodes were sampled.
        sampled_values : array_like of shape (num_nodes,) or (num_nodes, k)
            One value per node, or one column per target function.

        Returns
        -------
        ndarray of shape (num_basis_functions,) or (num_basis_functions, k)

        Raises
        ------
        DimensionMismatchError
            If the number of samples differs from ``basis.num_nodes``.
        ValueError
            If the samples contain NaN or Inf.
        SingularBasisError
            If the basis matrix is rank-deficient.
        """
        values = _as_samples(sampled_values, basis.num_nodes)
        return self.factorize(basis).solve(values)

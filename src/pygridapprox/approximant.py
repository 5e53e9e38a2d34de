"""Fitted approximations: a basis paired with a coefficient vector.

An :class:`Approximant` evaluates ``basis_matrix(points, order) @ coefficients``.
With a coefficient *matrix* (one column per target function) a single
basis evaluation serves all functions at once.
"""

from __future__ import annotations

import os
import pickle
import time
import warnings
from typing import List, Sequence

import numpy as np

from pygridapprox._validation import _as_samples
from pygridapprox.exceptions import DimensionMismatchError
from pygridapprox.fitting import Factorization, Fitter


class Approximant:
    """Approximation of one or more functions on a shared basis.

    Parameters
    ----------
    basis : GridBasis or SmolyakBasis
        Basis the coefficients refer to.  Shared, never modified.
    coefficients : array_like of shape (num_basis_functions,) or (num_basis_functions, k)
        Basis weights; copied on construction.
    fitter : Fitter, optional
        Solver used by :meth:`update_coefficients`.  Default ``Fitter()``.

    Raises
    ------
    DimensionMismatchError
        If the coefficient count differs from ``basis.num_basis_functions``.

    Examples
    --------
    >>> from pygridapprox import GridBasis
    >>> basis = GridBasis.build([(0.0, 4.0, 5)], family="lagrange")
    >>> approx = Approximant.fit(basis, basis.nodes()[:, 0])
    >>> round(approx.eval([2.5]), 12)
    2.5
    """

    def __init__(self, basis, coefficients, fitter: Fitter | None = None):
        coefficients = np.array(coefficients, dtype=float)
        if coefficients.ndim not in (1, 2):
            raise DimensionMismatchError(
                f"Coefficients must be 1-D or 2-D, got {coefficients.ndim}-D array"
            )
        if coefficients.shape[0] != basis.num_basis_functions:
            raise DimensionMismatchError(
                f"Got {coefficients.shape[0]} coefficients for "
                f"{basis.num_basis_functions} basis functions"
            )
        if not np.isfinite(coefficients).all():
            raise ValueError("coefficients contains NaN or Inf")

        self.basis = basis
        self.coefficients = coefficients
        self.fitter = fitter if fitter is not None else Fitter()
        self.fit_time: float = 0.0
        self.residual_norm: float | None = None
        self._factorization: Factorization | None = None

    @classmethod
    def fit(cls, basis, sampled_values, fitter: Fitter | None = None,
            verbose: bool = False) -> "Approximant":
        """Fit coefficients to values sampled at ``basis.nodes()``.

        Parameters
        ----------
        basis : GridBasis or SmolyakBasis
            Basis whose nodes were sampled.
        sampled_values : array_like of shape (num_nodes,) or (num_nodes, k)
            Target function values at the nodes, one column per function.
        fitter : Fitter, optional
            Solver configuration.  Default ``Fitter()``.
        verbose : bool, optional
            If True, print fit progress.  Default is False.

        Returns
        -------
        Approximant

        Raises
        ------
        DimensionMismatchError
            If the number of samples differs from ``basis.num_nodes``.
        SingularBasisError
            If the basis matrix is rank-deficient.
        """
        fitter = fitter if fitter is not None else Fitter()
        values = _as_samples(sampled_values, basis.num_nodes)
        if verbose:
            n_out = 1 if values.ndim == 1 else values.shape[1]
            print(f"Fitting {basis.num_basis_functions:,} coefficients "
                  f"from {basis.num_nodes:,} samples ({n_out} output(s))...")

        start = time.time()
        factorization = fitter.factorize(basis)
        coefficients = factorization.solve(values)

        obj = cls(basis, coefficients, fitter)
        obj._factorization = factorization
        obj.fit_time = time.time() - start
        obj.residual_norm = factorization.residual(values, coefficients)

        if verbose:
            print(f"  Fitted in {obj.fit_time:.3f}s "
                  f"(residual {obj.residual_norm:.2e}, "
                  f"cond {factorization.condition:.2e})")
        return obj

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def num_dimensions(self) -> int:
        return self.basis.num_dimensions

    @property
    def num_outputs(self) -> int:
        """Number of target functions represented (columns of ``coefficients``)."""
        return 1 if self.coefficients.ndim == 1 else self.coefficients.shape[1]

    @property
    def condition_number(self) -> float | None:
        """Condition estimate of the fit, if this approximant was fitted."""
        if self._factorization is None:
            return None
        return self._factorization.condition

    def nodes(self) -> np.ndarray:
        """Grid nodes of the underlying basis."""
        return self.basis.nodes()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, points, derivative_order: Sequence[int] | None = None) -> np.ndarray:
        """Evaluate the approximation, or a partial derivative, at many points.

        Parameters
        ----------
        points : array_like of shape (N, num_dimensions)
            Query points.  On a 1-D basis a flat sequence such as
            ``[0.5, 2.5]`` is a batch of points; otherwise it is one point.
        derivative_order : sequence of int, optional
            Derivative order per dimension (0 = function value).  Default
            is all zeros.

        Returns
        -------
        ndarray of shape (N,) or (N, num_outputs)

        Raises
        ------
        DimensionMismatchError
            If the points or *derivative_order* have the wrong dimension.
        """
        return self.basis.basis_matrix(points, derivative_order) @ self.coefficients

    __call__ = evaluate

    def eval(self, point: Sequence[float], derivative_order: Sequence[int] | None = None):
        """Evaluate at a single point.

        Returns
        -------
        float or ndarray of shape (num_outputs,)
            A float for a single target function.
        """
        result = self.evaluate([point], derivative_order)[0]
        if self.coefficients.ndim == 1:
            return float(result)
        return result

    def eval_multi(self, point: Sequence[float],
                   derivative_orders: Sequence[Sequence[int]]) -> List:
        """Evaluate several derivative orders at the same point.

        Parameters
        ----------
        point : list of float
            Query point.
        derivative_orders : list of list of int
            Each inner list specifies derivative order per dimension.

        Returns
        -------
        list
            One result per derivative order, as returned by :meth:`eval`.
        """
        return [self.eval(point, order) for order in derivative_orders]

    # ------------------------------------------------------------------
    # Refitting
    # ------------------------------------------------------------------

    def update_coefficients(self, new_sampled_values) -> None:
        """Re-fit against new samples on the same nodes, replacing coefficients.

        The basis is untouched and its factorisation is reused across
        calls.  Coefficients are only replaced once the solve succeeds.
        Concurrent calls on one approximant must be serialised by the
        caller.

        Parameters
        ----------
        new_sampled_values : array_like of shape (num_nodes,) or (num_nodes, k)

        Raises
        ------
        DimensionMismatchError
            If the number of samples differs from ``basis.num_nodes``.
        ValueError
            If the samples contain NaN or Inf.
        SingularBasisError
            If no factorisation is cached (after :meth:`load`, or for an
            approximant built from coefficients) and the basis matrix turns
            out to be rank-deficient when it is factorised.
        """
        values = _as_samples(new_sampled_values, self.basis.num_nodes)
        start = time.time()
        factorization = self._factorization
        if factorization is None:
            factorization = self.fitter.factorize(self.basis)
        coefficients = factorization.solve(values)

        self._factorization = factorization
        self.coefficients = coefficients
        self.fit_time = time.time() - start
        self.residual_norm = factorization.residual(values, coefficients)

    # ------------------------------------------------------------------
    # Internal factory for arithmetic operators
    # ------------------------------------------------------------------

    @classmethod
    def _from_basis(cls, source, coefficients):
        """New approximant sharing basis, fitter and factorisation with *source*."""
        obj = cls(source.basis, coefficients, source.fitter)
        obj._factorization = source._factorization
        return obj

    # ------------------------------------------------------------------
    # Arithmetic operators
    # ------------------------------------------------------------------

    def __add__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        from pygridapprox._algebra import _check_compatible
        _check_compatible(self, other)
        return Approximant._from_basis(self, self.coefficients + other.coefficients)

    def __sub__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        from pygridapprox._algebra import _check_compatible
        _check_compatible(self, other)
        return Approximant._from_basis(self, self.coefficients - other.coefficients)

    def __mul__(self, scalar):
        from pygridapprox._algebra import _is_scalar
        if not _is_scalar(scalar):
            return NotImplemented
        return Approximant._from_basis(self, self.coefficients * float(scalar))

    def __rmul__(self, scalar):
        return self.__mul__(scalar)

    def __truediv__(self, scalar):
        from pygridapprox._algebra import _is_scalar
        if not _is_scalar(scalar):
            return NotImplemented
        return self.__mul__(1.0 / float(scalar))

    def __neg__(self):
        return self.__mul__(-1.0)

    def __iadd__(self, other):
        from pygridapprox._algebra import _check_compatible
        _check_compatible(self, other)
        self.coefficients = self.coefficients + other.coefficients
        return self

    def __isub__(self, other):
        from pygridapprox._algebra import _check_compatible
        _check_compatible(self, other)
        self.coefficients = self.coefficients - other.coefficients
        return self

    def __imul__(self, scalar):
        from pygridapprox._algebra import _is_scalar
        if not _is_scalar(scalar):
            return NotImplemented
        self.coefficients = self.coefficients * float(scalar)
        return self

    def __itruediv__(self, scalar):
        from pygridapprox._algebra import _is_scalar
        if not _is_scalar(scalar):
            return NotImplemented
        return self.__imul__(1.0 / float(scalar))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def __getstate__(self) -> dict:
        """Return picklable state, excluding the cached factorisation."""
        from pygridapprox._version import __version__

        state = self.__dict__.copy()
        state["_factorization"] = None
        state["_pygridapprox_version"] = __version__
        return state

    def __setstate__(self, state: dict) -> None:
        """Restore state; the factorisation is rebuilt on the next update."""
        from pygridapprox._version import __version__

        saved_version = state.pop("_pygridapprox_version", None)
        if saved_version is not None and saved_version != __version__:
            warnings.warn(
                f"This object was saved with pygridapprox {saved_version}, "
                f"but you are loading it with {__version__}. "
                f"Evaluation results may differ if internal data layout changed.",
                UserWarning,
                stacklevel=2,
            )
        self.__dict__.update(state)

    def save(self, path: str | os.PathLike) -> None:
        """Save the approximant (basis and coefficients) to a file.

        Parameters
        ----------
        path : str or path-like
            Destination file path.
        """
        with open(os.fspath(path), "wb") as f:
            pickle.dump(self, f, protocol=pickle.HIGHEST_PROTOCOL)

    @classmethod
    def load(cls, path: str | os.PathLike) -> "Approximant":
        """Load a previously saved approximant from a file.

        Parameters
        ----------
        path : str or path-like
            Path to the saved file.

        Returns
        -------
        Approximant
            The restored approximant, ready to evaluate.

        Warns
        -----
        UserWarning
            If the file was saved with a different pygridapprox version.

        .. warning::

            This method uses :mod:`pickle` internally. Pickle can execute
            arbitrary code during deserialization. **Only load files you
            trust.**
        """
        with open(os.fspath(path), "rb") as f:
            obj = pickle.load(f)  # noqa: S301
        if not isinstance(obj, cls):
            raise TypeError(
                f"Expected a {cls.__name__} instance, got {type(obj).__name__}"
            )
        return obj

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"Approximant("
            f"basis={self.basis!r}, "
            f"outputs={self.num_outputs})"
        )

    def __str__(self) -> str:
        lines = [
            f"Approximant ({self.num_dimensions}D, {self.num_outputs} output(s))",
            f"  Basis:       {self.basis!r}",
            f"  Coeffs:      {self.coefficients.shape[0]:,} per output",
        ]
        if self.residual_norm is not None:
            lines.append(
                f"  Fit:         {self.fit_time:.3f}s, "
                f"RMS residual {self.residual_norm:.2e}"
            )
        if self.condition_number is not None:
            lines.append(f"  Condition:   {self.condition_number:.2e}")
        return "\n".join(lines)
